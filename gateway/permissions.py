"""
Permission Store

Durable allow-list of approved conversations, kept as a JSON document:

    {"allowed": ["15551234567", ...]}

Rules:
- Every check re-reads the file (manual edits apply immediately)
- Read failures fail CLOSED: missing or corrupt storage means "not approved"
- grant() is idempotent and persists before returning
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


class PermissionStoreError(Exception):
    """Permission document could not be written."""
    pass


class PermissionStore:
    """JSON-file backed allow-list."""

    def __init__(self, path: Union[str, Path] = "permissions.json"):
        self.path = Path(path)

    def _read_allowed(self) -> List[str]:
        """
        Load the allowed list.

        Raises:
            OSError: File missing or unreadable
            ValueError: Corrupt JSON or wrong document shape
        """
        with open(self.path, "r", encoding="utf-8") as f:
            document = json.load(f)

        allowed = document.get("allowed") if isinstance(document, dict) else None
        if not isinstance(allowed, list):
            raise ValueError("Permission document has no 'allowed' list")
        return allowed

    def is_approved(self, conversation_id: str) -> bool:
        """Return True if the conversation is on the allow-list."""
        try:
            return conversation_id in self._read_allowed()
        except (OSError, ValueError) as e:
            logger.debug(
                f"Permission read failed, treating as not approved: {e}",
                extra={"conversation_id": conversation_id},
            )
            return False

    def grant(self, conversation_id: str) -> None:
        """
        Add a conversation to the allow-list.

        A missing or corrupt document is replaced by a fresh one.

        Raises:
            PermissionStoreError: The document could not be written
        """
        try:
            allowed = self._read_allowed()
        except (OSError, ValueError):
            allowed = []

        if conversation_id in allowed:
            return

        allowed.append(conversation_id)
        self._write({"allowed": allowed})
        logger.info(
            f"Access granted to {conversation_id}",
            extra={"conversation_id": conversation_id},
        )

    def _write(self, document: dict) -> None:
        """Write via temp file + rename so readers never see a partial document."""
        directory = self.path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PermissionStoreError(f"Failed to write {self.path}: {e}")
