"""
Confidence policy for completion results.

A crude substring heuristic, not a semantic judgment: an answer is treated as
low-confidence when the backend failed or the text contains the hedging
phrase. Low-confidence answers are escalated to a human instead of sent.
"""

from typing import Optional

from inference import CompletionResponse

HEDGING_PHRASE = "I don't know"


def is_low_confidence(response: Optional[CompletionResponse]) -> bool:
    """Return True if the completion must be escalated instead of answered."""
    if response is None or response.status != "success":
        return True
    if not response.output:
        return True
    return HEDGING_PHRASE in response.output
