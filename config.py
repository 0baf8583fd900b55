"""
Configuration management for the Alpha gateway.

Loads environment variables from .env file and provides typed access to configuration.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Transport and process configuration."""

    # WhatsApp Cloud API
    WHATSAPP_ACCESS_TOKEN = os.getenv("WHATSAPP_ACCESS_TOKEN", "")
    WHATSAPP_PHONE_NUMBER_ID = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
    WHATSAPP_API_VERSION = os.getenv("WHATSAPP_API_VERSION", "v18.0")
    WHATSAPP_GRAPH_URL = os.getenv("WHATSAPP_GRAPH_URL", "https://graph.facebook.com")
    WHATSAPP_APP_SECRET = os.getenv("WHATSAPP_APP_SECRET", "")
    WHATSAPP_VERIFY_TOKEN = os.getenv("WHATSAPP_VERIFY_TOKEN", "")

    # Human operator who answers escalated queries
    OPERATOR_ID = os.getenv("OPERATOR_ID") or os.getenv("ADMIN_JID", "")

    # Server
    AGENT_PORT = int(os.getenv("AGENT_PORT", "8000"))
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "info")

    @classmethod
    def missing(cls) -> list[str]:
        """Names of required settings that are empty."""
        required = [
            "WHATSAPP_ACCESS_TOKEN",
            "WHATSAPP_PHONE_NUMBER_ID",
            "WHATSAPP_APP_SECRET",
            "OPERATOR_ID",
        ]
        return [key for key in required if not getattr(cls, key)]

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        missing = cls.missing()

        if missing:
            print(f"⚠️  Missing required environment variables: {', '.join(missing)}")
            print(f"   Please set them in .env file")
            return False

        return True


if __name__ == "__main__":
    print("Configuration loaded:")
    print(f"  WhatsApp Token: {'✓ Set' if Config.WHATSAPP_ACCESS_TOKEN else '✗ Missing'}")
    print(f"  Phone Number ID: {Config.WHATSAPP_PHONE_NUMBER_ID or '✗ Missing'}")
    print(f"  Operator: {Config.OPERATOR_ID or '✗ Missing'}")
    print(f"  Agent Port: {Config.AGENT_PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
