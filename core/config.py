"""Environment-driven settings for the quote tool."""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Runtime configuration read from the environment / ``.env``."""

    # Pricing
    RATE_SHEET_PATH: str = os.getenv("DOMUS_RATE_SHEET_PATH", "")

    # Logging
    LOG_LEVEL: str = os.getenv("DOMUS_LOG_LEVEL", "INFO")

    # Quote desk notifications
    SENDGRID_API_KEY: str = os.getenv("SENDGRID_API_KEY", "")
    QUOTE_DESK_EMAIL: str = os.getenv("DOMUS_QUOTE_DESK_EMAIL", "")
    QUOTE_FROM_EMAIL: str = os.getenv("DOMUS_QUOTE_FROM_EMAIL", "noreply@domuslending.com")

    # Narrative service
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
    NARRATIVE_MODEL: str = os.getenv("DOMUS_NARRATIVE_MODEL", "gpt-4o-mini")


def configure_logging(level=None) -> None:
    logging.basicConfig(
        level=(level or Settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
