"""
HealthAI Backend – Configuration Loader
Loads all secrets and settings from .env via environment variables.
No secret may be hard-coded anywhere in the codebase.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)

# Placeholder used when a credential was never supplied
MISSING = "NOT_FOUND"


class Config:
    """Base configuration – values sourced exclusively from environment."""

    # --- Secrets ---
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    FLASK_SECRET_KEY: str = os.environ.get("FLASK_SECRET_KEY", "")
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", MISSING)
    GOOGLE_VISION_API_KEY: str = os.environ.get("GOOGLE_VISION_API_KEY", "")

    # --- LLM (Gemini REST) ---
    GEMINI_API_BASE: str = os.environ.get(
        "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
    )
    GEMINI_MODEL: str = os.environ.get("GEMINI_MODEL", "gemini-pro")
    LLM_TIMEOUT_SECONDS: float = float(os.environ.get("LLM_TIMEOUT_SECONDS", "30"))

    # --- OCR ---
    OCR_BACKEND: str = os.environ.get("OCR_BACKEND", "disabled").lower()   # disabled | tesseract | google
    TESSDATA_DIR: str = os.environ.get("TESSDATA_DIR", "/usr/share/tesseract-ocr/5/tessdata")
    TESSERACT_LANG: str = os.environ.get("TESSERACT_LANG", "eng")
    GOOGLE_VISION_ENDPOINT: str = os.environ.get(
        "GOOGLE_VISION_ENDPOINT", "https://vision.googleapis.com/v1/images:annotate"
    )
    OCR_TIMEOUT_SECONDS: float = float(os.environ.get("OCR_TIMEOUT_SECONDS", "30"))

    # --- App ---
    APP_ENV: str = os.environ.get("APP_ENV", "development")
    DEBUG: bool = APP_ENV == "development"
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    # --- Rate limiting ---
    RATE_LIMIT_DEFAULT: str = os.environ.get("RATE_LIMIT_DEFAULT", "60/minute")

    # --- Validation ---
    @classmethod
    def validate(cls) -> None:
        """Raise on missing critical environment variables.

        The Gemini key is deliberately absent here: it is checked on every
        generation call so the rest of the API stays usable without it.
        """
        required = ["DATABASE_URL", "FLASK_SECRET_KEY"]
        missing = [k for k in required if not getattr(cls, k)]
        if missing:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Ensure a .env file exists with all required values."
            )
