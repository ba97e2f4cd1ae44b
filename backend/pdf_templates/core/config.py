# File: backend/pdf_templates/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    PROJECT_NAME: str = "PDF Template Codec"
    PROJECT_VERSION: str = "0.1.0"

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Extraction layout
    TEMPLATE_DEFAULT_FONT_NAME: str = os.getenv("TEMPLATE_DEFAULT_FONT_NAME", "Helvetica")
    TEMPLATE_DEFAULT_FONT_SIZE: float = float(os.getenv("TEMPLATE_DEFAULT_FONT_SIZE", "12"))
    TEMPLATE_MARGIN: float = float(os.getenv("TEMPLATE_MARGIN", "40"))
    TEMPLATE_LINE_HEIGHT: float = float(os.getenv("TEMPLATE_LINE_HEIGHT", "14"))

    # "proportional" or "native"
    TEMPLATE_TEXT_SOURCE: str = os.getenv("TEMPLATE_TEXT_SOURCE", "proportional")

    # Generation
    TEMPLATE_MISSING_FIELD_BEHAVIOR: str = os.getenv(
        "TEMPLATE_MISSING_FIELD_BEHAVIOR", "leave_placeholder"
    )

    # PyMuPDF save options
    PDF_SAVE_GARBAGE: int = int(os.getenv("PDF_SAVE_GARBAGE", "4"))
    PDF_SAVE_DEFLATE: bool = _env_bool("PDF_SAVE_DEFLATE", "true")


settings = Settings()
