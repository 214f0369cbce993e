"""
OCR adapter.
Decodes a base64 image (optionally a data URI) and hands the bytes to a
configurable text-extraction backend:
  - tesseract : local Tesseract via pytesseract, tessdata from config
  - google    : Google Cloud Vision images:annotate (TEXT_DETECTION)
  - disabled  : no backend, a fixed mock string is returned so callers
                are never blocked by missing OCR infrastructure
"""

import base64
import binascii
import io
import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from healthai.errors import ConfigurationError, InputError, UpstreamError

logger = logging.getLogger("healthai.ocr")

OCR_DISABLED_TEXT = "OCR is disabled. This is mock extracted text."
NO_TEXT_FOUND = "No text found in image."

# Google API key header; never sent as a URL query parameter.
API_KEY_HEADER = "x-goog-api-key"


def decode_base64_image(data: str) -> bytes:
    """Strip an optional 'data:...;base64,' prefix and decode strictly."""
    if not data or not isinstance(data, str):
        raise InputError("Base64 image data cannot be null or empty.")

    payload = data.split(",", 1)[1] if "," in data else data
    try:
        image_bytes = base64.b64decode(payload.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        logger.warning("Failed to decode base64 image string: %s", exc)
        raise InputError("Invalid Base64 image data.") from exc

    if not image_bytes:
        raise InputError("Base64 image data cannot be null or empty.")
    return image_bytes


class OcrBackend(ABC):
    """Text-extraction engine behind the OCR adapter."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def extract(self, image_bytes: bytes) -> str:
        ...


class TesseractBackend(OcrBackend):
    """Local Tesseract engine reading language data from a configured directory."""

    def __init__(self, data_dir: str, lang: str = "eng"):
        self.data_dir = data_dir
        self.lang = lang

    @property
    def name(self) -> str:
        return "tesseract"

    def extract(self, image_bytes: bytes) -> str:
        import pytesseract
        from PIL import Image, UnidentifiedImageError

        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            logger.warning("Could not read image data: %s", exc)
            raise InputError("Could not read image data; unsupported format or corrupt data.") from exc

        config = f'--tessdata-dir "{self.data_dir}"' if self.data_dir else ""
        try:
            return pytesseract.image_to_string(image, lang=self.lang, config=config)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            logger.error("Tesseract OCR processing failed: %s", exc)
            raise UpstreamError(f"Tesseract OCR processing failed: {exc}") from exc


class GoogleVisionBackend(OcrBackend):
    """Google Cloud Vision REST text detection (API-key auth)."""

    def __init__(self, api_key: str, endpoint: str, timeout: float = 30,
                 session: Optional[requests.Session] = None):
        if not api_key:
            raise ConfigurationError("GOOGLE_VISION_API_KEY is not configured.")
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def name(self) -> str:
        return "google"

    def extract(self, image_bytes: bytes) -> str:
        body = {
            "requests": [{
                "image": {"content": base64.b64encode(image_bytes).decode("ascii")},
                "features": [{"type": "TEXT_DETECTION"}],
            }]
        }
        try:
            resp = self.session.post(self.endpoint, headers={API_KEY_HEADER: self.api_key},
                                     json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Vision API request failed: %s", type(exc).__name__)
            raise UpstreamError(f"Vision API request failed: {type(exc).__name__}") from exc

        if resp.status_code != 200:
            logger.error("Vision API error: status=%s body=%.1000s", resp.status_code, resp.text)
            raise UpstreamError(f"Vision API request failed with status code: {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Vision API returned a non-JSON body") from exc

        responses = data.get("responses") or []
        if not responses:
            raise UpstreamError("Vision API returned an empty response list")

        first = responses[0]
        if first.get("error"):
            message = first["error"].get("message", "unknown error")
            logger.error("Vision API reported an error: %s", message)
            raise UpstreamError(f"Vision API error: {message}")

        full_text = (first.get("fullTextAnnotation") or {}).get("text")
        if full_text:
            return full_text
        annotations = first.get("textAnnotations") or []
        if annotations and annotations[0].get("description"):
            return annotations[0]["description"]
        return NO_TEXT_FOUND


class OcrService:
    def __init__(self, backend: Optional[OcrBackend] = None):
        self.backend = backend

    def extract_text(self, base64_image: str) -> str:
        image_bytes = decode_base64_image(base64_image)
        logger.info("OCR request: %d bytes, backend=%s",
                    len(image_bytes), self.backend.name if self.backend else "disabled")

        if self.backend is None:
            return OCR_DISABLED_TEXT

        text = self.backend.extract(image_bytes)
        return text.strip() if text else ""


def build_ocr_backend(config) -> Optional[OcrBackend]:
    """Pick the backend named by config.OCR_BACKEND; None means disabled."""
    kind = (config.OCR_BACKEND or "disabled").lower()
    if kind == "disabled":
        return None
    if kind == "tesseract":
        return TesseractBackend(config.TESSDATA_DIR, config.TESSERACT_LANG)
    if kind == "google":
        return GoogleVisionBackend(
            api_key=config.GOOGLE_VISION_API_KEY,
            endpoint=config.GOOGLE_VISION_ENDPOINT,
            timeout=config.OCR_TIMEOUT_SECONDS,
        )
    raise ConfigurationError(
        f"Unknown OCR_BACKEND: {kind!r}. Known backends: ['disabled', 'tesseract', 'google']"
    )
