"""Google Cloud Vision TEXT_DETECTION client for chat screenshots."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import time
from dataclasses import dataclass

import httpx

from huddle_engine.exceptions import ConfigurationError, OCRError
from huddle_engine.models.domain import OCRResult
from huddle_engine.observability.logger import get_logger

logger = get_logger("vision_ocr")

DEFAULT_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"


def to_base64_content(image: bytes | str) -> str:
    """Normalise raw bytes, a base64 string or a data URL to bare base64."""
    if isinstance(image, bytes):
        if not image:
            raise OCRError("Image content is empty")
        return base64.b64encode(image).decode("ascii")

    content = image.strip()
    if content.startswith("data:"):
        _, _, content = content.partition(",")
    if not content:
        raise OCRError("Image content is empty")
    try:
        base64.b64decode(content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise OCRError(f"Image data is not valid base64: {e}") from e
    return content


def _describe_api_error(message: str) -> str:
    if "billing" in message:
        return "Billing must be enabled for the Google Cloud project"
    if "API key not valid" in message:
        return "Invalid Google Cloud API key"
    if "not been used" in message or "disabled" in message:
        return "Google Cloud Vision API is not enabled for this project"
    return f"Google Vision API error: {message}"


@dataclass(frozen=True)
class VisionOCRClient:
    api_key: str
    endpoint: str = DEFAULT_ENDPOINT
    timeout_seconds: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None

    def with_options(self, **changes) -> VisionOCRClient:
        return dataclasses.replace(self, **changes)

    async def extract_text(self, image: bytes | str) -> OCRResult:
        """Run TEXT_DETECTION on one image. Failures come back as ``success=False``."""
        start = time.monotonic()
        try:
            text = await self._annotate(to_base64_content(image))
        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error("ocr_failed", error=str(e), processing_time=round(elapsed, 3))
            return OCRResult(text="", success=False, processing_time=elapsed, error=str(e))

        elapsed = time.monotonic() - start
        logger.info("ocr_completed", chars=len(text), processing_time=round(elapsed, 3))
        return OCRResult(text=text, success=True, processing_time=elapsed)

    async def _annotate(self, content: str) -> str:
        if not self.api_key:
            raise ConfigurationError("Google Cloud Vision API key not configured")

        body = {
            "requests": [
                {
                    "image": {"content": content},
                    "features": [{"type": "TEXT_DETECTION", "maxResults": 1}],
                }
            ]
        }
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            response = await client.post(self.endpoint, params={"key": self.api_key}, json=body)

        if response.is_error:
            try:
                message = response.json().get("error", {}).get("message") or response.text
            except ValueError:
                message = response.text
            raise OCRError(_describe_api_error(message or f"HTTP {response.status_code}"))

        results = response.json().get("responses") or [{}]
        first = results[0]
        if first.get("error"):
            raise OCRError(f"Vision API error: {first['error'].get('message', 'unknown error')}")
        annotations = first.get("textAnnotations") or []
        if not annotations:
            return ""
        return (annotations[0].get("description") or "").strip()
