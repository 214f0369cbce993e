"""
Google Gemini REST adapter.
Source: https://ai.google.dev/api/generate-content
One synchronous generateContent call per invocation, fixed timeout,
no retries, the caller decides what to do with a failure.
"""

import logging
from typing import Optional

import requests

from healthai.errors import UpstreamError
from healthai.services.response_parser import extract_generated_text

logger = logging.getLogger("healthai.llm")

DEFAULT_TIMEOUT = 30

# Sent as a header, never as a URL query parameter.
API_KEY_HEADER = "x-goog-api-key"


class GeminiGateway:
    """Sends prompts to a Gemini model and returns the raw response body."""

    def __init__(self, base_url: str, model: str, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    @staticmethod
    def build_envelope(prompt: str) -> dict:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    def complete(self, prompt: str, api_key: str) -> str:
        """POST the prompt; return the raw JSON body as text."""
        try:
            resp = self.session.post(
                self.endpoint,
                json=self.build_envelope(prompt),
                headers={"Content-Type": "application/json", API_KEY_HEADER: api_key},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            logger.error("Gemini request timed out after %ss", self.timeout)
            raise UpstreamError(f"Gemini request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            logger.error("Gemini request failed: %s", type(exc).__name__)
            raise UpstreamError(f"Gemini request failed: {type(exc).__name__}") from exc

        if resp.status_code != 200:
            logger.error("Gemini API error: status=%s body=%.1000s", resp.status_code, resp.text)
            raise UpstreamError(
                f"Gemini API request failed with status code: {resp.status_code}",
                detail={"status_code": resp.status_code},
            )
        return resp.text

    def complete_text(self, prompt: str, api_key: str) -> str:
        """complete() followed by envelope extraction."""
        return extract_generated_text(self.complete(prompt, api_key))
