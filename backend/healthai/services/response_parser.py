"""
Gemini response parsing.
Stage 1 pulls the generated text out of the provider envelope.
Stage 2 extracts Medication / Dosage / Frequency from that free text.

Neither stage raises: unparsable input degrades to sentinel values so a
partial prescription can still be stored alongside its raw text.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger("healthai.parser")

PARSE_ERROR = "Parse Error"
TEXT_NOT_FOUND = "Error: Could not extract text from response"
TEXT_MALFORMED = "Error: Failed parsing response structure"

_LABELS = ("Medication", "Dosage", "Frequency")
_NEXT_LABEL = r"(?=\b(?:" + "|".join(_LABELS) + r"):|\Z)"
_TRAILING_PUNCT = re.compile(r"[\s,.]+$")


@dataclass
class ParsedPrescription:
    medication: str
    dosage: str
    frequency: str


def extract_generated_text(raw_response: str) -> str:
    """Return candidates[0].content.parts[0].text, or a sentinel string."""
    try:
        body = json.loads(raw_response)
    except (TypeError, ValueError):
        logger.error("Gemini response is not valid JSON: %.500s", raw_response)
        return TEXT_MALFORMED

    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        logger.warning("No 'text' field at the expected path in Gemini response: %.500s", raw_response)
        return TEXT_NOT_FOUND

    if not isinstance(text, str):
        return TEXT_NOT_FOUND
    return text


class PrescriptionFieldParser(ABC):
    """Strategy for turning the model's reply into prescription fields."""

    @abstractmethod
    def parse(self, text: str) -> ParsedPrescription:
        ...


class LabelledFieldParser(PrescriptionFieldParser):
    """
    Reads 'Medication: X, Dosage: Y, Frequency: Z'. Labels are matched
    case-insensitively; each value runs until the next label or the end
    of the text.
    """

    _patterns = {
        label.lower(): re.compile(rf"\b{label}:\s*(.*?)\s*{_NEXT_LABEL}", re.IGNORECASE | re.DOTALL)
        for label in _LABELS
    }

    def _field(self, name: str, text: str) -> str:
        match = self._patterns[name].search(text)
        if not match:
            return PARSE_ERROR
        value = _TRAILING_PUNCT.sub("", match.group(1)).strip()
        return value or PARSE_ERROR

    def parse(self, text: str) -> ParsedPrescription:
        text = text or ""
        return ParsedPrescription(
            medication=self._field("medication", text),
            dosage=self._field("dosage", text),
            frequency=self._field("frequency", text),
        )
