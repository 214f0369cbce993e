"""
Prescription generation pipeline.
Visit notes + history → Gemini → parsed fields → one Prescription row.

This is a DRAFTING tool: every generated prescription carries the raw
model text in its notes for clinician review.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from healthai.config import MISSING
from healthai.errors import ConfigurationError, InputError
from healthai.repositories import PrescriptionRepository, parse_uuid, unit_of_work
from healthai.services.llm_gateway import GeminiGateway
from healthai.services.prompt_builder import build_prescription_prompt
from healthai.services.response_parser import (
    PARSE_ERROR,
    PrescriptionFieldParser,
    extract_generated_text,
)

logger = logging.getLogger("healthai.prescription")

NOTES_PREFIX = "Generated by AI. LLM Raw Text: "


@dataclass
class PrescriptionRequest:
    patient_id: str
    clinician_id: str
    visit_notes: str = ""
    medical_history: dict = field(default_factory=dict)
    insurance_details: dict = field(default_factory=dict)
    visit_id: Optional[str] = None

    @classmethod
    def from_json(cls, data: dict) -> "PrescriptionRequest":
        if not isinstance(data, dict):
            raise InputError("Request body must be a JSON object.")
        for key in ("medicalHistory", "insuranceDetails"):
            value = data.get(key)
            if value is not None and not isinstance(value, dict):
                raise InputError(f"'{key}' must be an object.")
        return cls(
            patient_id=data.get("patientId"),
            clinician_id=data.get("clinicianId"),
            visit_notes=data.get("visitNotes") or "",
            medical_history=data.get("medicalHistory") or {},
            insurance_details=data.get("insuranceDetails") or {},
            visit_id=data.get("visitId"),
        )


def require_api_key(api_key) -> str:
    """Fail fast when the Gemini key is absent or still the placeholder."""
    if not api_key or not str(api_key).strip() or api_key == MISSING:
        logger.error("GEMINI_API_KEY not configured.")
        raise ConfigurationError("GEMINI_API_KEY is not configured.")
    return api_key


class PrescriptionPipeline:
    def __init__(self, gateway: GeminiGateway, parser: PrescriptionFieldParser,
                 repository: PrescriptionRepository, session, api_key: str):
        self.gateway = gateway
        self.parser = parser
        self.repository = repository
        self.session = session
        self.api_key = api_key

    def generate_and_save(self, request: PrescriptionRequest):
        """
        Run the full pipeline as one unit of work:
          1. check the API key                 → ConfigurationError
          2. parse patient/clinician/visit ids → InputError (nothing called, nothing written)
          3. build the prompt
          4. call Gemini                       → UpstreamError
          5. extract + parse fields            → never fatal, "Parse Error" flows through
          6. persist                           → StorageError, rolled back
        Returns the saved Prescription.
        """
        api_key = require_api_key(self.api_key)

        patient_id = parse_uuid(request.patient_id, "patientId")
        clinician_id = parse_uuid(request.clinician_id, "clinicianId")
        visit_id = parse_uuid(request.visit_id, "visitId") if request.visit_id else None

        prompt = build_prescription_prompt(request)
        logger.debug("Generated prompt for patient %s: %s", patient_id, prompt)

        raw = self.gateway.complete(prompt, api_key)

        text = extract_generated_text(raw)
        parsed = self.parser.parse(text)
        if parsed.medication == PARSE_ERROR:
            logger.warning("Could not parse medication from LLM text for patient %s: %s", patient_id, text)
        logger.info("Parsed prescription: medication=%s dosage=%s frequency=%s",
                    parsed.medication, parsed.dosage, parsed.frequency)

        with unit_of_work(self.session):
            prescription = self.repository.create(
                patient_id=patient_id,
                clinician_id=clinician_id,
                visit_id=visit_id,
                medication=parsed.medication,
                dosage=parsed.dosage,
                frequency=parsed.frequency,
                notes=NOTES_PREFIX + text,
            )

        logger.info("Prescription %s saved for patient %s", prescription.id, patient_id)
        return prescription
