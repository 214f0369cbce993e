"""
Explicit service wiring.
Everything with an outside dependency (HTTP session, API keys, OCR
backend, DB session) is constructed here once from the Config object
and handed to the routes through app.extensions.
"""

from dataclasses import dataclass

from flask import current_app

from healthai.database import db
from healthai.repositories import (
    ClinicianRepository,
    PatientRepository,
    PrescriptionRepository,
    VisitRepository,
)
from healthai.services.llm_gateway import GeminiGateway
from healthai.services.ocr_service import OcrService, build_ocr_backend
from healthai.services.prescription_service import PrescriptionPipeline
from healthai.services.response_parser import LabelledFieldParser

EXTENSION_KEY = "healthai"


@dataclass
class ServiceContainer:
    gateway: GeminiGateway
    pipeline: PrescriptionPipeline
    ocr: OcrService
    patients: PatientRepository
    prescriptions: PrescriptionRepository
    clinicians: ClinicianRepository
    visits: VisitRepository
    gemini_api_key: str


def build_services(config) -> ServiceContainer:
    gateway = GeminiGateway(
        base_url=config.GEMINI_API_BASE,
        model=config.GEMINI_MODEL,
        timeout=config.LLM_TIMEOUT_SECONDS,
    )
    prescriptions = PrescriptionRepository(db.session)
    pipeline = PrescriptionPipeline(
        gateway=gateway,
        parser=LabelledFieldParser(),
        repository=prescriptions,
        session=db.session,
        api_key=config.GEMINI_API_KEY,
    )
    return ServiceContainer(
        gateway=gateway,
        pipeline=pipeline,
        ocr=OcrService(build_ocr_backend(config)),
        patients=PatientRepository(db.session),
        prescriptions=prescriptions,
        clinicians=ClinicianRepository(db.session),
        visits=VisitRepository(db.session),
        gemini_api_key=config.GEMINI_API_KEY,
    )


def get_services() -> ServiceContainer:
    return current_app.extensions[EXTENSION_KEY]
