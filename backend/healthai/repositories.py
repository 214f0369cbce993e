"""
Repository layer – create/read-by-id access to the persisted records.
Repositories only stage changes on the session; committing is the job
of unit_of_work() so each service call owns exactly one transaction.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from healthai.errors import ConflictError, InputError, StorageError
from healthai.models.models import Clinician, Patient, Prescription, Visit

logger = logging.getLogger("healthai.storage")


def parse_uuid(value, field_name: str) -> uuid.UUID:
    """Parse an identifier, raising InputError for anything malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        raise InputError(f"Invalid {field_name} format.", detail={field_name: value})


@contextmanager
def unit_of_work(session):
    """
    Commit on clean exit. On failure roll back, then raise ConflictError
    for a unique-key violation or StorageError for any other DB error.
    """
    try:
        yield session
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning("Transaction rolled back on constraint violation: %s", exc.orig)
        raise ConflictError("Unique constraint violated.") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Transaction rolled back: %s", exc)
        raise StorageError(f"Database error: {exc}") from exc
    except Exception:
        session.rollback()
        raise


class PatientRepository:
    def __init__(self, session):
        self.session = session

    def create(self, **fields) -> Patient:
        patient = Patient(**fields)
        self.session.add(patient)
        self.session.flush()
        return patient

    def get(self, patient_id: uuid.UUID) -> Optional[Patient]:
        return self.session.get(Patient, patient_id)

    def find_by_username(self, username: str) -> Optional[Patient]:
        return self.session.query(Patient).filter_by(username=username).first()


class PrescriptionRepository:
    def __init__(self, session):
        self.session = session

    def create(self, **fields) -> Prescription:
        prescription = Prescription(**fields)
        self.session.add(prescription)
        self.session.flush()
        return prescription

    def get(self, prescription_id: uuid.UUID) -> Optional[Prescription]:
        return self.session.get(Prescription, prescription_id)

    def list_for_patient(self, patient_id: uuid.UUID) -> list[Prescription]:
        return (
            self.session.query(Prescription)
            .filter(Prescription.patient_id == patient_id)
            .order_by(Prescription.created_at.desc())
            .all()
        )


class ClinicianRepository:
    def __init__(self, session):
        self.session = session

    def create(self, **fields) -> Clinician:
        clinician = Clinician(**fields)
        self.session.add(clinician)
        self.session.flush()
        return clinician

    def get(self, clinician_id: uuid.UUID) -> Optional[Clinician]:
        return self.session.get(Clinician, clinician_id)

    def find_by_username(self, username: str) -> Optional[Clinician]:
        return self.session.query(Clinician).filter_by(username=username).first()


class VisitRepository:
    def __init__(self, session):
        self.session = session

    def create(self, **fields) -> Visit:
        visit = Visit(**fields)
        self.session.add(visit)
        self.session.flush()
        return visit

    def get(self, visit_id: uuid.UUID) -> Optional[Visit]:
        return self.session.get(Visit, visit_id)

    def list_for_patient(self, patient_id: uuid.UUID) -> list[Visit]:
        return (
            self.session.query(Visit)
            .filter(Visit.patient_id == patient_id)
            .order_by(Visit.visit_date.desc())
            .all()
        )
