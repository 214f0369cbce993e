"""
SQLAlchemy ORM models – mirrors the PostgreSQL schema.
Foreign keys are plain identifier columns: no relationship proxies,
no cascades. Anything that spans tables is sequenced explicitly by
the service layer.
"""

import uuid
from datetime import datetime, timezone

from healthai.database import db


def _utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class Patient(db.Model):
    __tablename__ = "patients"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(db.Uuid, nullable=False, unique=True, default=uuid.uuid4)   # auth.users(id)
    username = db.Column(db.String(255), unique=True)
    profile_picture_url = db.Column(db.Text)
    allergies = db.Column(db.JSON, default=list)
    medical_history = db.Column(db.JSON, default=dict)
    insurance_details = db.Column(db.JSON, default=dict)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": str(self.id),
            "userId": str(self.user_id),
            "username": self.username,
            "profilePictureUrl": self.profile_picture_url,
            "allergies": self.allergies or [],
            "medicalHistory": self.medical_history or {},
            "insuranceDetails": self.insurance_details or {},
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Clinician(db.Model):
    __tablename__ = "clinicians"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(db.Uuid, nullable=False, unique=True, default=uuid.uuid4)
    username = db.Column(db.String(255), unique=True)
    profile_picture_url = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": str(self.id),
            "userId": str(self.user_id),
            "username": self.username,
            "profilePictureUrl": self.profile_picture_url,
            "createdAt": _iso(self.created_at),
        }


class Visit(db.Model):
    __tablename__ = "visits"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    patient_id = db.Column(db.Uuid, db.ForeignKey("patients.id"), nullable=False, index=True)
    clinician_id = db.Column(db.Uuid, db.ForeignKey("clinicians.id"), nullable=False)
    visit_date = db.Column(db.DateTime(timezone=True), nullable=False)
    reason = db.Column(db.Text)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": str(self.id),
            "patientId": str(self.patient_id),
            "clinicianId": str(self.clinician_id),
            "visitDate": _iso(self.visit_date),
            "reason": self.reason,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }


class Prescription(db.Model):
    """One AI-drafted prescription. Written once per pipeline run, never updated."""

    __tablename__ = "prescriptions"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    # Raw identifier columns: the generation pipeline accepts ids for
    # patients/clinicians managed by the auth provider, so no FK constraint.
    patient_id = db.Column(db.Uuid, nullable=False, index=True)
    clinician_id = db.Column(db.Uuid, nullable=False)
    visit_id = db.Column(db.Uuid)
    medication = db.Column(db.Text, nullable=False)
    dosage = db.Column(db.Text)
    frequency = db.Column(db.Text)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": str(self.id),
            "patientId": str(self.patient_id),
            "clinicianId": str(self.clinician_id),
            "visitId": str(self.visit_id) if self.visit_id else None,
            "medication": self.medication,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "notes": self.notes,
            "createdAt": _iso(self.created_at),
        }


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    endpoint = db.Column(db.String(255))
    method = db.Column(db.String(10))
    status_code = db.Column(db.Integer)
    request_body = db.Column(db.Text)
    response_summary = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
