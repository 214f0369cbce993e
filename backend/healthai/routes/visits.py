"""
Visit routes – record a patient/clinician encounter and read it back.
A visit id can then be passed to /api/prescriptions/generate as visitId.
"""

from datetime import datetime, timezone

from flask import Blueprint, request, jsonify

from healthai.container import get_services
from healthai.database import db
from healthai.errors import InputError
from healthai.repositories import parse_uuid, unit_of_work

visits_bp = Blueprint("visits", __name__)


def _parse_visit_date(value) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        raise InputError("Invalid visitDate format; expected ISO 8601.")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@visits_bp.route("", methods=["POST"])
def create_visit():
    """
    Body: {
        "patientId": "uuid", "clinicianId": "uuid",
        "visitDate": "2024-05-01T10:30:00Z (optional, defaults to now)",
        "reason": "...", "notes": "..."
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object."}), 400

    missing = [f for f in ("patientId", "clinicianId") if not data.get(f)]
    if missing:
        return jsonify({"error": f"Missing required fields: {', '.join(missing)}"}), 400

    services = get_services()
    patient_id = parse_uuid(data["patientId"], "patientId")
    clinician_id = parse_uuid(data["clinicianId"], "clinicianId")
    visit_date = _parse_visit_date(data.get("visitDate"))

    if services.patients.get(patient_id) is None:
        return jsonify({"error": "Patient not found."}), 404
    if services.clinicians.get(clinician_id) is None:
        return jsonify({"error": "Clinician not found."}), 404

    with unit_of_work(db.session):
        visit = services.visits.create(
            patient_id=patient_id,
            clinician_id=clinician_id,
            visit_date=visit_date,
            reason=data.get("reason"),
            notes=data.get("notes"),
        )
    return jsonify(visit.to_dict()), 201


@visits_bp.route("/<visit_id>", methods=["GET"])
def get_visit(visit_id):
    visit = get_services().visits.get(parse_uuid(visit_id, "visitId"))
    if visit is None:
        return jsonify({"error": "Visit not found."}), 404
    return jsonify(visit.to_dict()), 200
