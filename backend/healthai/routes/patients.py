"""
Patient routes – create a patient record and read it back, together
with that patient's drafted prescriptions and recorded visits.
"""

from flask import Blueprint, request, jsonify

from healthai.container import get_services
from healthai.database import db
from healthai.errors import InputError
from healthai.repositories import parse_uuid, unit_of_work

patients_bp = Blueprint("patients", __name__)


def _patient_fields(data: dict) -> dict:
    allergies = data.get("allergies") or []
    if isinstance(allergies, str):
        allergies = [a.strip() for a in allergies.split(",") if a.strip()]
    if not isinstance(allergies, list) or not all(isinstance(a, str) for a in allergies):
        raise InputError("'allergies' must be a list of strings.")

    for key in ("medicalHistory", "insuranceDetails"):
        value = data.get(key)
        if value is not None and not isinstance(value, dict):
            raise InputError(f"'{key}' must be an object.")

    fields = {
        "username": data.get("username"),
        "profile_picture_url": data.get("profilePictureUrl"),
        "allergies": allergies,
        "medical_history": data.get("medicalHistory") or {},
        "insurance_details": data.get("insuranceDetails") or {},
    }
    if data.get("userId"):
        fields["user_id"] = parse_uuid(data["userId"], "userId")
    return fields


@patients_bp.route("", methods=["POST"])
def create_patient():
    """
    Body: {
        "username": "jdoe", "userId": "uuid (optional)",
        "allergies": ["Penicillin"],
        "medicalHistory": {...}, "insuranceDetails": {...}
    }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get("username"):
        return jsonify({"error": "Missing required field: username"}), 400

    if get_services().patients.find_by_username(data["username"]):
        return jsonify({"error": "Username already registered."}), 409

    fields = _patient_fields(data)
    with unit_of_work(db.session):
        patient = get_services().patients.create(**fields)
    return jsonify(patient.to_dict()), 201


@patients_bp.route("/<patient_id>", methods=["GET"])
def get_patient(patient_id):
    patient = get_services().patients.get(parse_uuid(patient_id, "patientId"))
    if patient is None:
        return jsonify({"error": "Patient not found."}), 404
    return jsonify(patient.to_dict()), 200


@patients_bp.route("/<patient_id>/prescriptions", methods=["GET"])
def list_patient_prescriptions(patient_id):
    services = get_services()
    pid = parse_uuid(patient_id, "patientId")
    if services.patients.get(pid) is None:
        return jsonify({"error": "Patient not found."}), 404
    prescriptions = services.prescriptions.list_for_patient(pid)
    return jsonify({"prescriptions": [p.to_dict() for p in prescriptions]}), 200


@patients_bp.route("/<patient_id>/visits", methods=["GET"])
def list_patient_visits(patient_id):
    services = get_services()
    pid = parse_uuid(patient_id, "patientId")
    if services.patients.get(pid) is None:
        return jsonify({"error": "Patient not found."}), 404
    visits = services.visits.list_for_patient(pid)
    return jsonify({"visits": [v.to_dict() for v in visits]}), 200
