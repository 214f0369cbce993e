"""
Clinician routes – register a clinician record and read it back.
"""

from flask import Blueprint, request, jsonify

from healthai.container import get_services
from healthai.database import db
from healthai.repositories import parse_uuid, unit_of_work

clinicians_bp = Blueprint("clinicians", __name__)


@clinicians_bp.route("", methods=["POST"])
def create_clinician():
    """Body: { "username": "dr_smith", "userId": "uuid (optional)", "profilePictureUrl": "..." }"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get("username"):
        return jsonify({"error": "Missing required field: username"}), 400

    clinicians = get_services().clinicians
    if clinicians.find_by_username(data["username"]):
        return jsonify({"error": "Username already registered."}), 409

    fields = {
        "username": data["username"],
        "profile_picture_url": data.get("profilePictureUrl"),
    }
    if data.get("userId"):
        fields["user_id"] = parse_uuid(data["userId"], "userId")

    with unit_of_work(db.session):
        clinician = clinicians.create(**fields)
    return jsonify(clinician.to_dict()), 201


@clinicians_bp.route("/<clinician_id>", methods=["GET"])
def get_clinician(clinician_id):
    clinician = get_services().clinicians.get(parse_uuid(clinician_id, "clinicianId"))
    if clinician is None:
        return jsonify({"error": "Clinician not found."}), 404
    return jsonify(clinician.to_dict()), 200
