"""
Prescription routes.
  /generate  – draft a prescription with Gemini and store it
  /validate  – allergy / duplicate-therapy check of a proposed list
  /<id>      – read back a stored prescription

Generated drafts are INFORMATION for the clinician, NOT an approval.
"""

import logging

from flask import Blueprint, request, jsonify

from healthai.container import get_services
from healthai.repositories import parse_uuid
from healthai.services.prescription_service import PrescriptionRequest
from healthai.services.validation_service import validate_prescriptions

prescription_bp = Blueprint("prescription", __name__)

logger = logging.getLogger("healthai.routes.prescription")


@prescription_bp.route("/generate", methods=["POST"])
def generate():
    """
    Body: {
        "patientId": "uuid", "clinicianId": "uuid",
        "visitId": "uuid (optional)",
        "visitNotes": "...",
        "medicalHistory": {...}, "insuranceDetails": {...}
    }
    """
    data = request.get_json(silent=True)
    req = PrescriptionRequest.from_json(data)
    logger.info("Received request to generate prescription for patient %s", req.patient_id)

    prescription = get_services().pipeline.generate_and_save(req)

    return jsonify({
        "message": "Prescription generated and saved successfully.",
        "prescriptionId": str(prescription.id),
    }), 200


@prescription_bp.route("/validate", methods=["POST"])
def validate():
    """
    Body: {
        "patientId": "...",
        "proposedPrescriptions": [{"medicationName": "Amoxicillin", "dosage": "500mg"}],
        "patientAllergies": ["Penicillin"],
        "currentPrescriptions": [{"medicationName": "Metformin"}]
    }
    Always 200: problems inside the check are reported as issues.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    issues = validate_prescriptions(
        data.get("proposedPrescriptions"),
        data.get("patientAllergies"),
        data.get("currentPrescriptions"),
        patient_id=data.get("patientId"),
    )
    return jsonify({"validationIssues": [i.to_dict() for i in issues]}), 200


@prescription_bp.route("/<prescription_id>", methods=["GET"])
def get_prescription(prescription_id):
    pid = parse_uuid(prescription_id, "prescriptionId")
    prescription = get_services().prescriptions.get(pid)
    if prescription is None:
        return jsonify({"error": "Prescription not found."}), 404
    return jsonify(prescription.to_dict()), 200
