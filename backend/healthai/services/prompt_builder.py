"""
Prescription prompt construction.

The closing instruction pins the reply to
    Medication: [Name], Dosage: [Amount], Frequency: [How often]
which is exactly what services.response_parser extracts. Change both together.
"""

PREAMBLE = "Given the following patient information and visit notes, suggest a prescription."

HISTORY_HEADER = "Patient Medical History/Allergens:"
INSURANCE_HEADER = "Patient Insurance Details (Consider for formulary/cost if possible):"
VISIT_NOTES_HEADER = "Visit Notes (Diagnosis and Treatment Plan):"

OUTPUT_INSTRUCTION = (
    "Suggest Medication, Dosage, and Frequency. Format the response clearly, for example: "
    "Medication: [Name], Dosage: [Amount], Frequency: [How often]. "
    "Respond ONLY with the Medication, Dosage, and Frequency details in the specified format."
)

NOT_PROVIDED = "Not Provided"


def render_mapping(mapping) -> str:
    """Render a mapping as one 'key: value' line per entry."""
    if not mapping:
        return NOT_PROVIDED
    return "".join(f"{key}: {value}\n" for key, value in mapping.items())


def build_prescription_prompt(request) -> str:
    """Assemble the LLM prompt from a PrescriptionRequest."""
    return (
        f"{PREAMBLE}"
        f"\n\n{HISTORY_HEADER}\n{render_mapping(request.medical_history)}"
        f"\n\n{INSURANCE_HEADER}\n{render_mapping(request.insurance_details)}"
        f"\n\n{VISIT_NOTES_HEADER}\n{request.visit_notes or ''}"
        f"\n\n{OUTPUT_INSTRUCTION}"
    )
