"""
Prescription validation engine.
Flags allergy conflicts and duplicate therapy between a proposed
prescription list and the patient's reported allergies / current
medications. Pure function: no database, no network.

Matching is a case-insensitive exact comparison on medication names.
This is an INFORMATION tool; the clinician makes the final call.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Iterable, Optional

from healthai.errors import ValidationError

logger = logging.getLogger("healthai.validation")

ISSUE_ALLERGY = "ALLERGY"
ISSUE_DUPLICATE = "DUPLICATE"
ISSUE_INTERACTION = "INTERACTION"          # reserved, never emitted yet
ISSUE_VALIDATION_ERROR = "VALIDATION_ERROR"


@dataclass
class ProposedPrescription:
    medication_name: Optional[str]
    dosage: Optional[str] = None
    frequency: Optional[str] = None

    @classmethod
    def coerce(cls, item) -> "ProposedPrescription":
        if isinstance(item, cls):
            return item
        if not isinstance(item, dict):
            raise ValidationError(f"Proposed prescription must be an object, got {type(item).__name__}")
        return cls(
            medication_name=item.get("medicationName"),
            dosage=item.get("dosage"),
            frequency=item.get("frequency"),
        )


@dataclass
class CurrentPrescription:
    medication_name: Optional[str]

    @classmethod
    def coerce(cls, item) -> "CurrentPrescription":
        if isinstance(item, cls):
            return item
        if not isinstance(item, dict):
            raise ValidationError(f"Current prescription must be an object, got {type(item).__name__}")
        return cls(medication_name=item.get("medicationName"))


@dataclass
class ValidationIssue:
    type: str
    medication: str
    details: str

    def to_dict(self):
        return asdict(self)


def _same_name(a, b) -> bool:
    if a is None or b is None:
        return False
    return a.lower() == b.lower()


def _allergy_names(allergies) -> list:
    """Accept a list of names or a comma-separated string."""
    if allergies is None:
        return []
    if isinstance(allergies, str):
        return [a.strip() for a in allergies.split(",") if a.strip()]
    if not isinstance(allergies, (list, tuple)):
        raise ValidationError(f"Patient allergies must be a list, got {type(allergies).__name__}")
    return list(allergies)


def _check_interactions(proposed: ProposedPrescription,
                        current: list[CurrentPrescription]) -> list[ValidationIssue]:
    """Drug-drug interaction hook. Needs an interaction database; none is wired in."""
    return []


def validate_prescriptions(
    proposed: Optional[Iterable],
    allergies: Optional[Iterable[str]],
    current: Optional[Iterable],
    patient_id: Optional[str] = None,
) -> list[ValidationIssue]:
    """
    Check each proposed medication, in input order, against:
      1. the patient's allergies  → ALLERGY issue
      2. current medications      → DUPLICATE issue
      3. interactions             → reserved, emits nothing
    A single entry can yield both an ALLERGY and a DUPLICATE issue.

    Never raises: an internal fault is reported as one VALIDATION_ERROR
    issue appended to whatever was found before the fault.
    """
    issues: list[ValidationIssue] = []
    patient_label = patient_id or "Unknown"

    try:
        allergy_list = _allergy_names(allergies)
        current_list = [CurrentPrescription.coerce(c) for c in (current or [])]

        for item in proposed or []:
            entry = ProposedPrescription.coerce(item)
            name = entry.medication_name

            if any(_same_name(allergy, name) for allergy in allergy_list):
                logger.warning("Potential allergy for patient %s: %s", patient_label, name)
                issues.append(ValidationIssue(
                    ISSUE_ALLERGY, name, f"Patient reported allergy to {name}",
                ))

            if any(_same_name(c.medication_name, name) for c in current_list):
                logger.warning("Potential duplicate for patient %s: %s", patient_label, name)
                issues.append(ValidationIssue(
                    ISSUE_DUPLICATE, name, f"Patient is already prescribed {name}",
                ))

            issues.extend(_check_interactions(entry, current_list))

    except Exception:
        logger.exception("Error during validation logic for patient %s", patient_label)
        issues.append(ValidationIssue(
            ISSUE_VALIDATION_ERROR, "N/A",
            "An internal error occurred during validation logic.",
        ))

    logger.info("Validation complete for patient %s. Found %d issues.", patient_label, len(issues))
    return issues
