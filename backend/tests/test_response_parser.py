"""
Prompt builder & Gemini response parsing tests.
"""

import json

import pytest

from healthai.services.prompt_builder import (
    NOT_PROVIDED,
    OUTPUT_INSTRUCTION,
    build_prescription_prompt,
    render_mapping,
)
from healthai.services.prescription_service import PrescriptionRequest
from healthai.services.response_parser import (
    PARSE_ERROR,
    TEXT_MALFORMED,
    TEXT_NOT_FOUND,
    LabelledFieldParser,
    ParsedPrescription,
    extract_generated_text,
)


# ════════════════════════════════════════════
# PROMPT BUILDER
# ════════════════════════════════════════════

class TestPromptBuilder:
    def test_sections_in_order(self):
        req = PrescriptionRequest(
            patient_id="p", clinician_id="c",
            visit_notes="Acute otitis media, left ear.",
            medical_history={"allergies": "none", "conditions": "asthma"},
            insurance_details={"plan": "BlueCross PPO"},
        )
        prompt = build_prescription_prompt(req)

        assert prompt.startswith("Given the following patient information and visit notes")
        history = prompt.index("Patient Medical History/Allergens:\nallergies: none\nconditions: asthma\n")
        insurance = prompt.index("Patient Insurance Details")
        notes = prompt.index("Visit Notes (Diagnosis and Treatment Plan):\nAcute otitis media, left ear.")
        assert history < insurance < notes
        assert "plan: BlueCross PPO" in prompt
        assert prompt.endswith(OUTPUT_INSTRUCTION)
        assert "Medication: [Name], Dosage: [Amount], Frequency: [How often]" in prompt

    def test_empty_mappings_render_not_provided(self):
        req = PrescriptionRequest(patient_id="p", clinician_id="c", visit_notes="x")
        prompt = build_prescription_prompt(req)
        assert prompt.count(NOT_PROVIDED) == 2

    def test_deterministic(self):
        req = PrescriptionRequest(patient_id="p", clinician_id="c", visit_notes="n",
                                  medical_history={"a": 1})
        assert build_prescription_prompt(req) == build_prescription_prompt(req)

    def test_render_mapping(self):
        assert render_mapping(None) == NOT_PROVIDED
        assert render_mapping({}) == NOT_PROVIDED
        assert render_mapping({"bp": "120/80"}) == "bp: 120/80\n"


# ════════════════════════════════════════════
# ENVELOPE EXTRACTION
# ════════════════════════════════════════════

class TestExtractGeneratedText:
    def test_happy_path(self):
        raw = json.dumps({"candidates": [{"content": {"parts": [{"text": "Medication: X"}]}}]})
        assert extract_generated_text(raw) == "Medication: X"

    @pytest.mark.parametrize("body", [
        {},
        {"candidates": []},
        {"candidates": [{}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]},
        {"promptFeedback": {"blockReason": "SAFETY"}},
    ])
    def test_missing_path_returns_sentinel(self, body):
        assert extract_generated_text(json.dumps(body)) == TEXT_NOT_FOUND

    def test_not_json_returns_sentinel(self):
        assert extract_generated_text("<html>502 Bad Gateway</html>") == TEXT_MALFORMED


# ════════════════════════════════════════════
# FIELD PARSER
# ════════════════════════════════════════════

class TestLabelledFieldParser:
    parser = LabelledFieldParser()

    def test_canonical_format(self):
        result = self.parser.parse("Medication: Amoxicillin, Dosage: 500mg, Frequency: twice daily")
        assert result == ParsedPrescription("Amoxicillin", "500mg", "twice daily")

    def test_missing_dosage_label(self):
        result = self.parser.parse("Medication: Amoxicillin, Frequency: twice daily")
        assert result.medication == "Amoxicillin"
        assert result.dosage == PARSE_ERROR
        assert result.frequency == "twice daily"

    def test_case_insensitive_labels(self):
        result = self.parser.parse("medication: Ibuprofen, DOSAGE: 400 mg, frequency: every 6 hours.")
        assert result == ParsedPrescription("Ibuprofen", "400 mg", "every 6 hours")

    def test_multiline_reply(self):
        text = "Medication: Lisinopril\nDosage: 10 mg\nFrequency: once daily\n"
        assert self.parser.parse(text) == ParsedPrescription("Lisinopril", "10 mg", "once daily")

    def test_trailing_punctuation_trimmed(self):
        result = self.parser.parse("Medication: Metformin., Dosage: 500 mg,, Frequency: BID.")
        assert result == ParsedPrescription("Metformin", "500 mg", "BID")

    def test_empty_value_is_parse_error(self):
        result = self.parser.parse("Medication: , Dosage: 5mg, Frequency: daily")
        assert result.medication == PARSE_ERROR
        assert result.dosage == "5mg"

    @pytest.mark.parametrize("text", ["", None, "I cannot suggest a prescription.", TEXT_NOT_FOUND])
    def test_unparsable_text_all_sentinels(self, text):
        assert self.parser.parse(text) == ParsedPrescription(PARSE_ERROR, PARSE_ERROR, PARSE_ERROR)
