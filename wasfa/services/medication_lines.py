# wasfa/services/medication_lines.py
"""
Shared handling of medication line items for prescriptions and templates.
"""

from typing import Iterable

from wasfa.schemas.prescription import MedicationCreate
from wasfa.services.errors import ValidationError

LINE_FIELDS = ("medication_name", "dosage", "form", "frequency", "duration", "notes")


def clean_lines(lines: Iterable[MedicationCreate]) -> list[MedicationCreate]:
    """
    Drop lines whose medication_name is blank.

    Raises ValidationError when nothing remains, so callers can reject the
    save before touching the database.
    """
    kept = []
    for line in lines:
        name = (line.medication_name or "").strip()
        if name:
            kept.append(line.model_copy(update={"medication_name": name}))
    if not kept:
        raise ValidationError("At least one medication is required")
    return kept


def build_lines(model, lines: list[MedicationCreate], **parent) -> list:
    """Instantiate child rows with a contiguous zero-based sort_order."""
    return [
        model(**parent, **line.model_dump(include=set(LINE_FIELDS)), sort_order=index)
        for index, line in enumerate(lines)
    ]


def line_snapshot(row) -> dict:
    return {field: getattr(row, field) for field in LINE_FIELDS}
