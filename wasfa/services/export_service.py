# wasfa/services/export_service.py
"""
Report exports (prescriptions, patients, statistics) as CSV or JSON.
"""

import csv
import json
from collections import Counter
from datetime import datetime
from io import StringIO
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from wasfa.models.patient import Patient
from wasfa.services import patient_service, prescription_service
from wasfa.services.errors import NotFoundError, ValidationError
from wasfa.utils.datetime_utils import (
    as_utc,
    start_of_day,
    start_of_month,
    start_of_week,
    start_of_year,
    utc_now,
)

EXPORT_TYPES = ("prescriptions", "patients", "statistics")
EXPORT_FORMATS = ("csv", "json")
DATE_RANGES = ("all", "today", "week", "month", "year")

# Excel needs the BOM to open UTF-8 (Arabic) CSV correctly.
CSV_BOM = "\ufeff"

PRESCRIPTION_HEADERS = ["id", "patient_name", "notes", "medications_count", "medications", "created_at"]
PATIENT_HEADERS = [
    "id",
    "full_name",
    "date_of_birth",
    "gender",
    "phone",
    "allergies",
    "chronic_diseases",
    "notes",
    "created_at",
]
STATISTICS_HEADERS = ["metric", "value"]
STATISTICS_MEDICATION_ROWS = 10


def range_start(date_range: str, now: Optional[datetime] = None) -> Optional[datetime]:
    now = as_utc(now) if now else utc_now()
    if date_range == "all":
        return None
    if date_range == "today":
        return start_of_day(now)
    if date_range == "week":
        return start_of_week(now)
    if date_range == "month":
        return start_of_month(now)
    if date_range == "year":
        return start_of_year(now)
    raise ValidationError(f"Invalid date range: {date_range}")


def _format_timestamp(value: Optional[datetime]) -> str:
    return as_utc(value).strftime("%Y-%m-%d %H:%M") if value else ""


def generate_csv(rows: list[dict[str, Any]], headers: list[str]) -> str:
    """
    Comma-separated, "\n" line endings, BOM-prefixed.
    Values containing a comma, quote or newline are double-quoted with
    embedded quotes doubled; None renders as an empty field.
    """
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if row.get(h) is None else row.get(h) for h in headers])
    return CSV_BOM + output.getvalue().rstrip("\n")


def generate_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2, ensure_ascii=False, default=str)


def prescription_rows(db: Session, tenant_id: UUID, since: Optional[datetime]) -> list[dict[str, Any]]:
    prescriptions = prescription_service.list_prescriptions(db, tenant_id=tenant_id, created_from=since)
    return [
        {
            "id": str(p.id),
            "patient_name": p.patient.full_name if p.patient else "",
            "notes": p.notes or "",
            "medications_count": len(p.medications),
            "medications": "; ".join(m.medication_name for m in p.medications),
            "created_at": _format_timestamp(p.created_at),
        }
        for p in prescriptions
    ]


def _patients_since(db: Session, tenant_id: UUID, since: Optional[datetime]) -> list[Patient]:
    patients = patient_service.list_patients(db, tenant_id=tenant_id)
    if since is None:
        return patients
    return [p for p in patients if as_utc(p.created_at) >= since]


def patient_rows(db: Session, tenant_id: UUID, since: Optional[datetime]) -> list[dict[str, Any]]:
    return [
        {
            "id": str(p.id),
            "full_name": p.full_name,
            "date_of_birth": p.date_of_birth.isoformat() if p.date_of_birth else "",
            "gender": p.gender.value if p.gender else "",
            "phone": p.phone or "",
            "allergies": p.allergies or "",
            "chronic_diseases": p.chronic_diseases or "",
            "notes": p.notes or "",
            "created_at": _format_timestamp(p.created_at),
        }
        for p in _patients_since(db, tenant_id, since)
    ]


def statistics_rows(db: Session, tenant_id: UUID, since: Optional[datetime]) -> list[dict[str, Any]]:
    prescriptions = prescription_service.list_prescriptions(db, tenant_id=tenant_id, created_from=since)
    patients = _patients_since(db, tenant_id, since)

    medication_uses = Counter(m.medication_name for p in prescriptions for m in p.medications)
    line_count = sum(len(p.medications) for p in prescriptions)
    average = line_count / len(prescriptions) if prescriptions else 0

    rows = [
        {"metric": "Total Prescriptions", "value": len(prescriptions)},
        {"metric": "Total Patients", "value": len(patients)},
        {"metric": "Male Patients", "value": sum(1 for p in patients if p.gender and p.gender.value == "male")},
        {"metric": "Female Patients", "value": sum(1 for p in patients if p.gender and p.gender.value == "female")},
        {"metric": "Average Medications per Prescription", "value": f"{average:.2f}"},
    ]
    rows.extend(
        {"metric": f"Medication: {name}", "value": count}
        for name, count in medication_uses.most_common(STATISTICS_MEDICATION_ROWS)
    )
    return rows


def build_export(
    db: Session,
    *,
    tenant_id: UUID,
    export_type: str,
    export_format: str,
    date_range: str = "all",
    now: Optional[datetime] = None,
) -> tuple[str, str, str, int]:
    """
    Returns (content, media_type, filename, row_count).
    Raises NotFoundError when the selection is empty.
    """
    if export_type not in EXPORT_TYPES:
        raise ValidationError(f"Invalid export type: {export_type}")
    if export_format not in EXPORT_FORMATS:
        raise ValidationError(f"Invalid export format: {export_format}")

    now = as_utc(now) if now else utc_now()
    since = range_start(date_range, now)

    if export_type == "prescriptions":
        rows, headers = prescription_rows(db, tenant_id, since), PRESCRIPTION_HEADERS
    elif export_type == "patients":
        rows, headers = patient_rows(db, tenant_id, since), PATIENT_HEADERS
    else:
        rows, headers = statistics_rows(db, tenant_id, since), STATISTICS_HEADERS

    # The statistics report always has its summary rows; empty means no activity.
    if not rows or (export_type == "statistics" and rows[0]["value"] == 0 and rows[1]["value"] == 0):
        raise NotFoundError("No data to export")

    filename = f"{export_type}_{now.strftime('%Y-%m-%d_%H-%M')}.{export_format}"
    if export_format == "csv":
        return generate_csv(rows, headers), "text/csv; charset=utf-8", filename, len(rows)
    return generate_json(rows), "application/json; charset=utf-8", filename, len(rows)
