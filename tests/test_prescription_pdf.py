import re

import pytest

from wasfa.utils.labels import DOCUMENT, label
from wasfa.utils.pdf_fonts import BASE_FONT, arabic_font_name, fonts_for, shape_text
from wasfa.utils.prescription_pdf import generate_prescription_pdf

LABEL_KEYS = (
    "patient",
    "date_of_birth",
    "medications",
    "medication_name",
    "dosage",
    "form",
    "frequency",
    "duration",
    "notes",
    "signature",
)


def make_document(language="en", medications=1, notes=""):
    return {
        "language": language,
        "direction": "rtl" if language == "ar" else "ltr",
        "title": "Prescription",
        "doctor_name": "د. كريم حداد" if language == "ar" else "Dr. Karim Haddad",
        "specialty": "",
        "license_line": "",
        "clinic_line": "Clinique Atlas",
        "date": "12 مارس 2025" if language == "ar" else "March 12, 2025",
        "patient_name": "أحمد بنعلي" if language == "ar" else "Jane Doe",
        "date_of_birth": "",
        "labels": {key: label(DOCUMENT, key, language) for key in LABEL_KEYS},
        "medications": [
            {
                "index": i,
                "medication_name": f"Amoxicillin {i}",
                "dosage": "500mg",
                "form": "-",
                "frequency": "-",
                "duration": "7 days",
            }
            for i in range(1, medications + 1)
        ],
        "notes": notes,
        "footer_note": "",
    }


def page_count(pdf: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page(?!s)", pdf))


def is_presentation_form(ch: str) -> bool:
    return "\ufb50" <= ch <= "\ufeff"


def test_arabic_text_is_shaped_for_display():
    text = "وصفة طبية"
    shaped = shape_text(text, "ar")

    assert shaped != text
    assert all(ch == " " or is_presentation_form(ch) for ch in shaped)


def test_only_right_to_left_text_is_shaped():
    assert shape_text("Amoxicillin 500mg", "ar") == "Amoxicillin 500mg"
    assert shape_text("Ordonnance médicale", "fr") == "Ordonnance médicale"
    assert shape_text(None, "ar") == ""


def test_latin_documents_use_the_base_font():
    assert fonts_for("en")[0] == BASE_FONT
    assert fonts_for("fr")[0] == BASE_FONT


def test_arabic_pdf_embeds_a_truetype_font():
    if arabic_font_name() is None:
        pytest.skip("no Arabic-capable font installed")

    arabic = generate_prescription_pdf(make_document("ar")).getvalue()
    english = generate_prescription_pdf(make_document("en")).getvalue()

    assert arabic.startswith(b"%PDF")
    assert b"/FontFile2" in arabic
    assert b"/FontFile2" not in english


def test_long_prescription_stays_on_one_page():
    document = make_document("en", medications=60, notes="Take with plenty of water. " * 80)
    pdf = generate_prescription_pdf(document).getvalue()

    assert page_count(pdf) == 1
