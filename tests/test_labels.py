from datetime import date

from wasfa.utils.email_templates import render_prescription_email
from wasfa.utils.labels import FORM, FREQUENCY, format_long_date, label, normalize_language, text_direction


def test_label_lookup_in_each_language():
    assert label(FORM, "tablet", "ar") == "أقراص"
    assert label(FORM, "tablet", "fr") == "Comprimé"
    assert label(FREQUENCY, "twice_daily", "en") == "Twice daily"


def test_unknown_code_is_returned_raw():
    assert label(FORM, "patch", "fr") == "patch"
    assert label(FORM, None, "fr") == ""


def test_unknown_language_falls_back_to_english_label():
    assert label(FORM, "syrup", "de") == "Syrup"


def test_normalize_language():
    assert normalize_language("AR") == "ar"
    assert normalize_language("de") == "en"
    assert normalize_language(None, "fr") == "fr"


def test_direction_and_dates():
    assert text_direction("ar") == "rtl"
    assert text_direction("fr") == "ltr"
    assert format_long_date(date(2025, 3, 5), "fr") == "5 mars 2025"
    assert format_long_date(date(2025, 3, 5), "en") == "March 5, 2025"


def test_prescription_email_unknown_language_uses_french():
    subject, html = render_prescription_email(
        language="de",
        patient_name="Jane Doe",
        doctor_name="Dr. Karim",
        clinic_name="Clinique <Atlas>",
        prescription_date="5 mars 2025",
        medications=[{"medication_name": "Amoxicillin", "dosage": "500mg", "frequency": None, "duration": "7 days"}],
    )
    assert subject == "Ordonnance médicale - Jane Doe"
    assert "Bonjour" in html
    assert "Clinique &lt;Atlas&gt;" in html
    assert "1. Amoxicillin" in html


def test_prescription_email_arabic_is_rtl():
    subject, html = render_prescription_email(
        language="ar",
        patient_name="Jane Doe",
        doctor_name="د. كريم",
        clinic_name="Atlas",
        prescription_date="5 مارس 2025",
        medications=[],
    )
    assert subject.startswith("وصفة طبية")
    assert 'dir="rtl"' in html
