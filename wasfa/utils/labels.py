"""
Display labels for enumerated codes, keyed by (category, code, language).

Lookup order: requested language, then FALLBACK_LANGUAGE, then the raw code.
"""

from datetime import date, datetime
from typing import Optional

SUPPORTED_LANGUAGES = ("ar", "fr", "en")
FALLBACK_LANGUAGE = "en"
RTL_LANGUAGES = {"ar"}

FORM = "form"
FREQUENCY = "frequency"
ACTION = "action"
ENTITY_TYPE = "entity_type"
ROLE = "role"
DOCUMENT = "document"

LABELS: dict[str, dict[str, dict[str, str]]] = {
    FORM: {
        "tablet": {"ar": "أقراص", "fr": "Comprimé", "en": "Tablet"},
        "capsule": {"ar": "كبسولات", "fr": "Capsule", "en": "Capsule"},
        "syrup": {"ar": "شراب", "fr": "Sirop", "en": "Syrup"},
        "injection": {"ar": "حقنة", "fr": "Injection", "en": "Injection"},
        "cream": {"ar": "كريم", "fr": "Crème", "en": "Cream"},
        "drops": {"ar": "قطرات", "fr": "Gouttes", "en": "Drops"},
        "suppository": {"ar": "تحاميل", "fr": "Suppositoire", "en": "Suppository"},
        "inhaler": {"ar": "بخاخ", "fr": "Inhalateur", "en": "Inhaler"},
    },
    FREQUENCY: {
        "once_daily": {"ar": "مرة واحدة يومياً", "fr": "Une fois par jour", "en": "Once daily"},
        "twice_daily": {"ar": "مرتين يومياً", "fr": "Deux fois par jour", "en": "Twice daily"},
        "three_times": {"ar": "ثلاث مرات يومياً", "fr": "Trois fois par jour", "en": "Three times daily"},
        "four_times": {"ar": "أربع مرات يومياً", "fr": "Quatre fois par jour", "en": "Four times daily"},
        "before_meals": {"ar": "قبل الوجبات", "fr": "Avant les repas", "en": "Before meals"},
        "after_meals": {"ar": "بعد الوجبات", "fr": "Après les repas", "en": "After meals"},
        "as_needed": {"ar": "عند الحاجة", "fr": "Au besoin", "en": "As needed"},
    },
    ACTION: {
        "create": {"ar": "إنشاء", "fr": "Créer", "en": "Create"},
        "update": {"ar": "تعديل", "fr": "Modifier", "en": "Update"},
        "delete": {"ar": "حذف", "fr": "Supprimer", "en": "Delete"},
        "login": {"ar": "تسجيل دخول", "fr": "Connexion", "en": "Login"},
        "logout": {"ar": "تسجيل خروج", "fr": "Déconnexion", "en": "Logout"},
        "export": {"ar": "تصدير", "fr": "Exporter", "en": "Export"},
        "print": {"ar": "طباعة", "fr": "Imprimer", "en": "Print"},
    },
    ENTITY_TYPE: {
        "patient": {"ar": "مريض", "fr": "Patient", "en": "Patient"},
        "prescription": {"ar": "وصفة", "fr": "Ordonnance", "en": "Prescription"},
        "template": {"ar": "قالب", "fr": "Modèle", "en": "Template"},
        "user": {"ar": "مستخدم", "fr": "Utilisateur", "en": "User"},
        "settings": {"ar": "الإعدادات", "fr": "Paramètres", "en": "Settings"},
    },
    ROLE: {
        "super_admin": {"ar": "مدير النظام", "fr": "Super Admin", "en": "Super Admin"},
        "clinic_admin": {"ar": "مدير العيادة", "fr": "Admin Clinique", "en": "Clinic Admin"},
        "doctor": {"ar": "طبيب", "fr": "Médecin", "en": "Doctor"},
        "assistant": {"ar": "مساعد", "fr": "Assistant", "en": "Assistant"},
    },
    DOCUMENT: {
        "title": {"ar": "وصفة طبية", "fr": "Ordonnance médicale", "en": "Medical Prescription"},
        "doctor_prefix": {"ar": "د.", "fr": "Dr.", "en": "Dr."},
        "license_number": {"ar": "رقم الترخيص", "fr": "N° de licence", "en": "License number"},
        "patient": {"ar": "المريض", "fr": "Patient", "en": "Patient"},
        "date_of_birth": {"ar": "تاريخ الميلاد", "fr": "Date de naissance", "en": "Date of birth"},
        "medications": {"ar": "الأدوية", "fr": "Médicaments", "en": "Medications"},
        "medication_name": {"ar": "اسم الدواء", "fr": "Médicament", "en": "Medication"},
        "dosage": {"ar": "الجرعة", "fr": "Dosage", "en": "Dosage"},
        "form": {"ar": "الشكل", "fr": "Forme", "en": "Form"},
        "frequency": {"ar": "التكرار", "fr": "Fréquence", "en": "Frequency"},
        "duration": {"ar": "المدة", "fr": "Durée", "en": "Duration"},
        "notes": {"ar": "ملاحظات", "fr": "Notes", "en": "Notes"},
        "signature": {"ar": "التوقيع والختم", "fr": "Signature et cachet", "en": "Signature and stamp"},
    },
}

MONTH_NAMES: dict[str, list[str]] = {
    "en": [
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    ],
    "fr": [
        "janvier", "février", "mars", "avril", "mai", "juin",
        "juillet", "août", "septembre", "octobre", "novembre", "décembre",
    ],
    "ar": [
        "يناير", "فبراير", "مارس", "أبريل", "مايو", "يونيو",
        "يوليو", "أغسطس", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر",
    ],
}


def normalize_language(language: Optional[str], default: str = FALLBACK_LANGUAGE) -> str:
    if language and language.lower() in SUPPORTED_LANGUAGES:
        return language.lower()
    return default


def label(category: str, code: Optional[str], language: str) -> str:
    """
    Return the display label for code, or the raw code when unmapped.
    Empty/None codes render as an empty string.
    """
    if not code:
        return ""
    entry = LABELS.get(category, {}).get(code)
    if not entry:
        return code
    return entry.get(language) or entry.get(FALLBACK_LANGUAGE) or code


def text_direction(language: str) -> str:
    return "rtl" if language in RTL_LANGUAGES else "ltr"


def format_long_date(value: date | datetime, language: str) -> str:
    """
    Localized long date: "5 March 2025" / "5 mars 2025" / "5 مارس 2025".
    English uses the US order "March 5, 2025".
    """
    months = MONTH_NAMES.get(language) or MONTH_NAMES[FALLBACK_LANGUAGE]
    month = months[value.month - 1]
    if language == "en":
        return f"{month} {value.day}, {value.year}"
    return f"{value.day} {month} {value.year}"
