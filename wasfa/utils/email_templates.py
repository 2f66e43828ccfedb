# wasfa/utils/email_templates.py
from datetime import datetime
from html import escape
from typing import Iterable, Optional

APP_NAME = "WASFA PRO"
BRAND_COLOR = "#0d9488"

# The prescription email falls back to French for unknown languages.
EMAIL_FALLBACK_LANGUAGE = "fr"

PRESCRIPTION_EMAIL_TEXT: dict[str, dict[str, str]] = {
    "subject": {
        "ar": "وصفة طبية - {patient}",
        "fr": "Ordonnance médicale - {patient}",
        "en": "Medical Prescription - {patient}",
    },
    "greeting": {"ar": "مرحباً", "fr": "Bonjour", "en": "Hello"},
    "message": {
        "ar": "تجد أدناه الوصفة الطبية الصادرة من {doctor} في {clinic} بتاريخ {date}",
        "fr": "Veuillez trouver ci-dessous l'ordonnance médicale émise par {doctor} à {clinic} en date du {date}",
        "en": "Please find below the medical prescription issued by {doctor} at {clinic} on {date}",
    },
    "medications": {
        "ar": "الأدوية الموصوفة:",
        "fr": "Médicaments prescrits:",
        "en": "Prescribed medications:",
    },
    "footer": {
        "ar": "يرجى اتباع التعليمات بدقة واستشارة الطبيب في حالة أي أسئلة.",
        "fr": "Veuillez suivre les instructions avec précision et consulter le médecin en cas de questions.",
        "en": "Please follow the instructions carefully and consult the doctor if you have any questions.",
    },
    "sent_via": {"ar": "تم إرساله عبر", "fr": "Envoyé via", "en": "Sent via"},
    "rights": {"ar": "جميع الحقوق محفوظة", "fr": "Tous droits réservés", "en": "All rights reserved"},
}


def _text(key: str, language: str) -> str:
    entry = PRESCRIPTION_EMAIL_TEXT[key]
    return entry.get(language) or entry[EMAIL_FALLBACK_LANGUAGE]


def render_email_template(
    title: str,
    body_html: str,
    cta_text: Optional[str] = None,
    cta_url: Optional[str] = None,
    clinic_name: Optional[str] = None,
) -> str:
    """
    Render a unified HTML email template with header, body, CTA button, and footer.
    """
    header_title = f"{APP_NAME} - {escape(clinic_name)}" if clinic_name else APP_NAME

    cta_section = ""
    if cta_text and cta_url:
        cta_section = f"""
        <div style="text-align: center; margin: 30px 0;">
            <a href="{escape(cta_url, quote=True)}" style="
                display: inline-block;
                padding: 12px 30px;
                background-color: {BRAND_COLOR};
                color: #ffffff;
                text-decoration: none;
                border-radius: 6px;
                font-weight: 600;
            ">{escape(cta_text)}</a>
        </div>
        """

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{escape(title)}</title>
</head>
<body style="font-family: 'Segoe UI', Tahoma, Arial, sans-serif; line-height: 1.6; color: #333333; background-color: #f5f5f5; margin: 0; padding: 0;">
    <table role="presentation" style="width: 100%; max-width: 600px; margin: 0 auto; background-color: #ffffff;">
        <tr>
            <td style="padding: 30px; background-color: {BRAND_COLOR}; text-align: center;">
                <h1 style="color: #ffffff; margin: 0; font-size: 24px;">{header_title}</h1>
            </td>
        </tr>
        <tr>
            <td style="padding: 30px;">
                <h2 style="color: {BRAND_COLOR}; margin: 0 0 20px 0; font-size: 20px;">{escape(title)}</h2>
                <div style="color: #555555; font-size: 16px;">{body_html}</div>
                {cta_section}
            </td>
        </tr>
        <tr>
            <td style="padding: 20px; text-align: center; font-size: 12px; color: #888888; border-top: 1px solid #e0e0e0;">
                <p style="margin: 0;">&copy; {datetime.now().year} {APP_NAME}. This is an automated message.</p>
            </td>
        </tr>
    </table>
</body>
</html>"""


def render_password_reset_email(full_name: str, reset_url: str, expires_in_hours: int) -> tuple[str, str]:
    """
    Render password reset email.
    Returns (subject, html_body).
    """
    subject = f"{APP_NAME} - Reset your password"
    body_html = f"""
    <p>Hello {escape(full_name)},</p>
    <p>We received a request to reset the password of your account.</p>
    <p>This link expires in {expires_in_hours} hour(s). If you did not request it, you can ignore this email.</p>
    """
    html = render_email_template(
        title="Password reset",
        body_html=body_html,
        cta_text="Reset password",
        cta_url=reset_url,
    )
    return subject, html


def prescription_email_subject(patient_name: str, language: str) -> str:
    return _text("subject", language).format(patient=patient_name)


def render_prescription_email(
    *,
    language: str,
    patient_name: str,
    doctor_name: str,
    clinic_name: str,
    prescription_date: str,
    medications: Iterable[dict],
) -> tuple[str, str]:
    """
    Render the prescription email in ar/fr/en (anything else falls back to French).
    Returns (subject, html_body).
    """
    subject = prescription_email_subject(patient_name, language)
    direction = "rtl" if language == "ar" else "ltr"
    message = _text("message", language).format(
        doctor=escape(doctor_name),
        clinic=escape(clinic_name),
        date=escape(prescription_date),
    )

    items = []
    for index, med in enumerate(medications, start=1):
        lines = [f"<strong>{index}. {escape(med['medication_name'])}</strong>"]
        for key, icon in (("dosage", "💊"), ("frequency", "⏰"), ("duration", "📅")):
            if med.get(key):
                lines.append(f"<br>{icon} {escape(med[key])}")
        items.append(f'<div class="medication-item">{"".join(lines)}</div>')

    html = f"""<!DOCTYPE html>
<html dir="{direction}" lang="{language}">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333;
           max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f5f5f5; }}
    .container {{ background: white; border-radius: 12px; padding: 30px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }}
    .header {{ text-align: center; border-bottom: 3px solid {BRAND_COLOR}; padding-bottom: 20px; margin-bottom: 25px; }}
    .logo {{ color: {BRAND_COLOR}; font-size: 28px; font-weight: bold; }}
    .clinic-name {{ color: #666; font-size: 14px; margin-top: 5px; }}
    .medications {{ background: #f8f9fa; border-radius: 8px; padding: 20px; margin: 20px 0; }}
    .medications h3 {{ color: {BRAND_COLOR}; margin-top: 0; }}
    .medication-item {{ padding: 10px 0; border-bottom: 1px solid #eee; }}
    .medication-item:last-child {{ border-bottom: none; }}
    .important {{ background: #fff3cd; border: 1px solid #ffc107; border-radius: 8px; padding: 15px; margin-top: 20px; }}
    .footer {{ text-align: center; font-size: 12px; color: #888; margin-top: 30px; padding-top: 20px; border-top: 1px solid #eee; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <div class="logo">{APP_NAME}</div>
      <div class="clinic-name">{escape(clinic_name)}</div>
    </div>
    <div class="content">
      <p>{_text("greeting", language)},</p>
      <p>{message}</p>
      <div class="medications">
        <h3>{_text("medications", language)}</h3>
        {"".join(items)}
      </div>
      <div class="important"><p style="margin: 0;">⚠️ {_text("footer", language)}</p></div>
    </div>
    <div class="footer">
      <p>{_text("sent_via", language)} {APP_NAME}</p>
      <p>&copy; {datetime.now().year} {APP_NAME} - {_text("rights", language)}</p>
    </div>
  </div>
</body>
</html>"""
    return subject, html
