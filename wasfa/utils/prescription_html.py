# wasfa/utils/prescription_html.py
"""
HTML + CSS print view of a prepared prescription document.
"""

from html import escape
from typing import Optional


def _img(src: Optional[str], css_class: str, alt: str) -> str:
    if not src:
        return ""
    return f'<img src="{escape(src, quote=True)}" class="{css_class}" alt="{alt}">'


def render_prescription_html(
    document: dict,
    logo_url: Optional[str] = None,
    signature_url: Optional[str] = None,
) -> str:
    labels = document["labels"]
    rows = "".join(
        "<tr>"
        f"<td>{med['index']}</td>"
        f"<td class=\"med-name\">{escape(med['medication_name'])}</td>"
        f"<td>{escape(med['dosage'])}</td>"
        f"<td>{escape(med['form'])}</td>"
        f"<td>{escape(med['frequency'])}</td>"
        f"<td>{escape(med['duration'])}</td>"
        "</tr>"
        for med in document["medications"]
    )

    header_lines = "".join(
        f'<div class="{css}">{escape(text)}</div>'
        for css, text in (
            ("specialty", document["specialty"]),
            ("license", document["license_line"]),
            ("clinic-info", document["clinic_line"]),
        )
        if text
    )
    dob = (
        f'<div class="dob">{escape(labels["date_of_birth"])}: {escape(document["date_of_birth"])}</div>'
        if document["date_of_birth"]
        else ""
    )
    notes = (
        f'<div class="notes"><strong>{escape(labels["notes"])}:</strong><div>{escape(document["notes"])}</div></div>'
        if document["notes"]
        else ""
    )
    footer = f'<div class="footer">{escape(document["footer_note"])}</div>' if document["footer_note"] else ""

    return f"""<!DOCTYPE html>
<html dir="{document['direction']}" lang="{document['language']}">
<head>
  <meta charset="UTF-8">
  <title>{escape(document['title'])}</title>
  <style>
    @page {{ size: A4; margin: 15mm 20mm 10mm 20mm; }}
    body {{ font-family: 'Segoe UI', Tahoma, Arial, sans-serif; color: #000; margin: 0; }}
    .prescription-header {{ text-align: center; border-bottom: 2px solid #0d9488; padding-bottom: 16px; margin-bottom: 24px; }}
    .logo {{ max-height: 64px; margin-bottom: 8px; }}
    .doctor-name {{ font-size: 24px; font-weight: bold; color: #0d9488; }}
    .specialty, .license, .clinic-info {{ color: #6b7280; font-size: 14px; margin-top: 4px; }}
    .date {{ text-align: end; color: #6b7280; font-size: 14px; margin-bottom: 16px; }}
    .patient-info {{ background: #f3f4f6; padding: 16px; border-radius: 8px; margin-bottom: 24px; }}
    .patient-name {{ font-weight: bold; font-size: 18px; }}
    .dob {{ color: #6b7280; font-size: 14px; margin-top: 4px; }}
    .medications-table {{ width: 100%; border-collapse: collapse; margin-bottom: 24px; }}
    .medications-table th {{ background: #0d9488; color: #fff; text-align: start; }}
    .medications-table th, .medications-table td {{ border: 1px solid #d1d5db; padding: 10px; text-align: start; }}
    .medications-table tr:nth-child(odd) td {{ background: #f9fafb; }}
    .med-name {{ font-weight: 500; }}
    .notes {{ border: 1px solid #d1d5db; border-radius: 8px; padding: 16px; margin-bottom: 24px; }}
    .signature {{ margin-top: 48px; text-align: start; }}
    .signature-img {{ height: 64px; object-fit: contain; }}
    .footer {{ border-top: 1px solid #d1d5db; padding-top: 16px; margin-top: 32px; text-align: center; color: #6b7280; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="prescription-header">
    {_img(logo_url, "logo", "Logo")}
    <div class="doctor-name">{escape(document['doctor_name'])}</div>
    {header_lines}
  </div>
  <div class="date">{escape(document['date'])}</div>
  <div class="patient-info">
    <div><strong>{escape(labels['patient'])}:</strong></div>
    <div class="patient-name">{escape(document['patient_name'])}</div>
    {dob}
  </div>
  <div><strong>{escape(labels['medications'])}:</strong></div>
  <table class="medications-table">
    <thead>
      <tr>
        <th>#</th>
        <th>{escape(labels['medication_name'])}</th>
        <th>{escape(labels['dosage'])}</th>
        <th>{escape(labels['form'])}</th>
        <th>{escape(labels['frequency'])}</th>
        <th>{escape(labels['duration'])}</th>
      </tr>
    </thead>
    <tbody>{rows}</tbody>
  </table>
  {notes}
  <div class="signature">
    <div>{escape(labels['signature'])}</div>
    {_img(signature_url, "signature-img", "Signature")}
  </div>
  {footer}
</body>
</html>"""
