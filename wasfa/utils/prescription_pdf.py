# wasfa/utils/prescription_pdf.py
"""
Render a prescription document as a single A4 page using reportlab.
Matches the layout of the HTML print view. Content that would overflow the
page is scaled down to fit.
"""

from io import BytesIO
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, KeepInFrame, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from wasfa.utils.pdf_fonts import fonts_for, shape_text

BRAND_COLOR = colors.HexColor("#0d9488")

LOGO_HEIGHT = 18 * mm
SIGNATURE_HEIGHT = 16 * mm
# SimpleDocTemplate frames pad 6pt on every side
FRAME_PADDING = 6


def _image(data: bytes, height: float) -> Image:
    """
    Scale an embedded image to a fixed height.
    Raises whatever reportlab/PIL raises for unreadable data.
    """
    reader = ImageReader(BytesIO(data))
    width, original_height = reader.getSize()
    image = Image(BytesIO(data), width=width * height / original_height, height=height)
    image.hAlign = "CENTER"
    return image


def generate_prescription_pdf(
    document: dict,
    logo: Optional[bytes] = None,
    signature: Optional[bytes] = None,
) -> BytesIO:
    """
    Generate a PDF from a prepared prescription document
    (see document_service.build_document).
    Returns a BytesIO buffer containing the PDF.
    """
    buffer = BytesIO()

    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=20 * mm,
        leftMargin=20 * mm,
        topMargin=15 * mm,
        bottomMargin=10 * mm,
        title=document["title"],
    )

    language = document["language"]
    rtl = document["direction"] == "rtl"
    align = TA_RIGHT if rtl else TA_LEFT
    font, bold_font = fonts_for(language)

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "DoctorName",
        parent=styles["Heading1"],
        fontSize=20,
        textColor=BRAND_COLOR,
        alignment=TA_CENTER,
        spaceAfter=4,
        fontName=bold_font,
    )
    center_style = ParagraphStyle(
        "Centered",
        parent=styles["Normal"],
        fontSize=10,
        textColor=colors.grey,
        alignment=TA_CENTER,
        spaceAfter=2,
        fontName=font,
    )
    heading_style = ParagraphStyle(
        "SectionHeading",
        parent=styles["Heading2"],
        fontSize=12,
        alignment=align,
        spaceAfter=4,
        fontName=bold_font,
    )
    normal_style = ParagraphStyle(
        "Body",
        parent=styles["Normal"],
        fontSize=10,
        alignment=align,
        spaceAfter=4,
        fontName=font,
    )
    cell_style = ParagraphStyle("Cell", parent=normal_style, fontSize=9, spaceAfter=0)
    date_style = ParagraphStyle("Date", parent=normal_style, alignment=TA_LEFT if rtl else TA_RIGHT)

    def p(text: str, style: ParagraphStyle) -> Paragraph:
        return Paragraph(escape(shape_text(text, language)), style)

    elements = []

    # Header
    if logo:
        elements.append(_image(logo, LOGO_HEIGHT))
        elements.append(Spacer(1, 2 * mm))
    elements.append(p(document["doctor_name"], title_style))
    for line in (document["specialty"], document["license_line"], document["clinic_line"]):
        if line:
            elements.append(p(line, center_style))

    header_rule = Table([[""]], colWidths=[170 * mm], rowHeights=[1])
    header_rule.setStyle(TableStyle([("LINEBELOW", (0, 0), (-1, -1), 2, BRAND_COLOR)]))
    elements.append(header_rule)
    elements.append(Spacer(1, 4 * mm))

    elements.append(p(document["date"], date_style))
    elements.append(Spacer(1, 2 * mm))

    # Patient
    labels = document["labels"]
    elements.append(p(f"{labels['patient']}:", heading_style))
    elements.append(p(document["patient_name"], normal_style))
    if document["date_of_birth"]:
        elements.append(p(f"{labels['date_of_birth']}: {document['date_of_birth']}", normal_style))
    elements.append(Spacer(1, 4 * mm))

    # Medications
    elements.append(p(f"{labels['medications']}:", heading_style))
    header = ["#", labels["medication_name"], labels["dosage"], labels["form"], labels["frequency"], labels["duration"]]
    rows = [[p(h, cell_style) for h in header]]
    for med in document["medications"]:
        rows.append(
            [
                p(str(med["index"]), cell_style),
                p(med["medication_name"], cell_style),
                p(med["dosage"], cell_style),
                p(med["form"], cell_style),
                p(med["frequency"], cell_style),
                p(med["duration"], cell_style),
            ]
        )
    widths = [10 * mm, 50 * mm, 25 * mm, 25 * mm, 35 * mm, 25 * mm]
    if rtl:
        rows = [list(reversed(r)) for r in rows]
        widths = list(reversed(widths))

    medicine_table = Table(rows, colWidths=widths, repeatRows=1)
    medicine_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), BRAND_COLOR),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#d1d5db")),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 4),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ]
        )
    )
    elements.append(medicine_table)
    elements.append(Spacer(1, 5 * mm))

    if document["notes"]:
        elements.append(p(f"{labels['notes']}:", heading_style))
        elements.append(p(document["notes"], normal_style))
        elements.append(Spacer(1, 4 * mm))

    # Signature
    elements.append(Spacer(1, 8 * mm))
    elements.append(p(labels["signature"], normal_style))
    if signature:
        sig = _image(signature, SIGNATURE_HEIGHT)
        sig.hAlign = "RIGHT" if rtl else "LEFT"
        elements.append(sig)
    else:
        elements.append(Spacer(1, SIGNATURE_HEIGHT))

    if document["footer_note"]:
        elements.append(Spacer(1, 6 * mm))
        elements.append(p(document["footer_note"], center_style))

    # Always one page: shrink the whole story when it is too tall
    page = KeepInFrame(
        doc.width - 2 * FRAME_PADDING,
        doc.height - 2 * FRAME_PADDING,
        elements,
        mode="shrink",
    )
    doc.build([page])
    buffer.seek(0)
    return buffer
