# wasfa/utils/pdf_fonts.py
"""
Fonts and text shaping for PDF output.

reportlab's built-in Helvetica has no Arabic glyphs, so right-to-left
documents are drawn with a TrueType font that does. PDF_FONT_PATH wins;
otherwise the first installed font from ARABIC_FONT_CANDIDATES is used.

Arabic text must also be shaped (joined letter forms) and put in visual
order before reportlab draws it, since reportlab lays glyphs out left to right.
"""

import logging
import os
from functools import lru_cache
from typing import Optional

import arabic_reshaper
from bidi import get_display
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from wasfa.core.config import get_settings
from wasfa.utils.labels import RTL_LANGUAGES

logger = logging.getLogger(__name__)

BASE_FONT = "Helvetica"
BASE_FONT_BOLD = "Helvetica-Bold"
ARABIC_FONT = "WasfaArabic"

ARABIC_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/noto/NotoNaskhArabic-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoSansArabic-Regular.ttf",
    "/usr/share/fonts/noto/NotoNaskhArabic-Regular.ttf",
    "/usr/share/fonts/noto/NotoSansArabic-Regular.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSerif.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:/Windows/Fonts/arial.ttf",
)


@lru_cache()
def arabic_font_name() -> Optional[str]:
    """
    Register the Arabic-capable font once and return its reportlab name,
    or None when no usable font file exists.
    """
    configured = get_settings().pdf_font_path
    candidates = ([configured] if configured else []) + list(ARABIC_FONT_CANDIDATES)

    for path in candidates:
        if not os.path.isfile(path):
            continue
        try:
            pdfmetrics.registerFont(TTFont(ARABIC_FONT, path))
        except (TTFError, OSError) as exc:
            logger.warning("Cannot use %s as PDF font: %s", path, exc)
            continue
        logger.info("PDF font for right-to-left documents: %s", path)
        return ARABIC_FONT

    logger.warning("No Arabic-capable TTF font found, set PDF_FONT_PATH; Arabic PDFs will not be readable")
    return None


def fonts_for(language: str) -> tuple[str, str]:
    """(regular, bold) font names for a document language."""
    if language in RTL_LANGUAGES:
        font = arabic_font_name()
        if font:
            return font, font
    return BASE_FONT, BASE_FONT_BOLD


def shape_text(text: str, language: str) -> str:
    """
    Prepare text for drawing. Right-to-left languages get joined letter
    forms in visual order; Latin runs inside them keep their order.
    """
    if not text or language not in RTL_LANGUAGES:
        return text or ""
    return get_display(arabic_reshaper.reshape(text))
