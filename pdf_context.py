from __future__ import annotations

import logging
import math

import pdfplumber

from pdf_config import MergeConfig
from pdf_extract import merge_words
from pdf_models import Font, Glyph, Rectangle, Ruling, TextRun

logger = logging.getLogger(__name__)

_VERTICAL_EDGE_MAX_WIDTH = 2


def _space_widths(chars: list[dict]) -> dict[tuple[str, float], float]:
    """Width of an observed space char per (fontname, size)."""
    widths: dict[tuple[str, float], float] = {}
    for c in chars:
        if c.get("text") != " ":
            continue
        key = (c.get("fontname", ""), round(float(c.get("size", 0.0)), 2))
        width = float(c["x1"]) - float(c["x0"])
        if width > 0 and key not in widths:
            widths[key] = width
    return widths


def glyphs_from_chars(chars: list[dict]) -> list[Glyph]:
    """Convert pdfplumber ``page.chars`` into Glyphs, keeping their order.

    One Font handle is created per font name so that glyphs of the same font
    share an identical handle. Width-of-space comes from a space char of the
    same font and size in *chars*; without one it is NaN.
    """
    fonts: dict[str, Font] = {}
    space_widths = _space_widths(chars)

    glyphs: list[Glyph] = []
    for c in chars:
        fontname = c.get("fontname", "")
        font = fonts.get(fontname)
        if font is None:
            font = fonts[fontname] = Font(fontname)
        size = float(c.get("size", 0.0))
        glyphs.append(
            Glyph(
                bbox=Rectangle.from_bounds(float(c["x0"]), float(c["top"]), float(c["x1"]), float(c["bottom"])),
                text=c.get("text", ""),
                font=font,
                font_size=size,
                width_of_space=space_widths.get((fontname, round(size, 2)), math.nan),
            )
        )
    return glyphs


def get_vertical_rulings(page: pdfplumber.page.Page, min_height: float = 0.0) -> list[Ruling]:
    """Return deduplicated vertical rulings from *page*'s edges, sorted by position.

    An edge counts as vertical when it is narrower than 2pt; pdfplumber marks
    diagonal lines ``"v"`` too, so the orientation alone is not enough. Edges
    shorter than *min_height* points are skipped.
    """
    seen: set[tuple[float, float, float]] = set()
    for edge in (page.edges or []):
        x0 = edge.get("x0", 0)
        x1 = edge.get("x1", 0)
        if abs(x1 - x0) >= _VERTICAL_EDGE_MAX_WIDTH:
            continue
        top = edge.get("top", 0)
        bottom = edge.get("bottom", 0)
        if bottom - top < min_height:
            continue
        seen.add((round((x0 + x1) / 2, 1), round(top, 1), round(bottom, 1)))

    return [Ruling(position=x, top=top, bottom=bottom) for x, top, bottom in sorted(seen)]


def process_page(
    page: pdfplumber.page.Page,
    use_rulings: bool = True,
    config: MergeConfig | None = None,
) -> list[TextRun]:
    glyphs = glyphs_from_chars(page.chars)
    rulings = get_vertical_rulings(page) if use_rulings else []
    logger.debug(
        "page %s: %d chars, %d vertical rulings",
        getattr(page, "page_number", "?"),
        len(glyphs),
        len(rulings),
    )
    return merge_words(glyphs, rulings, config)
