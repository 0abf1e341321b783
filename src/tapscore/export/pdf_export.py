"""Contest results PDF.

Lists the top five entrants of every contest under a "Contest Results"
title, with a "Tallied on <date>" footer. Pages are US letter; the layout
spills onto a new page when a contest block would not fit.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import fitz  # PyMuPDF

from ..persistence.models import Contest
from .leaderboard import top_entrants

logger = logging.getLogger(__name__)

# --- Page layout constants (letter: 612 x 792 pt) ---
PAGE_W = 612
PAGE_H = 792
MARGIN = 48
RANK_X = MARGIN
NAME_X = MARGIN + 40
BOTTOM_Y = PAGE_H - 60
FOOTER_Y = PAGE_H - 30

TITLE = "Contest Results"
TOP_N = 5

FONT_REGULAR = "helv"
FONT_BOLD = "hebo"

TITLE_SIZE = 24
CONTEST_SIZE = 16
ROW_SIZE = 11
FOOTER_SIZE = 9

ROW_HEIGHT = 18
CONTEST_HEADER_HEIGHT = 26
CONTEST_GAP = 18

BLACK = (0, 0, 0)
GRAY = (0.45, 0.45, 0.45)
DIVIDER = (0.8, 0.8, 0.8)


def hex_to_rgb(hex_value: str) -> Tuple[float, float, float]:
    """``#RRGGBB`` -> PyMuPDF color tuple with components in 0..1."""
    h = hex_value.lstrip("#")
    return tuple(int(h[i:i + 2], 16) / 255 for i in (0, 2, 4))  # type: ignore[return-value]


def tallied_on_label(now: Optional[datetime] = None) -> str:
    d = now or datetime.now()
    return f"{d:%B} {d.day}, {d.year}"


def _block_height(contest: Contest) -> float:
    rows = max(1, len(top_entrants(contest, TOP_N)))
    return CONTEST_HEADER_HEIGHT + rows * ROW_HEIGHT + CONTEST_GAP


def _draw_contest(page, contest: Contest, y: float) -> float:
    page.insert_text(fitz.Point(MARGIN, y), contest.name or "Untitled",
                     fontname=FONT_BOLD, fontsize=CONTEST_SIZE,
                     color=hex_to_rgb(contest.accent_hex))
    y += CONTEST_HEADER_HEIGHT

    leaders = top_entrants(contest, TOP_N)
    if not leaders:
        page.insert_text(fitz.Point(MARGIN, y), "No entrants",
                         fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=GRAY)
        y += ROW_HEIGHT
    elif all(e.score == 0 for e in leaders):
        page.insert_text(fitz.Point(MARGIN, y), "No scores yet",
                         fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=GRAY)
        y += ROW_HEIGHT
    else:
        for rank, entrant in enumerate(leaders, start=1):
            page.insert_text(fitz.Point(RANK_X, y), f"#{rank}",
                             fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=GRAY)
            page.insert_text(fitz.Point(NAME_X, y), entrant.name,
                             fontname=FONT_REGULAR, fontsize=ROW_SIZE, color=BLACK)
            score = str(entrant.score)
            tw = fitz.get_text_length(score, fontname=FONT_BOLD, fontsize=ROW_SIZE)
            page.insert_text(fitz.Point(PAGE_W - MARGIN - tw, y), score,
                             fontname=FONT_BOLD, fontsize=ROW_SIZE, color=BLACK)
            y += ROW_HEIGHT

    line_y = y - ROW_HEIGHT / 2 + 6
    page.draw_line(fitz.Point(MARGIN, line_y), fitz.Point(PAGE_W - MARGIN, line_y),
                   color=DIVIDER, width=0.75)
    return y + CONTEST_GAP


def _draw_footer(page, text: str) -> None:
    tw = fitz.get_text_length(text, fontname=FONT_REGULAR, fontsize=FOOTER_SIZE)
    page.insert_text(fitz.Point(PAGE_W / 2 - tw / 2, FOOTER_Y), text,
                     fontname=FONT_REGULAR, fontsize=FOOTER_SIZE, color=GRAY)


def write_results_pdf(
    contests: Sequence[Contest],
    output_path: Union[str, Path],
    tallied_on: Optional[str] = None,
) -> Path:
    """Render the results PDF for ``contests`` (in the given order) to ``output_path``."""
    footer = f"Tallied on {tallied_on or tallied_on_label()}"
    doc = fitz.open()
    try:
        page = doc.new_page(width=PAGE_W, height=PAGE_H)
        page.insert_text(fitz.Point(MARGIN, MARGIN + TITLE_SIZE), TITLE,
                         fontname=FONT_BOLD, fontsize=TITLE_SIZE, color=BLACK)
        y = MARGIN + TITLE_SIZE + 40

        for contest in contests:
            if y + _block_height(contest) > BOTTOM_Y:
                page = doc.new_page(width=PAGE_W, height=PAGE_H)
                y = MARGIN + CONTEST_SIZE
            y = _draw_contest(page, contest, y)

        _draw_footer(page, footer)
        doc.save(str(output_path))
    finally:
        doc.close()
    logger.info("Wrote results PDF for %d contests to %s (%s)", len(contests), output_path, footer)
    return Path(output_path)
