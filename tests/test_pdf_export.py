from pathlib import Path

import fitz  # PyMuPDF

from tapscore.export import write_results_pdf
from tapscore.export.pdf_export import hex_to_rgb
from tapscore.persistence import Contest, Entrant


def _pdf_text(path: Path) -> str:
    doc = fitz.open(str(path))
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def test_results_pdf_lists_top_five(tmp_path: Path, jam_state):
    big = Contest(name="Big Jam", entrants=[Entrant(name=f"Rider {i}", score=i) for i in range(1, 9)])
    contests = jam_state.contests + [big]
    out = write_results_pdf(contests, tmp_path / "results.pdf", tallied_on="January 25, 2026")

    text = _pdf_text(out)
    assert "Contest Results" in text
    assert "Jam A" in text and "Jam B" in text
    assert "Carol" in text and "Dave" in text
    assert "Rider 8" in text and "Rider 4" in text
    # Only the top five of Big Jam are listed
    assert "Rider 3" not in text
    assert "Tallied on January 25, 2026" in text


def test_placeholders_for_empty_and_unscored_contests(tmp_path: Path):
    contests = [
        Contest(name="Empty", entrants=[]),
        Contest(name="Fresh", entrants=[Entrant(name="Nobody Yet")]),
    ]
    text = _pdf_text(write_results_pdf(contests, tmp_path / "placeholders.pdf", tallied_on="today"))
    assert "No entrants" in text
    assert "No scores yet" in text
    assert "Nobody Yet" not in text


def test_many_contests_spill_onto_more_pages(tmp_path: Path):
    contests = [
        Contest(name=f"Heat {i}", entrants=[Entrant(name=f"Skater {i}-{j}", score=j) for j in range(5)])
        for i in range(12)
    ]
    out = write_results_pdf(contests, tmp_path / "long.pdf", tallied_on="today")
    doc = fitz.open(str(out))
    try:
        assert doc.page_count > 1
    finally:
        doc.close()
    assert "Heat 11" in _pdf_text(out)


def test_hex_to_rgb():
    assert hex_to_rgb("#FF0000") == (1.0, 0.0, 0.0)
    assert hex_to_rgb("#000000") == (0.0, 0.0, 0.0)
