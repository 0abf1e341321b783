"""CSV score sheets.

Two layouts share the header ``Contest,Entrant,Score``:
  - grouped: one block per contest (contests by name), each block ranked
  - full: every entrant of every contest in a single ranking
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple, Union

from ..persistence.models import Contest
from .leaderboard import contests_by_name, rank_entrants

logger = logging.getLogger(__name__)

HEADER = ("Contest", "Entrant", "Score")

Row = Tuple[str, str, int]


def _render(rows: Iterable[Row]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(HEADER)
    writer.writerows(rows)
    # Rows are newline-separated, with no newline after the last one
    return buf.getvalue()[:-1]


def grouped_rows(contests: Sequence[Contest]) -> List[Row]:
    rows: List[Row] = []
    for contest in contests_by_name(contests):
        for entrant in rank_entrants(contest):
            rows.append((contest.name, entrant.name, entrant.score))
    return rows


def full_rows(contests: Sequence[Contest]) -> List[Row]:
    rows = [(c.name, e.name, e.score) for c in contests for e in c.entrants]
    rows.sort(key=lambda r: (-r[2], r[0], r[1]))
    return rows


def grouped_scores_csv(contests: Sequence[Contest]) -> str:
    return _render(grouped_rows(contests))


def full_scores_csv(contests: Sequence[Contest]) -> str:
    return _render(full_rows(contests))


def write_csv(path: Union[str, Path], contests: Sequence[Contest], *, flat: bool = False) -> Path:
    """Write the grouped sheet (or the flat ranking when ``flat``) to ``path``."""
    text = full_scores_csv(contests) if flat else grouped_scores_csv(contests)
    p = Path(path)
    with open(p, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    logger.info("Wrote %s CSV to %s", "flat" if flat else "grouped", p)
    return p
