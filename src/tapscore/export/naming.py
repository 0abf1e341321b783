from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

_UNSAFE = re.compile(r'[/\\:?%*|"<>\n\r\t]')


def timestamp(now: Optional[datetime] = None) -> str:
    """Local time as ``YYYY-MM-DD_HH-MM`` for export file names."""
    return (now or datetime.now()).strftime("%Y-%m-%d_%H-%M")


def safe_file_component(raw: str) -> str:
    """Make a string usable inside a file name."""
    trimmed = raw.strip()
    if not trimmed:
        return "Export"
    out = _UNSAFE.sub("_", trimmed).replace(" ", "_")
    while "__" in out:
        out = out.replace("__", "_")
    return out


def csv_file_name(prefix: str = "TapScore_AllScores", now: Optional[datetime] = None) -> str:
    return f"{safe_file_component(prefix)}_{timestamp(now)}.csv"


def pdf_file_name(title: str, now: Optional[datetime] = None) -> str:
    return f"{safe_file_component(title)}_{timestamp(now)}.pdf"


def json_file_name(prefix: str = "TapScore_Backup", now: Optional[datetime] = None) -> str:
    return f"{safe_file_component(prefix)}_{timestamp(now)}.json"
