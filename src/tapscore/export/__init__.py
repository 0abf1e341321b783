"""Leaderboard exports: CSV sheets, the results PDF and file naming helpers."""

from .csv_export import full_scores_csv, grouped_scores_csv, write_csv
from .leaderboard import contests_by_name, rank_entrants, top_entrants
from .naming import csv_file_name, json_file_name, pdf_file_name, safe_file_component, timestamp
from .pdf_export import write_results_pdf

__all__ = [
    "full_scores_csv",
    "grouped_scores_csv",
    "write_csv",
    "contests_by_name",
    "rank_entrants",
    "top_entrants",
    "csv_file_name",
    "json_file_name",
    "pdf_file_name",
    "safe_file_component",
    "timestamp",
    "write_results_pdf",
]
