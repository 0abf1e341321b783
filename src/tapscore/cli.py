from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .backup import read_backup_file, write_backup_file
from .config import TallyConfig, load_config
from .errors import TapScoreError
from .export import leaderboard, naming
from .export.csv_export import write_csv
from .export.pdf_export import TITLE as RESULTS_TITLE, write_results_pdf
from .keeper import ScoreKeeper
from .logging_config import configure_logging
from .paths import AppPaths
from .persistence import DebouncedSaveScheduler, DurableStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tapscore", description="Keep live contest scores")
    parser.add_argument("--data-dir", default=None, help="Directory holding the state file")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print every contest with its ranking")

    p = sub.add_parser("add-contest", help="Create a contest and select it")
    p.add_argument("name", nargs="?", default="", help="Contest name (default: New Contest)")

    p = sub.add_parser("select", help="Select a contest by name")
    p.add_argument("name")

    p = sub.add_parser("add-entrant", help="Add an entrant to the selected contest")
    p.add_argument("name")

    p = sub.add_parser("remove-entrant", help="Remove an entrant from the selected contest")
    p.add_argument("name")

    p = sub.add_parser("tap", help="Add points to an entrant in the selected contest")
    p.add_argument("name")
    p.add_argument("--times", type=int, default=1, help="Number of taps (default 1)")

    p = sub.add_parser("reset", help="Zero the scores of the selected contest")
    p.add_argument("--all", action="store_true", help="Zero every contest")

    p = sub.add_parser("delete-contest", help="Delete the selected contest")
    p.add_argument("--all", action="store_true", help="Delete every contest")

    p = sub.add_parser("export-csv", help="Write a CSV score sheet")
    p.add_argument("path", help="Output file, or a directory for a timestamped name")
    p.add_argument("--flat", action="store_true", help="One ranking across all contests")

    p = sub.add_parser("export-pdf", help="Write the results PDF")
    p.add_argument("path", help="Output file, or a directory for a timestamped name")

    p = sub.add_parser("export-json", help="Write a JSON backup")
    p.add_argument("path", help="Output file, or a directory for a timestamped name")

    p = sub.add_parser("import-json", help="Replace all contests with a JSON backup")
    p.add_argument("path")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def state_path(args: argparse.Namespace, config: TallyConfig) -> Path:
    if args.data_dir:
        return Path(args.data_dir).expanduser() / config.state_file_name
    return config.state_file(AppPaths())


def export_target(raw: str, default_name: str) -> Path:
    """An export path; a directory gets a timestamped default file name."""
    path = Path(raw).expanduser()
    if path.is_dir():
        return path / default_name
    return path


def render_contests(keeper: ScoreKeeper) -> str:
    lines: List[str] = []
    selected = keeper.current_contest_id
    for contest in keeper.contests:
        marker = "*" if contest.id == selected else " "
        lines.append(f"{marker} {contest.name}")
        ranked = leaderboard.rank_entrants(contest)
        if not ranked:
            lines.append("    (no entrants)")
        for rank, entrant in enumerate(ranked, start=1):
            lines.append(f"    #{rank:<3} {entrant.name}  {entrant.score}")
    if not lines:
        lines.append("(no contests)")
    return "\n".join(lines)


def run_command(args: argparse.Namespace, keeper: ScoreKeeper) -> int:
    cmd = args.command
    if cmd == "show":
        print(render_contests(keeper))
    elif cmd == "add-contest":
        contest = keeper.add_contest(args.name)
        print(f"Added {contest.name}")
    elif cmd == "select":
        contest = keeper.select_contest(keeper.find_contest(args.name).id)
        print(f"Selected {contest.name}")
    elif cmd == "add-entrant":
        entrant = keeper.add_entrant(args.name)
        print(f"Added {entrant.name}")
    elif cmd == "remove-entrant":
        entrant = keeper.remove_entrant(keeper.find_entrant(args.name).id)
        print(f"Removed {entrant.name}")
    elif cmd == "tap":
        entrant = keeper.find_entrant(args.name)
        score = entrant.score
        for _ in range(max(0, args.times)):
            score = keeper.increment(entrant.id)
        print(f"{entrant.name}: {score}")
    elif cmd == "reset":
        if args.all:
            keeper.reset_all_contests()
        else:
            keeper.reset_current_contest()
        print(keeper.banner_message or "Nothing to reset.")
    elif cmd == "delete-contest":
        if args.all:
            keeper.delete_all_contests()
        else:
            keeper.delete_current_contest()
        print(keeper.banner_message or "Nothing to delete.")
    elif cmd == "export-csv":
        target = export_target(args.path, naming.csv_file_name())
        print(f"Wrote {write_csv(target, keeper.contests, flat=args.flat)}")
    elif cmd == "export-pdf":
        target = export_target(args.path, naming.pdf_file_name(RESULTS_TITLE))
        print(f"Wrote {write_results_pdf(keeper.contests, target)}")
    elif cmd == "export-json":
        target = export_target(args.path, naming.json_file_name())
        print(f"Wrote {write_backup_file(target, keeper.state)}")
    elif cmd == "import-json":
        imported = read_backup_file(args.path)
        keeper.replace_all_contests(imported.contests, imported.selected_contest_id)
        print(f"Imported {len(imported.contests)} contests")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except TapScoreError as e:
        print(str(e), file=sys.stderr)
        return 2
    configure_logging(logging.DEBUG if args.debug else config.log_level)

    store = DurableStore(state_path(args, config))
    scheduler = DebouncedSaveScheduler(store, interval=config.debounce_seconds)
    keeper = ScoreKeeper.open(store, scheduler=scheduler, undo_depth=config.undo_depth)
    try:
        return run_command(args, keeper)
    except TapScoreError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        keeper.close()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
