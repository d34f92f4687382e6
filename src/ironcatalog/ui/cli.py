from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from ironcatalog.app import (
    get_seed_diagnostics,
    import_exercises,
    recompute_exercise_links,
    repair_seeded_exercises,
    seed_exercises_if_needed,
)
from ironcatalog.config import configure_logging
from ironcatalog.domain.catalog_pipeline import ResultStatus
from ironcatalog.domain.catalog_pipeline.state import dump_state

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from ironcatalog.domain.catalog_pipeline import SeedDiagnostics

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Maintain the exercise catalog")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Import the upstream exercise catalog")
    import_cmd.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch, validate and hash only; report projected counts",
    )
    import_cmd.add_argument(
        "--only-if-changed",
        action="store_true",
        help="Skip the import when the catalog hash matches the last successful run",
    )

    repair = subparsers.add_parser("repair", help="Repair already-seeded exercises")
    repair.add_argument("--dry-run", action="store_true", help="Report changes only")
    repair.add_argument(
        "--force",
        action="store_true",
        help="Run even if a repair already succeeded for the configured version",
    )

    link = subparsers.add_parser("link", help="Recompute progression/regression links")
    link.add_argument("--dry-run", action="store_true", help="Report changes only")
    link.add_argument(
        "--force",
        action="store_true",
        help="Overwrite links that are already set",
    )

    subparsers.add_parser("seed", help="Bootstrap and import the catalog when needed")
    subparsers.add_parser("diagnostics", help="Print seed state and catalog counts as JSON")

    return parser.parse_args(list(argv))


def _render_diagnostics(diagnostics: SeedDiagnostics) -> str:
    document = {
        "configured_version": diagnostics.configured_version,
        "up_to_date": diagnostics.up_to_date,
        "counts": asdict(diagnostics.counts),
        "state": dump_state(diagnostics.state),
    }
    return json.dumps(document, indent=2, sort_keys=True)


def _run(parsed_args: argparse.Namespace) -> ResultStatus | None:
    if parsed_args.command == "import":
        return import_exercises(
            dry_run=parsed_args.dry_run,
            only_if_changed=parsed_args.only_if_changed,
        ).status
    if parsed_args.command == "repair":
        return repair_seeded_exercises(dry_run=parsed_args.dry_run, force=parsed_args.force).status
    if parsed_args.command == "link":
        return recompute_exercise_links(dry_run=parsed_args.dry_run, force=parsed_args.force).status
    if parsed_args.command == "seed":
        return seed_exercises_if_needed().status
    if parsed_args.command == "diagnostics":
        print(_render_diagnostics(get_seed_diagnostics()))  # noqa: T201
        return None
    raise ValueError(f"Unsupported command: {parsed_args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        status = _run(parsed_args)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    if status is ResultStatus.ERROR:
        log.error("Catalog %s finished with an error", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
