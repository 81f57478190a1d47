"""Command line helpers for the policy engine."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, List, Optional

from policy_engine.diffing import LcsDiffer, PositionalWordDiffer
from policy_engine.logging_config import configure_logging
from policy_engine.models import ClauseSelectionInput, DiffOptions
from policy_engine.selection import ClauseSelector, SelectorOptions


def _load_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _write_output(result: Any, path: Path | None) -> None:
    if not path:
        print(json.dumps(result, indent=2))
        return
    path.write_text(json.dumps(result, indent=2))


def _diff_options(args: argparse.Namespace) -> DiffOptions:
    return DiffOptions(
        ignore_case=args.ignore_case,
        ignore_whitespace=args.ignore_whitespace,
        granularity=getattr(args, "granularity", "sentence"),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Policy clause selection and diff engine")
    parser.add_argument("--log-level", default=None, help="structlog level (default INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    select_parser = subparsers.add_parser("select", help="Select clauses for a policy context")
    select_parser.add_argument("--audience", required=True, help="k12 or highered")
    select_parser.add_argument("--risk-profile", required=True, help="low, medium, high or critical")
    select_parser.add_argument(
        "--tool-use-mode",
        required=True,
        help="prohibited, restricted, permitted or encouraged",
    )
    select_parser.add_argument("--state")
    select_parser.add_argument("--jurisdiction")
    select_parser.add_argument("--tag", dest="tags", action="append", default=[])
    select_parser.add_argument("--include", action="append", default=[])
    select_parser.add_argument("--exclude", action="append", default=[])
    select_parser.add_argument(
        "--transitive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Pull in dependencies of dependencies (default from config)",
    )
    select_parser.add_argument("--json", dest="json_output", type=Path)

    for name, help_text in (
        ("diff", "Report segment-level differences between two policy texts"),
        ("redline", "Generate tracked word-level changes between two policy texts"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file_a", type=Path, help="Base policy text")
        sub.add_argument("file_b", type=Path, help="Revised policy text")
        sub.add_argument("--ignore-case", action="store_true")
        sub.add_argument("--ignore-whitespace", action="store_true")
        sub.add_argument("--json", dest="json_output", type=Path)
        if name == "diff":
            sub.add_argument(
                "--granularity",
                choices=["word", "sentence", "paragraph"],
                default="sentence",
            )
        else:
            sub.add_argument("--author", default=None)
            sub.add_argument("--html", type=Path, help="Also write a redlined HTML rendering")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "select":
        selection = ClauseSelectionInput(
            audience=args.audience,
            risk_profile=args.risk_profile,
            tool_use_mode=args.tool_use_mode,
            state=args.state,
            jurisdiction=args.jurisdiction,
            custom_tags=args.tags or None,
            include_clauses=args.include or None,
            exclude_clauses=args.exclude or None,
        )
        options = SelectorOptions()
        if args.transitive is not None:
            options.transitive_dependencies = args.transitive
        selector = ClauseSelector(options=options)
        selected = selector.select_clauses(selection)
        _write_output([clause.model_dump(by_alias=True) for clause in selected], args.json_output)

    elif args.command == "diff":
        diffs = LcsDiffer().diff_policies(
            _load_text(args.file_a), _load_text(args.file_b), _diff_options(args)
        )
        _write_output([diff.model_dump(by_alias=True) for diff in diffs], args.json_output)

    elif args.command == "redline":
        base_text = _load_text(args.file_a)
        differ = PositionalWordDiffer()
        changes = differ.generate_redline_changes(
            base_text, _load_text(args.file_b), args.author, _diff_options(args)
        )
        if args.html:
            args.html.write_text(differ.render_redline_html(base_text, changes), encoding="utf-8")
        _write_output([change.model_dump(by_alias=True) for change in changes], args.json_output)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
