"""lessongraph CLI: validate and sequence a lesson corpus."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import List, Optional

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    try:
        lessongraph_version = get_version("lessongraph")
    except PackageNotFoundError:
        lessongraph_version = "dev"

    parser = argparse.ArgumentParser(
        prog="lessongraph",
        description="lessongraph: validate and sequence curriculum prerequisite graphs"
    )
    parser.add_argument("--version", action="version", version=f"lessongraph {lessongraph_version}")

    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "content_root",
        type=Path,
        help="Directory containing lesson markdown files"
    )
    parent_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to lessongraph.yaml (defaults to <content_root>/lessongraph.yaml if present)"
    )
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate the prerequisite graph and report findings",
        parents=[parent_parser]
    )
    validate_parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Treat warnings as failures for the exit code"
    )
    validate_parser.add_argument(
        "--include-drafts",
        action="store_true",
        default=None,
        help="Include draft lessons in the computed sequence"
    )
    validate_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format for stdout"
    )
    validate_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write validation.json (and sequence.json when valid) to this directory"
    )

    # sequence command
    sequence_parser = subparsers.add_parser(
        "sequence",
        help="Print the learning path (fails if the graph is invalid)",
        parents=[parent_parser]
    )
    sequence_parser.add_argument(
        "--include-drafts",
        action="store_true",
        default=None,
        help="Include draft lessons"
    )
    sequence_parser.add_argument(
        "--by-phase",
        action="store_true",
        help="Group the learning path by phase"
    )

    # next command
    next_parser = subparsers.add_parser(
        "next",
        help="List lessons available given completed lessons",
        parents=[parent_parser]
    )
    next_parser.add_argument(
        "--completed",
        action="append",
        default=[],
        metavar="LESSON_ID",
        help="A completed lesson id (repeatable)"
    )
    next_parser.add_argument(
        "--include-drafts",
        action="store_true",
        default=None,
        help="Offer draft lessons too"
    )

    # path command
    path_parser = subparsers.add_parser(
        "path",
        help="List the lessons still needed to reach a target lesson",
        parents=[parent_parser]
    )
    path_parser.add_argument(
        "lesson_id",
        help="Target lesson id"
    )
    path_parser.add_argument(
        "--completed",
        action="append",
        default=[],
        metavar="LESSON_ID",
        help="A completed lesson id (repeatable)"
    )
    path_parser.add_argument(
        "--explain",
        action="store_true",
        help="Show the prerequisite chain from the target that requires each lesson"
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _analyze(args):
    from .api import analyze_content
    from .config import load_config

    root = Path(args.content_root).resolve()
    config_path = args.config.resolve() if args.config else None
    config = load_config(config_path, content_root=root if root.is_dir() else None)
    return analyze_content(root, config)


def _print_invalid(analysis, quiet: bool) -> None:
    from .reporting import format_text, render_report

    if not quiet:
        print(format_text(render_report(analysis.report)), file=sys.stderr)
    print("Error: curriculum graph is invalid; fix fatal findings first", file=sys.stderr)


def _run_validate(args) -> int:
    from .api import check
    from .reporting import format_text
    from ._internal.canonical_json import canonical_dumps

    analysis = _analyze(args)
    result = check(analysis, strict=args.strict, include_drafts=args.include_drafts)

    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        output_dir.mkdir(parents=True, exist_ok=True)
        report_out = output_dir / "validation.json"
        report_out.write_text(canonical_dumps(result.diagnostics.model_dump(mode="json")) + "\n", encoding="utf-8")
        if result.sequence is not None:
            sequence_out = output_dir / "sequence.json"
            sequence_out.write_text(
                canonical_dumps({"sequence": result.sequence, "phases": result.model_dump(mode="json")["phases"]}) + "\n",
                encoding="utf-8",
            )

    if not args.quiet:
        if args.format == "json":
            payload = result.model_dump(mode="json")
            print(canonical_dumps(
                {"diagnostics": payload["diagnostics"], "sequence": payload["sequence"], "phases": payload["phases"]},
                indent=2,
            ))
        else:
            print(format_text(result.diagnostics))
            if result.sequence is not None:
                print(f"  Lessons sequenced: {len(result.sequence)}")
            if args.output_dir:
                print(f"  Report: {Path(args.output_dir).resolve() / 'validation.json'}")

    return result.diagnostics.exit_code


def _run_sequence(args) -> int:
    from .errors import GraphInvalidError

    analysis = _analyze(args)
    include_drafts = analysis.config.include_drafts if args.include_drafts is None else args.include_drafts
    try:
        sequencer = analysis.sequencer()
    except GraphInvalidError:
        _print_invalid(analysis, args.quiet)
        return EXIT_FINDINGS

    if args.quiet:
        return EXIT_OK
    if args.by_phase:
        for phase, lesson_ids in sequencer.phase_groups(include_drafts=include_drafts).items():
            print(f"Phase {phase}:")
            for lesson_id in lesson_ids:
                print(f"  {lesson_id}")
    else:
        for lesson_id in sequencer.learning_path(include_drafts=include_drafts):
            print(lesson_id)
    return EXIT_OK


def _run_next(args) -> int:
    from .errors import GraphInvalidError

    analysis = _analyze(args)
    include_drafts = analysis.config.include_drafts if args.include_drafts is None else args.include_drafts
    try:
        sequencer = analysis.sequencer()
    except GraphInvalidError:
        _print_invalid(analysis, args.quiet)
        return EXIT_FINDINGS

    unknown = sorted(set(args.completed) - analysis.graph.nodes)
    for lesson_id in unknown:
        print(f"Warning: unknown completed lesson '{lesson_id}' ignored", file=sys.stderr)

    available = sequencer.next_available(args.completed, include_drafts=include_drafts)
    if not args.quiet:
        # Present in learning-path order rather than set order
        for lesson_id in sequencer.learning_path(include_drafts=include_drafts):
            if lesson_id in available:
                print(lesson_id)
    return EXIT_OK


def _run_path(args) -> int:
    from .errors import GraphInvalidError

    analysis = _analyze(args)
    try:
        sequencer = analysis.sequencer()
    except GraphInvalidError:
        _print_invalid(analysis, args.quiet)
        return EXIT_FINDINGS

    try:
        lesson_ids = sequencer.path_to(args.lesson_id, args.completed)
    except KeyError:
        print(f"Error: unknown lesson id '{args.lesson_id}'", file=sys.stderr)
        return EXIT_ERROR

    if not args.quiet:
        for lesson_id in lesson_ids:
            chain = analysis.graph.get_prerequisite_path(args.lesson_id, lesson_id) if args.explain else None
            if chain and len(chain) > 1:
                print(f"{lesson_id}  (required by {' -> '.join(reversed(chain[:-1]))})")
            else:
                print(lesson_id)
    return EXIT_OK


COMMANDS = {
    "validate": _run_validate,
    "sequence": _run_sequence,
    "next": _run_next,
    "path": _run_path,
}


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point for lessongraph commands."""
    from .errors import LessongraphError

    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    _configure_logging(args.verbose)

    try:
        exit_code = COMMANDS[args.command](args)
    except LessongraphError as e:
        # Content root or config problems: abort before any per-lesson reporting
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(EXIT_ERROR)

    if exit_code != EXIT_OK:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
