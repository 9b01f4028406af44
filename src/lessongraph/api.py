"""Public API for lessongraph.

High-level functions that run the whole pipeline
(extract -> resolve -> build -> validate -> sequence -> report)
and return complete, structured results.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel

from lessongraph.config import LessongraphConfig, load_config
from lessongraph.errors import LessonParseError
from lessongraph.kernel.graph import CurriculumGraph, build_graph
from lessongraph.kernel.lesson import LessonRecord, extract_lesson
from lessongraph.kernel.sequencer import Sequencer
from lessongraph.kernel.validator import ValidationReport, validate_graph
from lessongraph.reporting import DiagnosticsReport, render_report
from lessongraph._internal.io.content import load_corpus

LOGGER = logging.getLogger(__name__)


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


class PhaseGroup(BaseModel):
    """Lessons of one phase, in learning-path order."""
    phase: int
    lessons: List[str]


class CheckResult(BaseModel):
    """Everything a CI gate or site generator needs from one run."""
    ok: bool  # Exit decision from diagnostics (strict-aware)
    report: ValidationReport
    diagnostics: DiagnosticsReport
    sequence: Optional[List[str]] = None  # None when the graph has fatal findings
    phases: Optional[List[PhaseGroup]] = None  # Ascending phase order


@dataclass
class Analysis:
    """A built and validated graph for one run; never shared between runs."""
    graph: CurriculumGraph
    report: ValidationReport
    config: LessongraphConfig

    def sequencer(self) -> Sequencer:
        """Raises GraphInvalidError if the report has fatal findings."""
        return Sequencer(self.graph, self.report)


def analyze_records(
    records: Iterable[LessonRecord],
    parse_errors: Iterable[LessonParseError] = (),
    config: Optional[LessongraphConfig] = None,
) -> Analysis:
    """Build and validate a graph from already-extracted records."""
    config = config or LessongraphConfig()
    graph = build_graph(records, parse_errors=parse_errors, content_prefixes=config.content_prefixes)
    return Analysis(graph=graph, report=validate_graph(graph), config=config)


def analyze_front_matter(
    blocks: Mapping[str, Mapping[str, Any]],
    config: Optional[LessongraphConfig] = None,
) -> Analysis:
    """
    Run the pipeline over demarshaled front matter keyed by lesson id.

    Args:
        blocks: lesson id -> front-matter mapping (the id doubles as source path)
        config: Optional configuration

    Returns:
        Analysis; malformed blocks become PARSE_ERROR findings.
    """
    records: List[LessonRecord] = []
    parse_errors: List[LessonParseError] = []
    for lesson_id in sorted(blocks):
        try:
            records.append(extract_lesson(blocks[lesson_id], source_path=lesson_id, lesson_id=lesson_id))
        except LessonParseError as e:
            parse_errors.append(e)
    return analyze_records(records, parse_errors, config)


def analyze_content(
    content_root: Union[str, os.PathLike, Path],
    config: Optional[LessongraphConfig] = None,
) -> Analysis:
    """
    Run the pipeline over a content directory.

    Raises:
        ContentRootError: If the content root is missing or unreadable
        ConfigError: If config is None and lessongraph.yaml in the root is invalid
    """
    root = _normalize_path(content_root)
    if config is None:
        config = load_config(content_root=root if root.is_dir() else None)
    corpus = load_corpus(root, extensions=config.extensions, exclude=config.exclude)
    return analyze_records(corpus.records, corpus.parse_errors, config)


def check(analysis: Analysis, strict: Optional[bool] = None, include_drafts: Optional[bool] = None) -> CheckResult:
    """Render diagnostics and, when the graph is valid, the learning sequence."""
    strict = analysis.config.strict if strict is None else strict
    include_drafts = analysis.config.include_drafts if include_drafts is None else include_drafts

    diagnostics = render_report(analysis.report, strict=strict)
    sequence = None
    phases = None
    if analysis.report.ok:
        sequencer = analysis.sequencer()
        sequence = sequencer.learning_path(include_drafts=include_drafts)
        phases = [
            PhaseGroup(phase=phase, lessons=lesson_ids)
            for phase, lesson_ids in sequencer.phase_groups(include_drafts=include_drafts).items()
        ]
    else:
        LOGGER.info("Skipping sequencing: %d fatal finding(s)", diagnostics.fatal_count)

    return CheckResult(
        ok=diagnostics.ok,
        report=analysis.report,
        diagnostics=diagnostics,
        sequence=sequence,
        phases=phases,
    )


def check_content(
    content_root: Union[str, os.PathLike, Path],
    config: Optional[LessongraphConfig] = None,
    strict: Optional[bool] = None,
    include_drafts: Optional[bool] = None,
) -> CheckResult:
    """
    Validate a content directory and sequence it when possible.

    This is READ-ONLY - no side effects, no file writes.
    """
    return check(analyze_content(content_root, config), strict=strict, include_drafts=include_drafts)
