"""Structural validation of a curriculum graph.

The validator runs a fixed battery of independent checks and always returns a
complete ValidationReport. It never raises on bad content: fatal findings are
reported, and it is up to the caller (the sequencer) to refuse to proceed.
"""

import logging
from collections import Counter, defaultdict
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from lessongraph.codes import CODE_SEVERITY, FindingCode, Severity
from lessongraph.kernel.graph import CurriculumGraph

LOGGER = logging.getLogger(__name__)

SEVERITY_RANK = {Severity.FATAL: 0, Severity.WARNING: 1}


class Finding(BaseModel):
    """A single validation finding (fatal or warning)."""
    severity: Severity
    code: FindingCode
    message: str
    lesson_ids: List[str] = Field(default_factory=list)  # Affected lessons; referrer first for edge findings
    raw: Optional[str] = None  # For UNRESOLVED_PREREQUISITE
    cycle_path: Optional[List[str]] = None  # For CYCLE_DETECTED, closes on its first id
    source_paths: Optional[List[str]] = None  # Declaring files, where known
    field: Optional[str] = None  # For PARSE_ERROR

    @property
    def subject(self) -> str:
        """Primary id used for ordering: first lesson id, else first source path."""
        if self.lesson_ids:
            return self.lesson_ids[0]
        if self.source_paths:
            return self.source_paths[0]
        return ""

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.FATAL


class ValidationReport(BaseModel):
    """Result of validating a curriculum graph."""
    findings: List[Finding] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if no fatal findings (warnings don't block)."""
        return not self.has_fatal()

    @property
    def fatal(self) -> List[Finding]:
        return [f for f in self.findings if f.is_fatal]

    @property
    def warnings(self) -> List[Finding]:
        return [f for f in self.findings if not f.is_fatal]

    def has_fatal(self) -> bool:
        return any(f.is_fatal for f in self.findings)

    def by_code(self, code: FindingCode) -> List[Finding]:
        return [f for f in self.findings if f.code == code]


def finding_sort_key(finding: Finding) -> tuple:
    """Severity (fatal first), then subject id, then code, then detail fields."""
    return (
        SEVERITY_RANK[finding.severity],
        finding.subject,
        finding.code.value,
        finding.raw or "",
        tuple(finding.lesson_ids),
        tuple(finding.source_paths or ()),
        finding.message,
    )


def _finding(code: FindingCode, message: str, **kwargs) -> Finding:
    return Finding(severity=CODE_SEVERITY[code], code=code, message=message, **kwargs)


def check_parse_errors(graph: CurriculumGraph) -> List[Finding]:
    findings = []
    for error in graph.parse_errors:
        findings.append(_finding(
            FindingCode.PARSE_ERROR,
            str(error),
            source_paths=[error.source_path] if error.source_path else None,
            field=error.field,
        ))
    return findings


def check_duplicate_ids(graph: CurriculumGraph) -> List[Finding]:
    findings = []
    for lesson_id in sorted(graph.duplicates):
        paths = graph.duplicates[lesson_id]
        findings.append(_finding(
            FindingCode.DUPLICATE_ID,
            f"Lesson id '{lesson_id}' is declared by {len(paths)} files: {', '.join(paths)}",
            lesson_ids=[lesson_id],
            source_paths=list(paths),
        ))
    return findings


def check_unresolved_prerequisites(graph: CurriculumGraph) -> List[Finding]:
    """One finding per unresolved reference, for every record declaring the lesson."""
    findings = []
    for lesson_id in sorted(graph.resolutions):
        for resolution in graph.resolutions[lesson_id]:
            for raw in resolution.unresolved:
                findings.append(_finding(
                    FindingCode.UNRESOLVED_PREREQUISITE,
                    f"Lesson '{lesson_id}' lists prerequisite '{raw}' which matches no lesson",
                    lesson_ids=[lesson_id],
                    raw=raw,
                    source_paths=[resolution.source_path] if resolution.source_path else None,
                ))
    return findings


def check_cycles(graph: CurriculumGraph) -> List[Finding]:
    findings = []
    for cycle in graph.find_cycles():
        findings.append(_finding(
            FindingCode.CYCLE_DETECTED,
            f"Prerequisite cycle detected: {' -> '.join(cycle)}",
            lesson_ids=sorted(set(cycle)),
            cycle_path=list(cycle),
        ))
    return findings


def check_phase_monotonicity(graph: CurriculumGraph) -> List[Finding]:
    """Warn when a lesson depends on a lesson from a strictly later phase."""
    findings = []
    for lesson_id in sorted(graph.records):
        record = graph.records[lesson_id]
        for prereq_id in sorted(graph.get_prerequisites(lesson_id)):
            prereq = graph.records[prereq_id]
            if prereq.phase > record.phase:
                findings.append(_finding(
                    FindingCode.FORWARD_PHASE_REFERENCE,
                    (
                        f"Lesson '{lesson_id}' (phase {record.phase}) depends on "
                        f"'{prereq_id}' from later phase {prereq.phase}"
                    ),
                    lesson_ids=[lesson_id, prereq_id],
                ))
    return findings


def check_draft_prerequisites(graph: CurriculumGraph) -> List[Finding]:
    """Warn when a published lesson depends on a draft."""
    findings = []
    for lesson_id in sorted(graph.records):
        record = graph.records[lesson_id]
        if record.draft:
            continue
        for prereq_id in sorted(graph.get_prerequisites(lesson_id)):
            if graph.records[prereq_id].draft:
                findings.append(_finding(
                    FindingCode.PUBLISHED_DEPENDS_ON_DRAFT,
                    f"Published lesson '{lesson_id}' depends on draft lesson '{prereq_id}'",
                    lesson_ids=[lesson_id, prereq_id],
                ))
    return findings


def check_lesson_numbers(graph: CurriculumGraph) -> List[Finding]:
    """Warn when two lessons in one phase declare the same lesson number."""
    findings = []
    groups: Dict[tuple[int, int], List[str]] = defaultdict(list)
    for lesson_id, record in graph.records.items():
        groups[(record.phase, record.lesson)].append(lesson_id)

    for (phase, number), ids in sorted(groups.items()):
        if len(ids) < 2:
            continue
        ids = sorted(ids)
        findings.append(_finding(
            FindingCode.DUPLICATE_LESSON_NUMBER,
            f"Phase {phase} has {len(ids)} lessons numbered {number}: {', '.join(ids)}",
            lesson_ids=ids,
        ))
    return findings


def check_duplicate_prerequisites(graph: CurriculumGraph) -> List[Finding]:
    """Warn when several references in one lesson resolve to the same prerequisite."""
    findings = []
    for lesson_id in sorted(graph.resolutions):
        for resolution in graph.resolutions[lesson_id]:
            counts = Counter(resolution.resolved)
            for prereq_id in sorted(counts):
                if counts[prereq_id] > 1:
                    findings.append(_finding(
                        FindingCode.DUPLICATE_PREREQUISITE,
                        f"Lesson '{lesson_id}' lists prerequisite '{prereq_id}' {counts[prereq_id]} times",
                        lesson_ids=[lesson_id, prereq_id],
                        source_paths=[resolution.source_path] if resolution.source_path else None,
                    ))
    return findings


CHECKS = (
    check_parse_errors,
    check_duplicate_ids,
    check_unresolved_prerequisites,
    check_cycles,
    check_phase_monotonicity,
    check_draft_prerequisites,
    check_lesson_numbers,
    check_duplicate_prerequisites,
)


def validate_graph(graph: CurriculumGraph) -> ValidationReport:
    """
    Run every structural check over a graph.

    Args:
        graph: Graph produced by build_graph()

    Returns:
        ValidationReport with findings in deterministic order.

    This is READ-ONLY - the graph is never modified.
    """
    findings: List[Finding] = []
    for check in CHECKS:
        findings.extend(check(graph))

    findings.sort(key=finding_sort_key)
    report = ValidationReport(findings=findings)
    LOGGER.debug(
        "Validation finished: %d fatal, %d warning(s)",
        len(report.fatal),
        len(report.warnings),
    )
    return report
