"""Render validation reports for CLI output and CI gates."""

from typing import Dict, List

from pydantic import BaseModel, Field

from lessongraph.codes import Severity
from lessongraph.kernel.validator import Finding, ValidationReport, finding_sort_key
from lessongraph._internal.canonical_json import canonical_dumps


class DiagnosticsReport(BaseModel):
    """Stable, sorted view of a ValidationReport plus the exit decision."""
    ok: bool  # No fatal findings (and no warnings when strict)
    strict: bool
    exit_code: int
    fatal_count: int
    warning_count: int
    counts_by_code: Dict[str, int] = Field(default_factory=dict)
    findings: List[Finding] = Field(default_factory=list)


def render_report(report: ValidationReport, strict: bool = False) -> DiagnosticsReport:
    """
    Sort findings (fatal first, then lesson id, then code) and decide the exit code.

    Args:
        report: Validator output
        strict: Treat warnings as failures for exit-code purposes

    Returns:
        DiagnosticsReport; exit_code is 0 on success, 1 otherwise.
    """
    findings = sorted(report.findings, key=finding_sort_key)
    fatal_count = sum(1 for f in findings if f.severity == Severity.FATAL)
    warning_count = len(findings) - fatal_count

    counts: Dict[str, int] = {}
    for finding in findings:
        counts[finding.code.value] = counts.get(finding.code.value, 0) + 1

    ok = fatal_count == 0 and not (strict and warning_count > 0)
    return DiagnosticsReport(
        ok=ok,
        strict=strict,
        exit_code=0 if ok else 1,
        fatal_count=fatal_count,
        warning_count=warning_count,
        counts_by_code=dict(sorted(counts.items())),
        findings=findings,
    )


def format_finding(finding: Finding) -> str:
    label = "FATAL" if finding.severity == Severity.FATAL else "WARN"
    subject = f" {finding.subject}" if finding.subject else ""
    return f"[{label}] {finding.code.value}{subject}: {finding.message}"


def format_text(diagnostics: DiagnosticsReport) -> str:
    """Human-readable rendering, one finding per line, followed by a summary."""
    lines = [format_finding(f) for f in diagnostics.findings]
    status = "OK" if diagnostics.ok else "FAILED"
    if diagnostics.strict:
        status += " (strict)"
    lines.append(f"Status: {status}")
    lines.append(f"  Fatal: {diagnostics.fatal_count}")
    lines.append(f"  Warnings: {diagnostics.warning_count}")
    return "\n".join(lines)


def format_json(diagnostics: DiagnosticsReport, indent: int | None = None) -> str:
    return canonical_dumps(diagnostics.model_dump(mode="json"), indent=indent)
