"""Finding code constants for lessongraph validation.

These constants prevent stringly-typed finding kinds and ensure
client code (CI gates, report consumers) matches on the right values.
"""

from enum import Enum


class Severity(str, Enum):
    """How a finding affects sequencing."""

    FATAL = "fatal"
    WARNING = "warning"


class FindingCode(str, Enum):
    """Validation finding codes."""

    # Fatal (blocks sequencing)
    PARSE_ERROR = "PARSE_ERROR"
    DUPLICATE_ID = "DUPLICATE_ID"
    UNRESOLVED_PREREQUISITE = "UNRESOLVED_PREREQUISITE"
    CYCLE_DETECTED = "CYCLE_DETECTED"

    # Warnings (non-blocking)
    FORWARD_PHASE_REFERENCE = "FORWARD_PHASE_REFERENCE"
    PUBLISHED_DEPENDS_ON_DRAFT = "PUBLISHED_DEPENDS_ON_DRAFT"
    DUPLICATE_LESSON_NUMBER = "DUPLICATE_LESSON_NUMBER"
    DUPLICATE_PREREQUISITE = "DUPLICATE_PREREQUISITE"


# Severity is fixed per code; the validator never decides it ad hoc.
CODE_SEVERITY: dict[FindingCode, Severity] = {
    FindingCode.PARSE_ERROR: Severity.FATAL,
    FindingCode.DUPLICATE_ID: Severity.FATAL,
    FindingCode.UNRESOLVED_PREREQUISITE: Severity.FATAL,
    FindingCode.CYCLE_DETECTED: Severity.FATAL,
    FindingCode.FORWARD_PHASE_REFERENCE: Severity.WARNING,
    FindingCode.PUBLISHED_DEPENDS_ON_DRAFT: Severity.WARNING,
    FindingCode.DUPLICATE_LESSON_NUMBER: Severity.WARNING,
    FindingCode.DUPLICATE_PREREQUISITE: Severity.WARNING,
}
