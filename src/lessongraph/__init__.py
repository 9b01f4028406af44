"""lessongraph: curriculum prerequisite graph validation + sequencing."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("lessongraph")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from lessongraph.api import (
    Analysis,
    CheckResult,
    PhaseGroup,
    analyze_content,
    analyze_front_matter,
    analyze_records,
    check,
    check_content,
)
from lessongraph.codes import FindingCode, Severity
from lessongraph.config import LessongraphConfig, load_config
from lessongraph.errors import (
    ConfigError,
    ContentRootError,
    GraphInvalidError,
    LessonParseError,
    LessongraphError,
    UnresolvedReferenceError,
)
from lessongraph.kernel.lesson import LessonRecord, extract_lesson
from lessongraph.kernel.validator import Finding, ValidationReport

__all__ = [
    "__version__",
    "Analysis",
    "CheckResult",
    "PhaseGroup",
    "analyze_content",
    "analyze_front_matter",
    "analyze_records",
    "check",
    "check_content",
    "FindingCode",
    "Severity",
    "LessongraphConfig",
    "load_config",
    "ConfigError",
    "ContentRootError",
    "GraphInvalidError",
    "LessonParseError",
    "LessongraphError",
    "UnresolvedReferenceError",
    "LessonRecord",
    "extract_lesson",
    "Finding",
    "ValidationReport",
]
