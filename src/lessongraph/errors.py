"""Exception types raised across the lessongraph pipeline."""


class LessongraphError(Exception):
    """Base exception for lessongraph errors."""
    pass


class LessonParseError(LessongraphError):
    """Raised when a front-matter block cannot be turned into a lesson record."""
    def __init__(self, field: str, reason: str, source_path: str | None = None):
        self.field = field
        self.reason = reason
        self.source_path = source_path
        where = f"{source_path}: " if source_path else ""
        super().__init__(f"{where}invalid '{field}': {reason}")


class UnresolvedReferenceError(LessongraphError):
    """Raised when a prerequisite reference matches no known lesson id."""
    def __init__(self, raw: str, reason: str = "no lesson with this id"):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Prerequisite '{raw}' could not be resolved: {reason}")


class GraphInvalidError(LessongraphError):
    """Raised when sequencing is requested for a graph with fatal findings."""
    def __init__(self, fatal_count: int):
        self.fatal_count = fatal_count
        super().__init__(
            f"Curriculum graph is invalid ({fatal_count} fatal finding(s)); refusing to sequence"
        )


class ContentRootError(LessongraphError):
    """Raised when the content root is missing or unreadable."""


class ConfigError(LessongraphError):
    """Raised when a configuration file cannot be loaded."""
