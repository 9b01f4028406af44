"""Pydantic model for lesson front matter with strict validation."""

import datetime as dt
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lessongraph.errors import LessonParseError


RECOGNIZED_KEYS = frozenset({
    "title",
    "description",
    "weight",
    "phase",
    "lesson",
    "difficulty",
    "estimatedMinutes",
    "draft",
    "date",
    "prerequisites",
    "tags",
})

# Front-matter key -> model field, where they differ
_FIELD_NAMES = {"estimatedMinutes": "estimated_minutes"}
_KEY_NAMES = {v: k for k, v in _FIELD_NAMES.items()}

INDEX_STEMS = ("index", "_index")


def _coerce_int(value: Any, *, minimum: Optional[int] = None) -> int:
    """Coerce a YAML scalar to int without accepting booleans or fractional floats."""
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got boolean {value!r}")
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        result = int(value)
    elif isinstance(value, str) and value.strip().lstrip("-").isdigit():
        # Authors occasionally quote numbers in YAML
        result = int(value.strip())
    else:
        raise ValueError(f"expected an integer, got {value!r}")
    if minimum is not None and result < minimum:
        raise ValueError(f"must be >= {minimum}, got {result}")
    return result


class LessonRecord(BaseModel):
    """One lesson, as declared by its front matter.

    Records are immutable: they are built once per run from the corpus and
    threaded through the graph builder, validator and sequencer unchanged.
    """
    id: str  # Canonical id derived from the content path, e.g. "01-foundations/03-pattern-matching"
    source_path: str
    title: str
    description: str = ""
    phase: int
    lesson: int
    weight: int = 0
    difficulty: Optional[Literal["beginner", "intermediate", "advanced"]] = None
    estimated_minutes: Optional[int] = None
    draft: bool = False
    date: Optional[str] = None
    prerequisites: tuple[str, ...] = Field(default=(), description="Raw prerequisite references, declaration order kept")
    tags: tuple[str, ...] = Field(default=(), description="Unique tags, sorted")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Unrecognized front-matter keys, ignored by graph logic")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        return "" if v is None else v

    @field_validator("phase", "lesson", mode="before")
    @classmethod
    def validate_positive(cls, v: Any) -> int:
        return _coerce_int(v, minimum=1)

    @field_validator("weight", mode="before")
    @classmethod
    def validate_weight(cls, v: Any) -> int:
        if v is None:
            return 0
        return _coerce_int(v)

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def validate_estimated_minutes(cls, v: Any) -> Optional[int]:
        if v is None:
            return None
        return _coerce_int(v, minimum=1)

    @field_validator("difficulty", mode="before")
    @classmethod
    def validate_difficulty(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("draft", mode="before")
    @classmethod
    def validate_draft(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> Optional[str]:
        # PyYAML turns unquoted ISO dates into date/datetime objects
        if isinstance(v, (dt.date, dt.datetime)):
            return v.isoformat()
        return v

    @field_validator("prerequisites", mode="before")
    @classmethod
    def validate_prerequisites(cls, v: Any) -> tuple[str, ...]:
        """Normalize prerequisites to a tuple of raw strings.

        Rules:
        - Absent, null or empty -> empty tuple (not an error)
        - A single string is treated as a one-element list
        - Every entry must be a non-empty string
        """
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"expected a list of paths, got {type(v).__name__}")
        result = []
        for item in v:
            if not isinstance(item, str) or not item.strip():
                raise ValueError(f"entries must be non-empty strings, got {item!r}")
            result.append(item.strip())
        return tuple(result)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v: Any) -> tuple[str, ...]:
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set)):
            raise ValueError(f"expected a list of strings, got {type(v).__name__}")
        return tuple(sorted({str(item).strip() for item in v if str(item).strip()}))

    @property
    def sort_key(self) -> tuple[int, int, int, str]:
        """Deterministic tie-break key used by the sequencer."""
        return (self.phase, self.lesson, self.weight, self.id)


def lesson_id_from_path(path: Path, content_root: Path) -> str:
    """Derive the canonical lesson id from a file path under the content root.

    The id is the POSIX relative path without suffix. Section index files
    (``index.md``, ``_index.md``) take the id of their directory.
    """
    rel = PurePosixPath(path.relative_to(content_root).as_posix()).with_suffix("")
    if rel.name in INDEX_STEMS and str(rel.parent) != ".":
        rel = rel.parent
    return str(rel)


def _describe_validation_error(e: ValidationError) -> tuple[str, str]:
    """Reduce a pydantic ValidationError to (front-matter field, reason)."""
    first = e.errors()[0]
    loc = first.get("loc") or ("<record>",)
    field = str(loc[0])
    field = _KEY_NAMES.get(field, field)
    if first.get("type") == "missing":
        return field, "missing required field"
    msg = first.get("msg", str(e))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return field, msg


def extract_lesson(
    raw: Mapping[str, Any],
    source_path: str,
    lesson_id: Optional[str] = None,
) -> LessonRecord:
    """
    Convert one demarshaled front-matter mapping into a LessonRecord.

    Args:
        raw: Front-matter key/value pairs
        source_path: Path of the file the block came from (reported in errors)
        lesson_id: Canonical id; defaults to source_path without suffix

    Returns:
        LessonRecord

    Raises:
        LessonParseError: If a required field is missing or any field is malformed
    """
    if not isinstance(raw, Mapping):
        raise LessonParseError("front_matter", f"expected a mapping, got {type(raw).__name__}", source_path)

    if lesson_id is None:
        lesson_id = str(PurePosixPath(source_path.replace("\\", "/")).with_suffix(""))

    data: Dict[str, Any] = {"id": lesson_id, "source_path": source_path}
    extra: Dict[str, Any] = {}
    for key, value in raw.items():
        key = str(key)
        if key in RECOGNIZED_KEYS:
            data[_FIELD_NAMES.get(key, key)] = value
        else:
            extra[key] = value
    data["extra"] = extra

    try:
        return LessonRecord.model_validate(data)
    except ValidationError as e:
        field, reason = _describe_validation_error(e)
        raise LessonParseError(field, reason, source_path) from e
