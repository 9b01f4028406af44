"""Read lesson front matter from a content directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Sequence

import yaml

from lessongraph.errors import ContentRootError, LessonParseError
from lessongraph.kernel.lesson import LessonRecord, extract_lesson, lesson_id_from_path

LOGGER = logging.getLogger(__name__)

FRONT_MATTER_DELIMITER = "---"
DEFAULT_EXTENSIONS: tuple[str, ...] = (".md",)


@dataclass
class Corpus:
    """Everything extracted from one content root."""
    root: Path
    records: List[LessonRecord] = field(default_factory=list)
    parse_errors: List[LessonParseError] = field(default_factory=list)


def split_front_matter(text: str, source_path: str) -> Dict[str, Any]:
    """Return the demarshaled YAML front-matter block at the top of a document.

    Raises:
        LessonParseError: If the block is missing, unterminated or not a YAML mapping
    """
    lines = text.lstrip("\ufeff").splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        raise LessonParseError("front_matter", "file does not start with a '---' front-matter block", source_path)

    for end, line in enumerate(lines[1:], start=1):
        if line.strip() == FRONT_MATTER_DELIMITER:
            break
    else:
        raise LessonParseError("front_matter", "front-matter block is not terminated by '---'", source_path)

    try:
        data = yaml.safe_load("\n".join(lines[1:end]))
    except yaml.YAMLError as e:
        raise LessonParseError("front_matter", f"invalid YAML: {e}", source_path) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise LessonParseError("front_matter", f"expected a mapping, got {type(data).__name__}", source_path)
    return data


def _is_hidden(rel: Path) -> bool:
    """Skip dot/underscore entries, except section index files."""
    for part in rel.parts[:-1]:
        if part.startswith((".", "_")):
            return True
    name = rel.name
    return name.startswith(".") or (name.startswith("_") and rel.stem != "_index")


def _is_excluded(rel: Path, exclude: Sequence[str]) -> bool:
    posix = PurePosixPath(rel.as_posix())
    return any(posix.match(pattern) for pattern in exclude)


def iter_lesson_files(
    root: Path,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    exclude: Sequence[str] = (),
) -> List[Path]:
    """List lesson files under root, sorted for deterministic processing."""
    suffixes = {ext.lower() for ext in extensions}
    files = [
        path for path in root.rglob("*")
        if path.is_file()
        and path.suffix.lower() in suffixes
        and not _is_hidden(path.relative_to(root))
        and not _is_excluded(path.relative_to(root), exclude)
    ]
    return sorted(files, key=lambda p: p.relative_to(root).as_posix())


def load_corpus(
    root: Path,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    exclude: Sequence[str] = (),
) -> Corpus:
    """
    Extract every lesson record under a content root.

    Per-file problems are collected as parse errors; only a missing or
    unreadable root aborts the run.

    Raises:
        ContentRootError: If root does not exist or is not a directory
    """
    if not root.exists():
        raise ContentRootError(f"Content root does not exist: {root}")
    if not root.is_dir():
        raise ContentRootError(f"Content root is not a directory: {root}")

    try:
        files = iter_lesson_files(root, extensions, exclude)
    except OSError as e:
        raise ContentRootError(f"Content root is not readable: {root} ({e})") from e

    corpus = Corpus(root=root)
    for path in files:
        source_path = path.relative_to(root).as_posix()
        try:
            text = path.read_text(encoding="utf-8")
            front_matter = split_front_matter(text, source_path)
            record = extract_lesson(front_matter, source_path, lesson_id_from_path(path, root))
        except LessonParseError as e:
            LOGGER.debug("Skipping %s: %s", source_path, e)
            corpus.parse_errors.append(e)
            continue
        except (OSError, UnicodeDecodeError) as e:
            corpus.parse_errors.append(LessonParseError("file", f"unreadable: {e}", source_path))
            continue
        corpus.records.append(record)

    LOGGER.info(
        "Loaded %d lesson(s) from %s (%d parse error(s))",
        len(corpus.records),
        root,
        len(corpus.parse_errors),
    )
    return corpus
