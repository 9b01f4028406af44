"""Resolve raw prerequisite references to canonical lesson ids."""

import posixpath
from dataclasses import dataclass
from typing import AbstractSet, Sequence

from lessongraph.errors import UnresolvedReferenceError
from lessongraph.kernel.lesson import INDEX_STEMS, LessonRecord

DEFAULT_CONTENT_PREFIXES: tuple[str, ...] = ("content/",)
MARKDOWN_SUFFIXES = (".md", ".markdown")


@dataclass(frozen=True)
class ResolvedPrerequisites:
    """Outcome of resolving one lesson's prerequisite list."""
    resolved: tuple[str, ...]  # Canonical ids, declaration order, may repeat
    unresolved: tuple[str, ...]  # Raw strings that matched nothing
    source_path: str = ""  # File of the declaring record


def normalize_reference(raw: str, content_prefixes: Sequence[str] = DEFAULT_CONTENT_PREFIXES) -> str:
    """Normalize a path-like reference into a candidate lesson id.

    Strips surrounding whitespace, leading "./" and slashes, trailing slashes,
    a markdown suffix, a trailing index segment and any recognized content-root
    prefix. Does not consult the id set.
    """
    ref = raw.strip().replace("\\", "/")
    if not ref:
        return ""
    ref = posixpath.normpath("/" + ref).lstrip("/")
    if ref in ("", "."):
        return ""

    for prefix in content_prefixes:
        prefix = prefix.strip("/")
        if prefix and (ref == prefix or ref.startswith(prefix + "/")):
            ref = ref[len(prefix):].lstrip("/")
            break

    for suffix in MARKDOWN_SUFFIXES:
        if ref.endswith(suffix):
            ref = ref[: -len(suffix)]
            break

    head, _, tail = ref.rpartition("/")
    if head and tail in INDEX_STEMS:
        ref = head
    return ref


def resolve_reference(
    raw: str,
    known_ids: AbstractSet[str],
    content_prefixes: Sequence[str] = DEFAULT_CONTENT_PREFIXES,
) -> str:
    """
    Map one raw prerequisite string to exactly one known lesson id.

    Args:
        raw: Reference as written in front matter, e.g. "/01-foundations/02-basic-types/"
        known_ids: Complete set of lesson ids in the corpus
        content_prefixes: Content-root prefixes to strip before matching

    Returns:
        The matching lesson id

    Raises:
        UnresolvedReferenceError: If the normalized reference is not a known id
    """
    candidate = normalize_reference(raw, content_prefixes)
    if not candidate:
        raise UnresolvedReferenceError(raw, "empty reference")
    if candidate in known_ids:
        return candidate
    raise UnresolvedReferenceError(raw, f"no lesson with id '{candidate}'")


def resolve_prerequisites(
    record: LessonRecord,
    known_ids: AbstractSet[str],
    content_prefixes: Sequence[str] = DEFAULT_CONTENT_PREFIXES,
) -> ResolvedPrerequisites:
    """Resolve every prerequisite of a record, keeping failures instead of dropping them."""
    resolved = []
    unresolved = []
    for raw in record.prerequisites:
        try:
            resolved.append(resolve_reference(raw, known_ids, content_prefixes))
        except UnresolvedReferenceError:
            unresolved.append(raw)
    return ResolvedPrerequisites(
        resolved=tuple(resolved),
        unresolved=tuple(unresolved),
        source_path=record.source_path,
    )
