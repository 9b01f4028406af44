"""Pytest configuration for tests.

No sys.path hacks - tests should import from the installed lessongraph package.
"""

from pathlib import Path

import pytest
import yaml

from lessongraph.kernel.lesson import LessonRecord


@pytest.fixture
def make_lesson():
    """Factory for LessonRecord values with sensible defaults."""
    def _make(lesson_id, phase=1, lesson=1, prerequisites=(), **fields):
        return LessonRecord(
            id=lesson_id,
            source_path=fields.pop("source_path", f"{lesson_id}.md"),
            title=fields.pop("title", lesson_id.upper()),
            phase=phase,
            lesson=lesson,
            prerequisites=tuple(prerequisites),
            **fields,
        )
    return _make


@pytest.fixture
def write_lesson(tmp_path):
    """Write a markdown lesson with YAML front matter under tmp_path/content."""
    root = tmp_path / "content"
    root.mkdir(exist_ok=True)

    def _write(rel_path: str, front_matter: dict, body: str = "Lesson body.\n") -> Path:
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        block = yaml.safe_dump(front_matter, sort_keys=False)
        path.write_text(f"---\n{block}---\n\n{body}", encoding="utf-8")
        return path

    _write.root = root
    return _write
