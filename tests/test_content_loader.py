"""Tests for reading lesson front matter from disk."""

import pytest

from lessongraph.errors import ContentRootError, LessonParseError
from lessongraph._internal.io.content import load_corpus, split_front_matter


def test_load_corpus_reads_lessons(write_lesson):
    write_lesson("01-foundations/01-intro.md", {"title": "Intro", "phase": 1, "lesson": 1})
    write_lesson(
        "01-foundations/02-basic-types.md",
        {"title": "Types", "phase": 1, "lesson": 2, "prerequisites": ["/01-foundations/01-intro"]},
    )
    corpus = load_corpus(write_lesson.root)

    assert [r.id for r in corpus.records] == ["01-foundations/01-intro", "01-foundations/02-basic-types"]
    assert corpus.records[1].source_path == "01-foundations/02-basic-types.md"
    assert corpus.parse_errors == []


def test_bad_file_is_collected_not_raised(write_lesson):
    write_lesson("a.md", {"title": "A", "phase": 1, "lesson": 1})
    write_lesson("b.md", {"title": "B", "phase": 0, "lesson": 1})
    (write_lesson.root / "c.md").write_text("# No front matter\n", encoding="utf-8")

    corpus = load_corpus(write_lesson.root)

    assert [r.id for r in corpus.records] == ["a"]
    assert sorted(e.source_path for e in corpus.parse_errors) == ["b.md", "c.md"]
    by_path = {e.source_path: e for e in corpus.parse_errors}
    assert by_path["b.md"].field == "phase"
    assert by_path["c.md"].field == "front_matter"


def test_missing_root_is_catastrophic(tmp_path):
    with pytest.raises(ContentRootError):
        load_corpus(tmp_path / "does-not-exist")


def test_root_must_be_directory(tmp_path):
    file_path = tmp_path / "lesson.md"
    file_path.write_text("---\ntitle: A\n---\n", encoding="utf-8")
    with pytest.raises(ContentRootError):
        load_corpus(file_path)


def test_hidden_and_non_markdown_files_skipped(write_lesson):
    write_lesson("a.md", {"title": "A", "phase": 1, "lesson": 1})
    write_lesson(".drafts/b.md", {"title": "B", "phase": 1, "lesson": 2})
    write_lesson("_partials/c.md", {"title": "C", "phase": 1, "lesson": 3})
    (write_lesson.root / "notes.txt").write_text("not a lesson", encoding="utf-8")

    corpus = load_corpus(write_lesson.root)
    assert [r.id for r in corpus.records] == ["a"]


def test_section_index_and_exclude(write_lesson):
    write_lesson("02-otp/_index.md", {"title": "OTP"})
    write_lesson("02-otp/01-processes.md", {"title": "Processes", "phase": 2, "lesson": 1})

    corpus = load_corpus(write_lesson.root)
    assert [e.source_path for e in corpus.parse_errors] == ["02-otp/_index.md"]

    corpus = load_corpus(write_lesson.root, exclude=["_index.md"])
    assert corpus.parse_errors == []
    assert [r.id for r in corpus.records] == ["02-otp/01-processes"]


def test_split_front_matter():
    text = "---\ntitle: A\nphase: 1\nlesson: 2\n---\n\nBody with --- inside\n---\n"
    assert split_front_matter(text, "a.md") == {"title": "A", "phase": 1, "lesson": 2}


def test_split_front_matter_handles_bom_and_empty_block():
    assert split_front_matter("\ufeff---\ntitle: A\n---\n", "a.md") == {"title": "A"}
    assert split_front_matter("---\n---\nbody", "a.md") == {}


@pytest.mark.parametrize("text", [
    "title: A\n",
    "---\ntitle: A\n",
    "---\n- just\n- a list\n---\n",
    "---\ntitle: [unclosed\n---\n",
])
def test_split_front_matter_errors(text):
    with pytest.raises(LessonParseError) as exc_info:
        split_front_matter(text, "a.md")
    assert exc_info.value.field == "front_matter"
