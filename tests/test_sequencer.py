"""Tests for learning-path sequencing."""

import random

import pytest

from lessongraph.errors import GraphInvalidError
from lessongraph.kernel.graph import build_graph
from lessongraph.kernel.sequencer import Sequencer
from lessongraph.kernel.validator import validate_graph


def _sequencer(records):
    graph = build_graph(records)
    return Sequencer(graph, validate_graph(graph))


def test_end_to_end_example(make_lesson):
    sequencer = _sequencer([
        make_lesson("A", phase=1, lesson=1),
        make_lesson("B", phase=1, lesson=2, prerequisites=["A"]),
        make_lesson("C", phase=2, lesson=1, prerequisites=["B"]),
    ])
    assert sequencer.learning_path() == ["A", "B", "C"]


def test_invalid_graph_refuses_to_sequence(make_lesson):
    graph = build_graph([
        make_lesson("A", phase=1, lesson=1),
        make_lesson("B", phase=1, lesson=2, prerequisites=["A"]),
        make_lesson("C", phase=2, lesson=1, prerequisites=["A", "Z"]),
    ])
    report = validate_graph(graph)
    with pytest.raises(GraphInvalidError) as exc_info:
        Sequencer(graph, report)
    assert exc_info.value.fatal_count == 1


def test_cycle_refuses_to_sequence(make_lesson):
    graph = build_graph([
        make_lesson("A", prerequisites=["B"]),
        make_lesson("B", lesson=2, prerequisites=["A"]),
    ])
    with pytest.raises(GraphInvalidError):
        Sequencer(graph, validate_graph(graph))


def test_forward_phase_reference_still_sequences(make_lesson):
    sequencer = _sequencer([
        make_lesson("p2", phase=2, lesson=1, prerequisites=["p3"]),
        make_lesson("p3", phase=3, lesson=1),
    ])
    assert sequencer.learning_path() == ["p3", "p2"]


def test_tie_break_phase_lesson_weight_id(make_lesson):
    sequencer = _sequencer([
        make_lesson("d", phase=2, lesson=1),
        make_lesson("c", phase=1, lesson=2, weight=5),
        make_lesson("b", phase=1, lesson=2, weight=1),
        make_lesson("a2", phase=1, lesson=1, weight=0),
        make_lesson("a1", phase=1, lesson=1, weight=0),
    ])
    assert sequencer.learning_path() == ["a1", "a2", "b", "c", "d"]


def test_prerequisites_override_tie_break(make_lesson):
    """An early-numbered lesson waits for its prerequisites."""
    sequencer = _sequencer([
        make_lesson("first", phase=1, lesson=1, prerequisites=["third"]),
        make_lesson("second", phase=1, lesson=2),
        make_lesson("third", phase=1, lesson=3),
    ])
    assert sequencer.learning_path() == ["second", "third", "first"]


def test_order_independent_of_input_order(make_lesson):
    records = [
        make_lesson(f"l{i:02d}", phase=1 + i // 5, lesson=1 + i % 5, prerequisites=[f"l{i - 1:02d}"] if i % 3 else [])
        for i in range(15)
    ]
    expected = _sequencer(records).learning_path()
    shuffled = list(records)
    random.Random(7).shuffle(shuffled)
    assert _sequencer(shuffled).learning_path() == expected


def test_every_lesson_follows_transitive_prerequisites(make_lesson):
    records = [
        make_lesson("a"),
        make_lesson("b", lesson=2, prerequisites=["a"]),
        make_lesson("c", lesson=3, prerequisites=["a"]),
        make_lesson("d", phase=2, prerequisites=["b", "c"]),
        make_lesson("e", phase=2, lesson=2, prerequisites=["d"]),
    ]
    sequencer = _sequencer(records)
    path = sequencer.learning_path()
    position = {lesson_id: i for i, lesson_id in enumerate(path)}
    assert len(path) == len(records)
    for lesson_id in path:
        for prereq in sequencer.graph.get_transitive_prerequisites(lesson_id):
            assert position[prereq] < position[lesson_id]


def test_drafts_excluded_unless_requested(make_lesson):
    sequencer = _sequencer([
        make_lesson("a"),
        make_lesson("wip", lesson=2, draft=True),
        make_lesson("c", lesson=3, prerequisites=["a"]),
    ])
    assert sequencer.learning_path() == ["a", "c"]
    assert sequencer.learning_path(include_drafts=True) == ["a", "wip", "c"]


def test_phase_groups(make_lesson):
    sequencer = _sequencer([
        make_lesson("c", phase=2, lesson=1, prerequisites=["b"]),
        make_lesson("a", phase=1, lesson=1),
        make_lesson("b", phase=1, lesson=2, prerequisites=["a"]),
    ])
    assert sequencer.phase_groups() == {1: ["a", "b"], 2: ["c"]}
    assert list(sequencer.phase_groups()) == [1, 2]


def test_next_available(make_lesson):
    sequencer = _sequencer([
        make_lesson("a"),
        make_lesson("b", lesson=2, prerequisites=["a"]),
        make_lesson("c", lesson=3, prerequisites=["a", "b"]),
        make_lesson("x", lesson=4),
    ])
    assert sequencer.next_available(set()) == {"a", "x"}
    assert sequencer.next_available({"a"}) == {"b", "x"}
    assert sequencer.next_available({"a", "b", "x"}) == {"c"}
    assert sequencer.next_available({"a", "b", "c", "x"}) == set()


def test_next_available_non_linear(make_lesson):
    """A learner who skipped ahead still gets lessons whose prerequisites are met."""
    sequencer = _sequencer([
        make_lesson("a"),
        make_lesson("b", lesson=2, prerequisites=["a"]),
        make_lesson("c", lesson=3, prerequisites=["b"]),
    ])
    assert sequencer.next_available({"b"}) == {"a", "c"}


def test_next_available_ignores_unknown_and_drafts(make_lesson):
    sequencer = _sequencer([
        make_lesson("a"),
        make_lesson("wip", lesson=2, draft=True),
    ])
    assert sequencer.next_available({"not-a-lesson"}) == {"a"}
    assert sequencer.next_available(set(), include_drafts=True) == {"a", "wip"}


def test_path_to(make_lesson):
    sequencer = _sequencer([
        make_lesson("a"),
        make_lesson("b", lesson=2, prerequisites=["a"]),
        make_lesson("c", lesson=3),
        make_lesson("d", phase=2, prerequisites=["b"]),
    ])
    assert sequencer.path_to("d") == ["a", "b", "d"]
    assert sequencer.path_to("d", completed_ids={"a"}) == ["b", "d"]
    with pytest.raises(KeyError):
        sequencer.path_to("missing")
