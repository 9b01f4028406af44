"""Compute learning orders over a validated curriculum graph."""

import heapq
import logging
from typing import AbstractSet, Dict, Iterable, List, Set

from lessongraph.errors import GraphInvalidError
from lessongraph.kernel.graph import CurriculumGraph
from lessongraph.kernel.validator import ValidationReport

LOGGER = logging.getLogger(__name__)


class Sequencer:
    """Learning-order queries for a graph whose report has no fatal findings.

    Raises:
        GraphInvalidError: On construction, if the report contains any fatal finding.
    """

    def __init__(self, graph: CurriculumGraph, report: ValidationReport):
        if report.has_fatal():
            raise GraphInvalidError(len(report.fatal))
        self.graph = graph
        self._order = self._topological_order()

    def _topological_order(self) -> List[str]:
        """Kahn's algorithm; ties broken by (phase, lesson, weight, id).

        Drafts are ordered together with published lessons so that every
        lesson still follows its prerequisites; filtering happens afterwards.
        """
        records = self.graph.records
        remaining = {lesson_id: len(self.graph.get_prerequisites(lesson_id)) for lesson_id in records}
        ready = [records[lesson_id].sort_key for lesson_id, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        order: List[str] = []
        while ready:
            *_, lesson_id = heapq.heappop(ready)
            order.append(lesson_id)
            for dependent in self.graph.get_dependents(lesson_id):
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, records[dependent].sort_key)

        if len(order) != len(records):
            # Unreachable when the validator ran on this graph: cycles are fatal
            stuck = sorted(set(records) - set(order))
            raise GraphInvalidError(len(stuck))

        LOGGER.debug("Sequenced %d lessons", len(order))
        return order

    def _visible(self, lesson_id: str, include_drafts: bool) -> bool:
        return include_drafts or not self.graph.records[lesson_id].draft

    def learning_path(self, include_drafts: bool = False) -> List[str]:
        """Total order in which every lesson follows all of its transitive prerequisites."""
        return [lesson_id for lesson_id in self._order if self._visible(lesson_id, include_drafts)]

    def phase_groups(self, include_drafts: bool = False) -> Dict[int, List[str]]:
        """Learning path partitioned by phase, phases ascending, path order inside each phase."""
        groups: Dict[int, List[str]] = {}
        for lesson_id in self.learning_path(include_drafts):
            phase = self.graph.records[lesson_id].phase
            groups.setdefault(phase, []).append(lesson_id)
        return dict(sorted(groups.items()))

    def next_available(self, completed_ids: Iterable[str], include_drafts: bool = False) -> Set[str]:
        """
        Lessons a learner can take now.

        Args:
            completed_ids: Lessons already completed; unknown ids are ignored
            include_drafts: Whether draft lessons may be offered

        Returns:
            Every lesson not yet completed whose prerequisites are all completed.
        """
        completed: AbstractSet[str] = frozenset(completed_ids)
        available = set()
        for lesson_id in self.graph.records:
            if lesson_id in completed or not self._visible(lesson_id, include_drafts):
                continue
            if self.graph.get_prerequisites(lesson_id) <= completed:
                available.add(lesson_id)
        return available

    def path_to(self, lesson_id: str, completed_ids: Iterable[str] = ()) -> List[str]:
        """Ordered lessons still needed to reach lesson_id, ending with lesson_id itself.

        Drafts are included here: a target that requires a draft cannot be
        reached without it.

        Raises:
            KeyError: If lesson_id is not in the graph
        """
        if lesson_id not in self.graph.records:
            raise KeyError(lesson_id)
        completed = frozenset(completed_ids)
        needed = self.graph.get_transitive_prerequisites(lesson_id) | {lesson_id}
        return [node for node in self._order if node in needed and node not in completed]
