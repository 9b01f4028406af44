"""Build the prerequisite graph of a lesson corpus."""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Set

from lessongraph.errors import LessonParseError
from lessongraph.kernel.lesson import LessonRecord
from lessongraph.kernel.resolver import (
    DEFAULT_CONTENT_PREFIXES,
    ResolvedPrerequisites,
    resolve_prerequisites,
)

LOGGER = logging.getLogger(__name__)


class CurriculumGraph:
    """Prerequisite graph for a set of lesson records.

    Edges point from a lesson to its prerequisites. Construction never fails:
    duplicate ids, unresolved references and cycles are kept as-is so the
    validator can report all of them in one pass.
    """

    def __init__(
        self,
        records: Iterable[LessonRecord],
        parse_errors: Iterable[LessonParseError] = (),
        content_prefixes: Sequence[str] = DEFAULT_CONTENT_PREFIXES,
    ):
        self.records: Dict[str, LessonRecord] = {}  # id -> first record declaring it
        self.duplicates: Dict[str, List[str]] = {}  # id -> every source path declaring it (only when > 1)
        self.edges: Dict[str, Set[str]] = defaultdict(set)  # lesson -> prerequisites
        self.reverse_edges: Dict[str, Set[str]] = defaultdict(set)  # prerequisite -> lessons requiring it
        self.resolutions: Dict[str, List[ResolvedPrerequisites]] = {}  # id -> one entry per declaring record
        self.unresolved: Dict[str, List[str]] = {}  # lesson -> unmatched raw strings, all declarations
        self.parse_errors: List[LessonParseError] = list(parse_errors)
        self._build(list(records), content_prefixes)

    def _build(self, records: List[LessonRecord], content_prefixes: Sequence[str]) -> None:
        """Index records by id, then resolve every prerequisite against the full id set."""
        sources_by_id: Dict[str, List[str]] = defaultdict(list)
        for record in records:
            sources_by_id[record.id].append(record.source_path)
            if record.id not in self.records:
                self.records[record.id] = record

        for lesson_id, paths in sources_by_id.items():
            if len(paths) > 1:
                self.duplicates[lesson_id] = sorted(paths)

        # Resolution needs the complete id set so forward references resolve.
        # Every declaration is resolved, including duplicates of an id: their
        # edges merge into the id's node and their unresolved references are kept.
        known_ids = frozenset(self.records)
        for lesson_id in self.records:
            self.edges[lesson_id] = set()
        for record in records:
            lesson_id = record.id
            resolution = resolve_prerequisites(record, known_ids, content_prefixes)
            self.resolutions.setdefault(lesson_id, []).append(resolution)
            for prereq_id in resolution.resolved:
                self.edges[lesson_id].add(prereq_id)
                self.reverse_edges[prereq_id].add(lesson_id)
            if resolution.unresolved:
                self.unresolved.setdefault(lesson_id, []).extend(resolution.unresolved)

        LOGGER.debug(
            "Built curriculum graph: %d lessons, %d edges, %d unresolved references",
            len(self.records),
            sum(len(deps) for deps in self.edges.values()),
            sum(len(raw) for raw in self.unresolved.values()),
        )

    @property
    def nodes(self) -> Set[str]:
        return set(self.records)

    def find_cycles(self) -> List[List[str]]:
        """Detect cycles in the prerequisite graph using DFS.

        Every node is visited in sorted order (white/gray/black coloring). Each
        back edge yields one cycle path that closes on its first node, e.g.
        ["a", "b", "a"]; a self-loop yields ["a", "a"]. Scanning continues after
        a cycle is found so independent cycles are all reported.

        Returns:
            Distinct cycles in discovery order. Empty list if the graph is acyclic.
        """
        cycles: List[List[str]] = []
        seen: Set[tuple] = set()
        WHITE = 0  # Unvisited
        GRAY = 1   # On the current DFS path
        BLACK = 2  # Fully visited

        color = {node: WHITE for node in self.records}

        def dfs(node: str, path: List[str]) -> None:
            color[node] = GRAY
            path.append(node)

            for prereq in sorted(self.get_prerequisites(node)):
                if color[prereq] == WHITE:
                    dfs(prereq, path)
                elif color[prereq] == GRAY:
                    cycle_start = path.index(prereq)
                    cycle = path[cycle_start:] + [prereq]
                    key = tuple(self._normalize_cycle(cycle))
                    if key not in seen:
                        seen.add(key)
                        cycles.append(cycle)

            color[node] = BLACK
            path.pop()

        # Check all nodes (handles disconnected components)
        for node in sorted(self.records):
            if color[node] == WHITE:
                dfs(node, [])

        return cycles

    def _normalize_cycle(self, cycle: List[str]) -> List[str]:
        """Rotate a closed cycle to start at its smallest id, for duplicate detection."""
        body = cycle[:-1]
        min_idx = min(range(len(body)), key=lambda i: body[i])
        rotated = body[min_idx:] + body[:min_idx]
        return rotated + [rotated[0]]

    def get_prerequisites(self, lesson_id: str) -> Set[str]:
        """Get direct prerequisites of a lesson."""
        return self.edges.get(lesson_id, set())

    def get_dependents(self, lesson_id: str) -> Set[str]:
        """Get lessons that list this lesson as a prerequisite."""
        return self.reverse_edges.get(lesson_id, set())

    def get_transitive_prerequisites(self, lesson_id: str) -> Set[str]:
        """Get all transitive prerequisites (recursive)."""
        visited = set()
        stack = [lesson_id]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            for dep in self.get_prerequisites(current):
                if dep not in visited:
                    stack.append(dep)

        visited.discard(lesson_id)
        return visited

    def get_prerequisite_path(self, from_id: str, to_id: str) -> List[str] | None:
        """Shortest prerequisite chain from from_id down to to_id, or None if to_id is not required."""
        if from_id == to_id:
            return [from_id]

        queue = [(from_id, [from_id])]
        visited = {from_id}

        while queue:
            current, path = queue.pop(0)

            for prereq in sorted(self.get_prerequisites(current)):
                if prereq == to_id:
                    return path + [prereq]

                if prereq not in visited:
                    visited.add(prereq)
                    queue.append((prereq, path + [prereq]))

        return None


def build_graph(
    records: Iterable[LessonRecord],
    parse_errors: Iterable[LessonParseError] = (),
    content_prefixes: Sequence[str] = DEFAULT_CONTENT_PREFIXES,
) -> CurriculumGraph:
    """Assemble a CurriculumGraph from extracted records (never raises on bad input)."""
    return CurriculumGraph(records, parse_errors=parse_errors, content_prefixes=content_prefixes)
