# /app/services/genre_helpers/hierarchy.py

"""
Builds the parent -> children structure of the advanced genre taxonomy from the
flat parent pointers carried by each genre record.

The traversal is iterative (explicit stack, three-colour marking) so a deep
taxonomy cannot exhaust the interpreter's recursion limit, and a cyclic parent
graph is reported as a data-integrity error instead of looping.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Set

from app.models.genre_model import GenreRecord

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


class GenreHierarchyCycleError(Exception):
    """Raised when the parent pointers of the genre set form a cycle."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Cycle detected in advanced genre hierarchy: {' -> '.join(cycle)}")


@dataclass(frozen=True)
class HierarchyMap:
    # Direct children only, in snapshot order.
    children_of: Dict[str, List[str]]
    # Transitive closure, excluding the genre itself.
    descendants_of: Dict[str, Set[str]]
    # Every genre exactly once, children always before their parent.
    post_order: List[str]

    def genre_ids_with_descendants(self, genre_ids: Iterable[str]) -> List[str]:
        """
        Expands each id to itself plus everything beneath it, deduplicated.
        Ids that are not in the taxonomy are kept as-is (they simply have no
        descendants).
        """
        result: Dict[str, None] = {}
        for genre_id in genre_ids:
            result[genre_id] = None
            for descendant_id in self.descendants_of.get(genre_id, ()):
                result[descendant_id] = None
        return list(result)


def build_children_map(records: Iterable[GenreRecord]) -> Dict[str, List[str]]:
    records = list(records)
    children_of: Dict[str, List[str]] = {record.id: [] for record in records}
    for record in records:
        parent_id = record.parent_genre_id
        # A parent id with no matching record leaves the genre as a root.
        if parent_id is not None and parent_id in children_of:
            children_of[parent_id].append(record.id)
    return children_of


def build_hierarchy(records: Iterable[GenreRecord]) -> HierarchyMap:
    children_of = build_children_map(records)
    descendants_of: Dict[str, Set[str]] = {genre_id: set() for genre_id in children_of}
    state: Dict[str, int] = {genre_id: _UNVISITED for genre_id in children_of}
    post_order: List[str] = []

    for start_id in children_of:
        if state[start_id] != _UNVISITED:
            continue

        state[start_id] = _IN_PROGRESS
        stack = [(start_id, iter(children_of[start_id]))]

        while stack:
            genre_id, pending_children = stack[-1]
            child_id = next(pending_children, None)

            if child_id is None:
                # All children are final; fold them into this genre.
                stack.pop()
                descendants = descendants_of[genre_id]
                for direct_child in children_of[genre_id]:
                    descendants.add(direct_child)
                    descendants.update(descendants_of[direct_child])
                state[genre_id] = _DONE
                post_order.append(genre_id)
                continue

            if state[child_id] == _IN_PROGRESS:
                path = [entry[0] for entry in stack]
                raise GenreHierarchyCycleError(path[path.index(child_id):] + [child_id])

            if state[child_id] == _UNVISITED:
                state[child_id] = _IN_PROGRESS
                stack.append((child_id, iter(children_of[child_id])))

    return HierarchyMap(children_of=children_of, descendants_of=descendants_of, post_order=post_order)
