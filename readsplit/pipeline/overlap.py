"""
Collapse overlapping occurrences of one marker in one read.

The resolution is first-overlap-wins: each candidate is compared against the
first already accepted occurrence it intersects and only replaces it when its
edit distance is strictly lower. Clusters are not merged transitively, so the
outcome depends on discovery order.
"""

from typing import Iterable, List

from .types import Occurrence


def _resolve_once(occurrences: Iterable[Occurrence]) -> List[Occurrence]:
    resolved: List[Occurrence] = []
    for candidate in occurrences:
        for i, kept in enumerate(resolved):
            if candidate.overlaps(kept):
                if candidate.distance < kept.distance:
                    resolved[i] = candidate
                break
        else:
            resolved.append(candidate)
    return resolved


def has_overlaps(occurrences: List[Occurrence]) -> bool:
    return any(
        a.overlaps(b)
        for i, a in enumerate(occurrences)
        for b in occurrences[i + 1:]
    )


def resolve_overlaps(occurrences: Iterable[Occurrence]) -> List[Occurrence]:
    """
    Returns a pairwise non-overlapping subset of ``occurrences``.

    A replacement can leave the new occurrence intersecting a later accepted
    one; the pass is then repeated on its own output until nothing overlaps.
    Every repeat drops at least one occurrence, so this terminates, and a
    list without overlaps comes back unchanged.
    """
    resolved = _resolve_once(occurrences)
    while has_overlaps(resolved):
        resolved = _resolve_once(resolved)
    return resolved
