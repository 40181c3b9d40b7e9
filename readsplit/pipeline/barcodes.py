from typing import Iterable, List, Optional, Sequence, Tuple

from .matching import match_all
from .types import BarcodeAssignment, Occurrence, Pattern, Read


def best_occurrence(occurrences: Iterable[Occurrence]) -> Optional[Occurrence]:
    ''' Lowest-distance occurrence, the first one found on ties
    '''
    best = None
    for occurrence in occurrences:
        if best is None or occurrence.distance < best.distance:
            best = occurrence
    return best


def select_barcode(read_id: str, hits: Sequence[Tuple[Pattern, List[Occurrence]]]) -> BarcodeAssignment:
    """
    Picks the barcode that matches ``read_id`` best.

    Args:
        read_id: name of the read
        hits: ``(pattern, occurrences)`` for every candidate barcode, in
            barcode file order

    Returns:
        The assignment of the barcode with the lowest edit distance (lowest
        pattern index on ties), or an assignment without a pattern when no
        barcode was found in the read.
    """
    winner = None
    winning_hit = None
    for pattern, occurrences in hits:
        hit = best_occurrence(occurrences)
        if hit is None:
            continue
        if winning_hit is None or hit.distance < winning_hit.distance:
            winner = pattern
            winning_hit = hit

    if winning_hit is None:
        return BarcodeAssignment(read_id)

    return BarcodeAssignment(
            read_id=read_id,
            pattern=winner.name,
            distance=winning_hit.distance,
            start=winning_hit.start,
            end=winning_hit.end)


def assign_read(read: Read, patterns: List[Pattern], max_distance: int) -> BarcodeAssignment:
    ''' Search every barcode in ``read`` and keep the best one
    '''
    hits = zip(patterns, match_all(patterns, read.sequence, max_distance))
    return select_barcode(read.name, list(hits))
