"""
Approximate marker search.

Markers are compiled as fuzzy expressions, ``regex.compile("(SEQ){e<=N}")``,
and searched with overlapping matches so that every start position where the
marker fits within ``N`` edits is reported. Each start position is then
re-matched with BESTMATCH so the reported distance is the lowest one there.
"""

from typing import List

import regex

from .errors import ConfigError
from .types import Occurrence, Pattern

VALID_SYMBOLS = set("ACGTUNRYSWKMBDHV")


class FuzzyMatcher:
    """Compiled fuzzy expressions for one marker, one per error budget"""

    def __init__(self, sequence: str):
        self.sequence = sequence
        self._compiled = {}

    def expressions(self, max_distance: int):
        ''' ``(search, best)`` pair for an error budget

        ``search`` finds every start position that admits a hit; ``best``
        re-matches at one position and settles on the lowest error count.
        '''
        if max_distance not in self._compiled:
            body = "({}){{e<={}}}".format(regex.escape(self.sequence), max_distance)
            self._compiled[max_distance] = (
                regex.compile("(?e)" + body),
                regex.compile("(?b)" + body),
            )
        return self._compiled[max_distance]

    def __repr__(self):
        return f"FuzzyMatcher({self.sequence!r}, compiled={sorted(self._compiled)})"


def compile_pattern(name: str, sequence: str) -> Pattern:
    ''' Returns a ``Pattern`` for marker ``sequence``; symbols are case-insensitive
    '''
    sequence = (sequence or '').strip().upper()
    if not sequence:
        raise ConfigError(f"Marker {name!r} has an empty sequence")

    invalid = set(sequence) - VALID_SYMBOLS
    if invalid:
        raise ConfigError(f"Marker {name!r} contains non-nucleotide symbols: {''.join(sorted(invalid))}")

    return Pattern(name=name, sequence=sequence, matcher=FuzzyMatcher(sequence))


def bounded_distance(pattern: Pattern, max_distance: int) -> int:
    ''' Clamp the error budget so that a hit always consumes part of the read
    '''
    if max_distance < 0:
        raise ConfigError(f"max_distance must be non-negative, got {max_distance}")
    return min(max_distance, pattern.length - 1)


def match(pattern: Pattern, sequence: str, max_distance: int) -> List[Occurrence]:
    """
    Find every approximate occurrence of ``pattern`` in ``sequence``.

    Args:
        pattern: compiled marker
        sequence: read sequence
        max_distance: maximum edit distance (substitutions, insertions and
            deletions) of a reported occurrence

    Returns:
        Occurrences in discovery order (ascending start) with inclusive
        offsets.
    """
    search, best = pattern.matcher.expressions(bounded_distance(pattern, max_distance))
    sequence = sequence.upper()
    occurrences = []
    for candidate in search.finditer(sequence, overlapped=True):
        hit = best.match(sequence, candidate.start())
        if hit is None or hit.end() == hit.start():
            continue
        occurrences.append(Occurrence(hit.start(), hit.end() - 1, sum(hit.fuzzy_counts)))
    return occurrences


def match_all(patterns: List[Pattern], sequence: str, max_distance: int) -> List[List[Occurrence]]:
    ''' Occurrence lists for each pattern, in pattern order
    '''
    return [match(pattern, sequence, max_distance) for pattern in patterns]
