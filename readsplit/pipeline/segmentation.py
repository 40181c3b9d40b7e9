"""
Segmentation utilities for carving reads at adapter boundaries.

Core functions:
- locate_adapters: find and de-overlap both adapters on both strands of a read
- pair_adapters: pair sorted front and back adapter hits of one strand
- build_segments: turn the paired hits of both strands into ordered segments

Each strand carries a marker pair ``(a, b)``. On the forward strand ``a``
opens a segment and ``b`` closes it; the reverse strand swaps the roles
(see ``Strand.roles``).
"""

from typing import Dict, List, Optional, Tuple

from readsplit.utils.general import rev_comp
from readsplit.utils.log import CustomLogger, Rlogger

from .errors import ConfigError
from .matching import compile_pattern, match
from .overlap import resolve_overlaps
from .types import Occurrence, Pattern, Read, RunStats, Segment, Strand

logger = Rlogger().get_logger()

StrandHits = Dict[Strand, Tuple[List[Occurrence], List[Occurrence]]]


class AdapterTable:
    """Strand -> ``(marker_a, marker_b)`` table with compiled patterns"""

    def __init__(self, rows: Dict[Strand, Tuple[str, str]]):
        missing = [s.name.lower() for s in Strand if s not in rows]
        if missing:
            raise ConfigError(f"Adapter table is missing strands: {missing}")

        self.rows = {strand: (a.upper(), b.upper()) for strand, (a, b) in rows.items()}
        self.patterns: Dict[Strand, Tuple[Pattern, Pattern]] = {
            strand: (
                compile_pattern(f"{strand.name.lower()}_a", a),
                compile_pattern(f"{strand.name.lower()}_b", b),
            )
            for strand, (a, b) in self.rows.items()
        }

    @classmethod
    def from_pair(cls, a: str, b: str) -> "AdapterTable":
        ''' Forward row ``(a, b)``; the reverse row holds their reverse complements
        '''
        try:
            reverse = (rev_comp(a.upper()), rev_comp(b.upper()))
        except KeyError as e:
            raise ConfigError(f"Adapter contains a non-nucleotide symbol: {e}") from e
        return cls({
            Strand.FORWARD: (a, b),
            Strand.REVERSE: reverse,
        })

    @classmethod
    def from_config(cls, adapters: dict) -> "AdapterTable":
        '''
        Accepts either a full table or a single pair, e.g. (yaml format):
        ```
         adapters:
           forward: [AATGTACTTCGTTCAGTTACGTATTGCT, GCAATACGTAACTGAACGAAGT]
           reverse: [AGCAATACGTAACTGAACGAAGTACATT, ACTTCGTTCAGTTACGTATTGC]
        ```
        or
        ```
         adapters:
           a: AATGTACTTCGTTCAGTTACGTATTGCT
           b: GCAATACGTAACTGAACGAAGT
        ```
        '''
        if not isinstance(adapters, dict) or not adapters:
            raise ConfigError("An adapter table must be provided, e.g.:\n" + cls._table_help())

        if set(adapters) == {'a', 'b'}:
            return cls.from_pair(str(adapters['a']), str(adapters['b']))

        rows = {}
        for key, pair in adapters.items():
            try:
                strand = Strand.from_string(key)
            except ValueError as e:
                raise ConfigError(str(e)) from e
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ConfigError(f"Strand {key!r} needs exactly two markers [a, b], got {pair!r}")
            rows[strand] = (str(pair[0]), str(pair[1]))
        return cls(rows)

    @staticmethod
    def _table_help():
        return "adapters:\n" \
               "  forward: [A_SEQ, B_SEQ]\n" \
               "  reverse: [A_SEQ_RC, B_SEQ_RC]\n" \
               "or\n" \
               "adapters:\n" \
               "  a: A_SEQ\n" \
               "  b: B_SEQ\n"

    def to_dict(self) -> dict:
        return {strand.name.lower(): list(pair) for strand, pair in self.rows.items()}


def locate_adapters(read: Read, table: AdapterTable, max_distance: int) -> StrandHits:
    ''' Resolved ``(a, b)`` occurrences for every strand of ``read``
    '''
    hits = {}
    for strand, (pattern_a, pattern_b) in table.patterns.items():
        hits[strand] = (
            resolve_overlaps(match(pattern_a, read.sequence, max_distance)),
            resolve_overlaps(match(pattern_b, read.sequence, max_distance)),
        )
    return hits


def pair_adapters(fronts: List[Occurrence], backs: List[Occurrence]) -> List[Tuple[Occurrence, Optional[Occurrence]]]:
    """
    Pairs the i-th front with the i-th back, both sorted by start.

    Fronts left over run to the end of the read (``None`` back); backs left
    over are ignored.
    """
    fronts = sorted(fronts, key=lambda o: o.start)
    backs = sorted(backs, key=lambda o: o.start)
    return [
        (front, backs[i] if i < len(backs) else None)
        for i, front in enumerate(fronts)
    ]


def build_segments(
    read_id: str,
    read_length: int,
    hits: StrandHits,
    stats: Optional[RunStats] = None,
    logger: CustomLogger = logger,
) -> List[Segment]:
    """
    Converts adapter hits into the ordered segments of one read.

    Args:
        read_id: name of the read
        read_length: length of the read; a segment without back adapter ends here
        hits: strand -> ``(a occurrences, b occurrences)``
        stats: optional counters; degenerate pairs are added to
            ``stats.degenerate_segments``
        logger: logger for dropped pairs

    Returns:
        Segments sorted by the start of their front adapter, numbered from 0.
        A segment spans ``[front.end + 1, back.start)``.
    """
    triples = []
    for strand in Strand:
        if strand not in hits:
            continue
        fronts, backs = strand.roles(*hits[strand])
        triples.extend((front, back, strand) for front, back in pair_adapters(fronts, backs))

    # sort is stable so forward pairs stay ahead of reverse ones on ties
    triples.sort(key=lambda t: t[0].start)

    segments = []
    for front, back, strand in triples:
        start = front.end + 1
        end = back.start if back is not None else read_length
        if end < start:
            logger.debug(f"{read_id}: dropping {strand.name.lower()} pair front={front} back={back}")
            if stats is not None:
                stats.degenerate_segments += 1
            continue
        segments.append(Segment(
            read_id=read_id,
            ordinal=len(segments),
            strand=strand,
            start=start,
            end=end,
            front=front,
            back=back))
    return segments
