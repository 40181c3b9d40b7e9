from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

import polars as pl

from readsplit.utils.db import Xp

from .errors import ConfigError


class Occurrence(NamedTuple):
    """One approximate match of a pattern in a read.

    ``start`` and ``end`` are inclusive offsets into the read.
    """
    start: int
    end: int
    distance: int

    def overlaps(self, other: "Occurrence") -> bool:
        return self.start <= other.end and other.start <= self.end

    def __str__(self):
        return f"{self.start}:{self.end}"


class Pattern(NamedTuple):
    """A named marker sequence together with its compiled matcher"""
    name: str
    sequence: str
    matcher: Any

    @property
    def length(self) -> int:
        return len(self.sequence)


class Read(NamedTuple):
    name: str
    sequence: str
    quality: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.sequence)


class Strand(Enum):
    """Read orientation.

    The reverse strand is the complement of the forward one, so the marker
    that opens a segment on the forward strand closes it on the reverse.
    """
    FORWARD = 0
    REVERSE = 1

    def roles(self, a, b) -> Tuple[Any, Any]:
        """Return ``(front, back)`` for the marker pair ``(a, b)``"""
        if self is Strand.FORWARD:
            return a, b
        return b, a

    @classmethod
    def from_string(cls, name: str) -> "Strand":
        try:
            return cls[str(name).upper()]
        except KeyError:
            raise ValueError(f"Invalid strand: {name}. Valid strands are: {[s.name.lower() for s in cls]}")


class Segment(NamedTuple):
    """Sub-region ``[start, end)`` of a read bounded by adapters"""
    read_id: str
    ordinal: int
    strand: Strand
    start: int
    end: int
    front: Occurrence
    back: Optional[Occurrence] = None

    def slice(self, read: Read) -> Read:
        """Cut the segment out of ``read`` (sequence and quality alike)"""
        quality = None
        if read.quality is not None:
            quality = read.quality[self.start:self.end]
        return Read(
                name=f"{self.read_id}_{self.ordinal}",
                sequence=read.sequence[self.start:self.end],
                quality=quality)

    def header(self) -> str:
        back = str(self.back) if self.back is not None else "*"
        return f"{self.read_id}_{self.ordinal} strand={self.strand.value} start={self.front} end={back}"


class BarcodeAssignment(NamedTuple):
    """Barcode call for a read. A read without any hit carries ``None`` fields"""
    read_id: str
    pattern: Optional[str] = None
    distance: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None

    @property
    def is_match(self) -> bool:
        return self.pattern is not None

    def fields(self) -> List[str]:
        values = [self.pattern, self.distance, self.start, self.end]
        return [self.read_id] + ['-' if v is None else str(v) for v in values]


@dataclass
class RunStats:
    """Counters collected while streaming a read file"""
    reads: int = 0
    skipped_records: int = 0
    assigned: int = 0
    unassigned: int = 0
    segments: int = 0
    degenerate_segments: int = 0
    reads_without_segments: int = 0
    per_pattern: Dict[str, int] = field(default_factory=dict)

    def count_assignment(self, assignment: BarcodeAssignment) -> None:
        if assignment.is_match:
            self.assigned += 1
            self.per_pattern[assignment.pattern] = self.per_pattern.get(assignment.pattern, 0) + 1
        else:
            self.unassigned += 1

    def as_dict(self) -> Dict[str, int]:
        result = {
            'reads': self.reads,
            'skipped_records': self.skipped_records,
            'assigned': self.assigned,
            'unassigned': self.unassigned,
            'segments': self.segments,
            'degenerate_segments': self.degenerate_segments,
            'reads_without_segments': self.reads_without_segments,
        }
        for name, count in self.per_pattern.items():
            result[f"pattern:{name}"] = count
        return result

    def as_df(self) -> pl.DataFrame:
        metrics = self.as_dict()
        return pl.DataFrame({
            'metric': list(metrics.keys()),
            'value': list(metrics.values()),
            })


class StepResults(NamedTuple):
    """Container for what a workflow produced
        - results: paths or objects produced by the run
        - metrics: the run counters
    """
    results: dict
    metrics: dict = {}

    def has_metrics(self):
        """Check if a step returned any metrics """
        return len(self.metrics)>0


DEMUX_MAX_DISTANCE = 4
SPLIT_MAX_DISTANCE = 3


class ReadsplitXp(Xp):
    """Run configuration for the demux and split workflows"""
    reads_fn: Optional[str]
    barcodes_fn: Optional[str]
    out_fn: Optional[str]
    summary_fn: Optional[str]
    log_fn: Optional[str]
    log_level: str
    limit: Optional[int]
    demux: Dict[str, Any]
    split: Dict[str, Any]

    def consolidate_conf(self, update=False):
        self.reads_fn = getattr(self, 'reads_fn', None)
        self.barcodes_fn = getattr(self, 'barcodes_fn', None)
        self.out_fn = getattr(self, 'out_fn', None)
        self.summary_fn = getattr(self, 'summary_fn', None)
        self.log_fn = getattr(self, 'log_fn', None)
        self.log_level = getattr(self, 'log_level', 'INFO')
        self.limit = getattr(self, 'limit', None)

        self.demux = dict(getattr(self, 'demux', None) or {})
        self.demux.setdefault('max_distance', DEMUX_MAX_DISTANCE)

        self.split = dict(getattr(self, 'split', None) or {})
        self.split.setdefault('max_distance', SPLIT_MAX_DISTANCE)
        self.split.setdefault('adapters', None)
        self.split.setdefault('unmatched_fn', None)

        for section in ('demux', 'split'):
            value = getattr(self, section)['max_distance']
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"{section}.max_distance must be a non-negative integer, got {value!r}")

        if self.limit is not None and (isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1):
            raise ConfigError(f"limit must be a positive integer, got {self.limit!r}")

        super().consolidate_conf(update)

    def update_section(self, section: str, **overrides):
        ''' Override workflow options (``demux`` or ``split``) with the values that are not None
        '''
        if section not in ('demux', 'split'):
            raise ConfigError(f"Unknown workflow section: {section}")
        values = dict(getattr(self, section))
        values.update({k: v for k, v in overrides.items() if v is not None})
        setattr(self, section, values)
        self.consolidate_conf(update=True)
