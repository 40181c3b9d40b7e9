"""Record I/O for the readsplit pipeline.

Reads and markers are streamed with ``pysam.FastxFile``, which handles FASTA
and FASTQ, plain or gzipped. Every record is validated before it reaches the
matcher; malformed ones are reported as ``RecordParseError`` and skipped.

Outputs are written as plain text (or gzip when the path ends in ``.gz``),
falling back to stdout when no path is given.
"""
import gzip
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator, List, Optional

import pysam

from readsplit.utils.general import seq_to_fasta, seq_to_fastq
from readsplit.utils.log import Rlogger

from .errors import InputOpenError, RecordParseError
from .matching import compile_pattern
from .types import BarcodeAssignment, Pattern, Read, RunStats, Segment

logger = Rlogger().get_logger()

# pysam cannot resynchronise a stream that keeps failing
MAX_CONSECUTIVE_PARSE_ERRORS = 100


def to_read(entry) -> Read:
    """Validate a pysam FastxRecord and convert it to a ``Read``

    Raises
    ------
    RecordParseError
        When the record has no name, or a quality string whose length differs
        from the sequence. An empty sequence is a valid read.
    """
    name = entry.name
    if not name:
        raise RecordParseError(name, "missing identifier")
    sequence = entry.sequence or ""
    if entry.quality is not None and len(entry.quality) != len(sequence):
        raise RecordParseError(
            name, f"quality length {len(entry.quality)} != sequence length {len(sequence)}"
        )
    return Read(name=name, sequence=sequence, quality=entry.quality)


def iter_records(path: str | Path, stats: Optional[RunStats] = None, limit: Optional[int] = None) -> Iterator[Read]:
    """Stream validated reads from a FASTA/FASTQ file.

    The file is opened before this function returns, so an unreadable input
    fails here rather than on the first iteration.

    Parameters
    ----------
    path : str | Path
        Input file
    stats : RunStats, optional
        Skipped records are added to ``stats.skipped_records``
    limit : int, optional
        Stop after this many valid reads

    Returns
    -------
    Iterator[Read]
        One read per well-formed record, in file order

    Raises
    ------
    InputOpenError
        When the file cannot be opened, or later stops being readable
    """
    path = str(path)
    try:
        handle = pysam.FastxFile(path)
    except (OSError, ValueError) as e:
        raise InputOpenError(path, e) from e

    logger.io(f"reading from {path}")
    return _stream(handle, path, stats, limit)


def _stream(handle, path: str, stats: Optional[RunStats], limit: Optional[int]) -> Iterator[Read]:
    yielded = 0
    failures = 0
    previous = None
    with handle:
        while limit is None or yielded < limit:
            try:
                entry = next(handle)
            except StopIteration:
                break
            except (OSError, ValueError) as e:
                failures += 1
                if failures > MAX_CONSECUTIVE_PARSE_ERRORS:
                    raise InputOpenError(path, f"too many consecutive unreadable records ({e})") from e
                _skip(RecordParseError(f"record after {previous!r}", str(e)), stats)
                continue

            failures = 0
            try:
                read = to_read(entry)
            except RecordParseError as e:
                _skip(e, stats)
                continue

            previous = read.name
            yielded += 1
            yield read


def _skip(error: RecordParseError, stats: Optional[RunStats]) -> None:
    logger.warning(f"Skipping {error}")
    if stats is not None:
        stats.skipped_records += 1


def load_patterns(path: str | Path) -> List[Pattern]:
    ''' Compile every record of a marker file into a ``Pattern`` (file order is kept)
    '''
    patterns = [compile_pattern(read.name, read.sequence) for read in iter_records(path)]
    if len(patterns) == 0:
        raise InputOpenError(path, "no marker sequences found")

    names = [p.name for p in patterns]
    duplicated = sorted({n for n in names if names.count(n) > 1})
    if duplicated:
        logger.warning(f"Duplicated marker names in {path}: {duplicated}")

    logger.info(f"Loaded {len(patterns)} markers from {path}")
    return patterns


@contextmanager
def open_output(path: str | Path | None) -> Iterator[IO[str]]:
    """Yield a text handle for ``path``; stdout when ``path`` is None"""
    if path is None:
        yield sys.stdout
        sys.stdout.flush()
        return

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if str(path).endswith('.gz'):
        handle = gzip.open(path, 'wt')
    else:
        handle = open(path, 'w')
    logger.io(f"writing to {path}")
    with handle:
        yield handle


def format_assignment(assignment: BarcodeAssignment) -> str:
    return '\t'.join(assignment.fields()) + '\n'


def format_segment(segment: Segment, read: Read) -> str:
    ''' FASTQ record of the segment, FASTA when the read has no qualities
    '''
    piece = segment.slice(read)
    if piece.quality is None:
        return seq_to_fasta(piece.sequence, name=segment.header())
    return seq_to_fastq(piece.sequence, piece.quality, name=segment.header())


def format_read(read: Read) -> str:
    if read.quality is None:
        return seq_to_fasta(read.sequence, name=read.name)
    return seq_to_fastq(read.sequence, read.quality, name=read.name)
