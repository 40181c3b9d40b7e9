"""
readsplit pipeline
==================

Approximate marker search on sequencing reads: barcode assignment (demux) and
adapter-bounded read segmentation (split).

Components
----------

Matching (:mod:`.matching`)
    Fuzzy marker search

    - :func:`.compile_pattern`: compile a marker sequence
    - :func:`.match`: every occurrence of a marker within an edit budget

Overlap (:mod:`.overlap`)
    - :func:`.resolve_overlaps`: first-overlap-wins de-duplication of hits

Barcodes (:mod:`.barcodes`)
    - :func:`.select_barcode`: best barcode across all candidates

Segmentation (:mod:`.segmentation`)
    - :class:`.AdapterTable`: strand -> adapter pair table
    - :func:`.build_segments`: adapter hits to ordered read segments

Formats (:mod:`.formats`)
    Record streaming through pysam and output formatting

Core (:mod:`.core`)
    - :class:`.Pipeline`: streams reads through a workflow
    - :class:`.PipelineStep`: workflow definitions

Types (:mod:`.types`)
    Data records and :class:`.ReadsplitXp`, the run configuration
"""

from .barcodes import assign_read, best_occurrence, select_barcode
from .core import Pipeline, PipelineStep
from .errors import ConfigError, InputOpenError, ReadsplitError, RecordParseError
from .matching import compile_pattern, match
from .overlap import resolve_overlaps
from .segmentation import AdapterTable, build_segments, locate_adapters, pair_adapters
from .types import (BarcodeAssignment, Occurrence, Pattern, Read, ReadsplitXp,
                    RunStats, Segment, StepResults, Strand)

__all__ = [
    'Pipeline',
    'PipelineStep',
    'ReadsplitXp',
    'AdapterTable',
    'assign_read',
    'best_occurrence',
    'select_barcode',
    'build_segments',
    'locate_adapters',
    'pair_adapters',
    'compile_pattern',
    'match',
    'resolve_overlaps',
    'BarcodeAssignment',
    'Occurrence',
    'Pattern',
    'Read',
    'RunStats',
    'Segment',
    'StepResults',
    'Strand',
    'ConfigError',
    'InputOpenError',
    'ReadsplitError',
    'RecordParseError',
]
