'''
readsplit: barcode assignment and adapter splitting for sequencing reads
'''

from .pipeline import (AdapterTable, BarcodeAssignment, Occurrence, Pipeline,
                       PipelineStep, ReadsplitXp, Segment, Strand)
from .cli import main

__all__ = [
    'main',
    'Pipeline',
    'PipelineStep',
    'ReadsplitXp',
    'AdapterTable',
    'BarcodeAssignment',
    'Occurrence',
    'Segment',
    'Strand',
]
