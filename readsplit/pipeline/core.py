from contextlib import nullcontext
from datetime import datetime
from enum import Enum
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import polars as pl

from readsplit.utils.log import Rlogger, call

from .barcodes import assign_read
from .errors import ConfigError
from .formats import (format_assignment, format_read, format_segment,
                      iter_records, load_patterns, open_output)
from .segmentation import AdapterTable, build_segments, locate_adapters
from .types import ReadsplitXp, RunStats, StepResults


class PipelineStep(Enum):
    """Enum defining available workflows"""
    DEMUX = {
        'required_params': {'reads_fn', 'barcodes_fn'},
        'section': 'demux',
        'description': "Assign every read to its best matching barcode"
    }

    SPLIT = {
        'required_params': {'reads_fn'},
        'section': 'split',
        'description': "Split reads into segments bounded by adapters"
    }

    @classmethod
    def from_string(cls, step_name: str) -> "PipelineStep":
        """Convert string to PipelineStep enum"""
        try:
            return cls[step_name.upper()]
        except KeyError:
            raise ValueError(f"Invalid step name: {step_name}. Valid steps are: {[s.name for s in cls]}")


def log_invocation_params(logger: Any, step: PipelineStep, xp: ReadsplitXp, kwargs: Optional[Dict] = None) -> None:
    """
    Log the invocation parameters for a workflow.

    Args:
        logger: Logger instance to use for logging
        step: The workflow being executed
        xp: The run configuration
        kwargs: Additional parameters passed to the step function
    """
    logger.debug(f"=== {step.name} Parameters - {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} ===")
    for param in sorted(step.value['required_params']):
        logger.debug(f"  {param}: {getattr(xp, param, None)}")

    section = step.value['section']
    logger.info(f"  {section} configuration:")
    for k, v in getattr(xp, section).items():
        logger.info(f"    {k}: {v}")

    for param in ['out_fn', 'summary_fn', 'limit']:
        logger.debug(f"  {param}: {getattr(xp, param, None)}")

    if kwargs:
        logger.info("  Additional parameters:")
        for k, v in kwargs.items():
            logger.info(f"    {k}: {v}")


def pipeline_step(step: PipelineStep):
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(ppi: "Pipeline", *args: Any, **kwargs: Any) -> Any:
            rlogger = Rlogger()
            try:
                if ppi.xp.log_fn:
                    rlogger.enable_file_logging(
                        filepath=ppi.xp.log_fn,
                        level=ppi.xp.log_level,
                        format_string="%(asctime)s - %(levelname)s - %(message)s",
                        mode='w'
                    )

                missing_params = [
                    param for param in step.value['required_params']
                    if getattr(ppi.xp, param, None) is None
                ]
                if missing_params:
                    raise ConfigError(f"Missing required parameters for {step.name}: {', '.join(sorted(missing_params))}")

                ppi.logger.info(f"Starting {step.name} step")
                log_invocation_params(ppi.logger, step, ppi.xp, kwargs)

                results = func(ppi, *args, **kwargs)

                ppi.logger.info(f"Completed {step.name} step")
                ppi.update_pipeline_summary(step, results)
                return results

            except Exception as e:
                ppi.logger.error(f"Step {step.name} failed: {str(e)}")
                raise
            finally:
                rlogger.disable_file_logging()

        return wrapper
    return decorator


class Pipeline:
    """Streams a read file through one workflow using a ReadsplitXp configuration"""
    def __init__(self, xp: ReadsplitXp):
        self.xp = xp
        self.logger = Rlogger().get_logger()
        self.stats = RunStats()

    def __repr__(self):
        return f"Pipeline(reads_fn={self.xp.reads_fn!r}, out_fn={self.xp.out_fn!r})"

    def run(self, step: PipelineStep | str) -> StepResults:
        if isinstance(step, str):
            step = PipelineStep.from_string(step)
        if step is PipelineStep.DEMUX:
            return self.demux()
        return self.split()

    @call
    @pipeline_step(PipelineStep.DEMUX)
    def demux(self) -> StepResults:
        """Write one barcode assignment line per read"""
        self.stats = RunStats()
        max_distance = self.xp.demux['max_distance']

        # both inputs are opened before any output is written
        patterns = load_patterns(self.xp.barcodes_fn)
        reads = iter_records(self.xp.reads_fn, stats=self.stats, limit=self.xp.limit)

        with open_output(self.xp.out_fn) as out:
            for read in reads:
                self.stats.reads += 1
                assignment = assign_read(read, patterns, max_distance)
                self.stats.count_assignment(assignment)
                out.write(format_assignment(assignment))

        return StepResults(
                results={
                    'out_fn': self.xp.out_fn,
                    'summary_fn': self.xp.summary_fn,
                    'patterns': [p.name for p in patterns],
                },
                metrics=self.stats.as_dict())

    @call
    @pipeline_step(PipelineStep.SPLIT)
    def split(self) -> StepResults:
        """Write every adapter-bounded segment of every read"""
        self.stats = RunStats()
        max_distance = self.xp.split['max_distance']
        unmatched_fn = self.xp.split['unmatched_fn']

        if self.xp.split['adapters'] is None:
            raise ConfigError("The split workflow needs an adapter table, e.g.:\n" + AdapterTable._table_help())
        table = AdapterTable.from_config(self.xp.split['adapters'])
        for strand, (a, b) in table.rows.items():
            self.logger.debug(f"{strand.name.lower()}: a={a} b={b}")

        reads = iter_records(self.xp.reads_fn, stats=self.stats, limit=self.xp.limit)

        with open_output(self.xp.out_fn) as out, self._unmatched_output(unmatched_fn) as unmatched:
            for read in reads:
                self.stats.reads += 1
                hits = locate_adapters(read, table, max_distance)
                segments = build_segments(read.name, read.length, hits, stats=self.stats)

                if len(segments) == 0:
                    self.stats.reads_without_segments += 1
                    if unmatched is not None:
                        unmatched.write(format_read(read))
                    continue

                for segment in segments:
                    out.write(format_segment(segment, read))
                self.stats.segments += len(segments)

        return StepResults(
                results={
                    'out_fn': self.xp.out_fn,
                    'summary_fn': self.xp.summary_fn,
                    'unmatched_fn': unmatched_fn,
                    'adapters': table.to_dict(),
                },
                metrics=self.stats.as_dict())

    def _unmatched_output(self, unmatched_fn):
        if unmatched_fn is None:
            return nullcontext()
        return open_output(unmatched_fn)

    def update_pipeline_summary(self, step: PipelineStep, results: StepResults) -> None:
        """Log the run counters and write them to ``summary_fn`` when configured"""
        if not results.has_metrics():
            return

        for k, v in results.metrics.items():
            self.logger.info(f"  {k}: {v}")

        if self.stats.skipped_records:
            self.logger.warning(f"{self.stats.skipped_records} malformed records were skipped")

        summary_fn = self.xp.summary_fn
        if summary_fn is not None:
            Path(summary_fn).parent.mkdir(parents=True, exist_ok=True)
            (
                self.stats.as_df()
                .select(pl.lit(step.name.lower()).alias('step'), pl.all())
                .write_csv(summary_fn, separator='\t')
            )
            self.logger.io(f"summary written to {summary_fn}")
