import argparse
import sys
from importlib import import_module

__all__ = [
        'main',
        'parse_args',
]

# workflow names for argument parsing without importing PipelineStep
WORKFLOW_NAMES = ['demux', 'split']
LOG_LEVELS = ["CRITICAL", "WARNING", "INFO", "IO", "STEP", "DEBUG"]


def _add_common_arguments(parser):
    parser.add_argument("--config", help="Path to a YAML config file; flags override its values")
    parser.add_argument("-o", "--out", help="Output file (default: stdout); a .gz suffix compresses")
    parser.add_argument("--summary", help="Write run counters as a TSV table to this path")
    parser.add_argument("--limit", type=int, help="Only process this many reads")
    parser.add_argument("--max-distance", type=int, help="Maximum edit distance of a marker hit")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)"
        )
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--dump-config", help="Save the effective configuration as YAML to this path")


def parse_args():
    """Build the command line parser"""
    parser = argparse.ArgumentParser(
            prog="readsplit",
            description="Barcode assignment and adapter splitting of sequencing reads")
    subparsers = parser.add_subparsers(dest="command", metavar="{demux,split}")

    demux = subparsers.add_parser(
            "demux",
            help="Assign every read to its best matching barcode",
            description="Prints read_id, barcode, distance, start and end for every read ('-' when no barcode matched)")
    demux.add_argument("barcodes", nargs="?", help="FASTA/FASTQ file with the barcode sequences")
    demux.add_argument("reads", nargs="?", help="FASTQ/FASTA file with the reads")
    _add_common_arguments(demux)

    split = subparsers.add_parser(
            "split",
            help="Split reads into segments bounded by adapters",
            description="Writes one FASTQ record per segment found between adapters on either strand")
    split.add_argument("reads", nargs="?", help="FASTQ/FASTA file with the reads")
    split.add_argument("--adapter-a", help="Adapter opening a segment on the forward strand")
    split.add_argument("--adapter-b", help="Adapter closing a segment on the forward strand")
    split.add_argument("--unmatched", help="Write reads without any segment to this file")
    _add_common_arguments(split)

    return parser


def lazy_import():
    """Lazily import heavier modules only when needed"""
    modules = {}
    from readsplit.utils.log import Rlogger
    modules['Rlogger'] = Rlogger

    modules['Pipeline'] = import_module('readsplit.pipeline.core').Pipeline
    modules['ReadsplitXp'] = import_module('readsplit.pipeline.types').ReadsplitXp
    modules['ReadsplitError'] = import_module('readsplit.pipeline.errors').ReadsplitError
    return modules


def main(argv=None):
    """Run a readsplit workflow with command line arguments.

    Examples
    --------
    Assign barcodes, keeping the assignments and a run summary::

        $ readsplit demux barcodes.fa reads.fastq.gz -o assignments.tsv --summary demux_summary.tsv

    Split reads with an explicit adapter pair (the reverse strand uses their reverse complements)::

        $ readsplit split reads.fastq.gz --adapter-a AATGTACTTCGTTCAGTTACGTATTGCT --adapter-b GCAATACGTAACTGAACGAAGT -o segments.fastq

    Take everything from a config file::

        $ readsplit split --config run.yml

    Returns
    -------
    int
        0 for successful execution, 1 for failure
    """
    parser = parse_args()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    modules = lazy_import()
    Rlogger = modules['Rlogger']
    Pipeline = modules['Pipeline']
    ReadsplitXp = modules['ReadsplitXp']
    ReadsplitError = modules['ReadsplitError']

    logger = Rlogger().get_logger()

    try:
        if args.log_level:
            Rlogger().set_level(args.log_level)

        xp = ReadsplitXp(conf_fn=args.config)
        xp.update(
            reads_fn=args.reads,
            barcodes_fn=getattr(args, 'barcodes', None),
            out_fn=args.out,
            summary_fn=args.summary,
            limit=args.limit,
            log_fn=args.log_file,
            log_level=args.log_level,
            )
        Rlogger().set_level(xp.log_level)
        xp.update_section(args.command, max_distance=args.max_distance)

        if args.command == 'split':
            if bool(args.adapter_a) != bool(args.adapter_b):
                raise ValueError("--adapter-a and --adapter-b must be given together")
            if args.adapter_a:
                xp.update_section('split',
                                  adapters={'a': args.adapter_a, 'b': args.adapter_b},
                                  unmatched_fn=args.unmatched)
            else:
                xp.update_section('split', unmatched_fn=args.unmatched)

        if args.dump_config:
            xp.export_xpconf(args.dump_config)

        pipeline = Pipeline(xp)
        pipeline.run(args.command)
        return 0

    except Exception as e:
        # input and config problems get a one line message
        if isinstance(e, (ReadsplitError, ValueError, FileNotFoundError, argparse.ArgumentError)):
            logger.error(f"Error: {str(e)}")
        else:
            logger.error(f"Pipeline execution failed: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
