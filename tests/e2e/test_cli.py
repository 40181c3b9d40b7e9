import polars as pl
import pytest

from readsplit.cli import main

ADAPTER_A = "CATCATCATG"
ADAPTER_B = "GTAGTAGTAC"
PAYLOAD = "G" * 10


@pytest.fixture
def barcodes_fn(write_fasta):
    return write_fasta([("BC1", "AAAACCCC"), ("BC2", "GGGGTTTT")], name="barcodes.fa")


@pytest.fixture
def demux_reads_fn(write_fastq):
    r1 = "ACACAC" + "GGGGTTTT" + "ACACAC"
    r2 = "ACAC" * 4
    return write_fastq([("r1", r1, "I" * len(r1)), ("r2", r2, "I" * len(r2))])


@pytest.fixture
def split_reads_fn(write_fastq):
    r1 = "TTTT" + ADAPTER_A + PAYLOAD + ADAPTER_B + "TTTT"
    r2 = "ACGT" * 8
    return write_fastq([("r1", r1, "I" * len(r1)), ("r2", r2, "I" * len(r2))])


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "demux" in capsys.readouterr().out


def test_demux(tmp_path, barcodes_fn, demux_reads_fn):
    out_fn = tmp_path / "assignments.tsv"
    summary_fn = tmp_path / "summary.tsv"
    rc = main([
        "demux", str(barcodes_fn), str(demux_reads_fn),
        "--max-distance", "0",
        "-o", str(out_fn),
        "--summary", str(summary_fn),
    ])
    assert rc == 0
    assert out_fn.read_text().splitlines() == [
        "r1\tBC2\t0\t6\t13",
        "r2\t-\t-\t-\t-",
    ]

    summary = pl.read_csv(summary_fn, separator="\t")
    assert summary.columns == ["step", "metric", "value"]
    metrics = dict(zip(summary["metric"].to_list(), summary["value"].to_list()))
    assert metrics["reads"] == 2
    assert metrics["assigned"] == 1
    assert metrics["unassigned"] == 1
    assert metrics["pattern:BC2"] == 1
    assert set(summary["step"].to_list()) == {"demux"}


def test_demux_to_stdout(capsys, barcodes_fn, demux_reads_fn):
    assert main(["demux", str(barcodes_fn), str(demux_reads_fn), "--max-distance", "0"]) == 0
    assert capsys.readouterr().out.splitlines()[0] == "r1\tBC2\t0\t6\t13"


def test_demux_limit(tmp_path, barcodes_fn, demux_reads_fn):
    out_fn = tmp_path / "assignments.tsv"
    assert main(["demux", str(barcodes_fn), str(demux_reads_fn), "--limit", "1", "-o", str(out_fn)]) == 0
    assert len(out_fn.read_text().splitlines()) == 1


def test_demux_missing_reads_fails_without_output(tmp_path, barcodes_fn):
    out_fn = tmp_path / "assignments.tsv"
    summary_fn = tmp_path / "summary.tsv"
    rc = main([
        "demux", str(barcodes_fn), str(tmp_path / "missing.fastq"),
        "-o", str(out_fn),
        "--summary", str(summary_fn),
    ])
    assert rc == 1
    assert not out_fn.exists()
    assert not summary_fn.exists()


def test_demux_missing_barcodes_argument(demux_reads_fn):
    assert main(["demux"]) == 1


def test_split(tmp_path, split_reads_fn):
    out_fn = tmp_path / "segments.fastq"
    unmatched_fn = tmp_path / "unmatched.fastq"
    summary_fn = tmp_path / "summary.tsv"
    log_fn = tmp_path / "split.log"
    rc = main([
        "split", str(split_reads_fn),
        "--adapter-a", ADAPTER_A,
        "--adapter-b", ADAPTER_B,
        "--max-distance", "0",
        "--unmatched", str(unmatched_fn),
        "-o", str(out_fn),
        "--summary", str(summary_fn),
        "--log-file", str(log_fn),
    ])
    assert rc == 0
    assert out_fn.read_text() == f"@r1_0 strand=0 start=4:13 end=24:33\n{PAYLOAD}\n+\n{'I' * 10}\n"
    assert unmatched_fn.read_text().startswith("@r2\nACGTACGT")

    summary = pl.read_csv(summary_fn, separator="\t")
    metrics = dict(zip(summary["metric"].to_list(), summary["value"].to_list()))
    assert metrics["reads"] == 2
    assert metrics["segments"] == 1
    assert metrics["reads_without_segments"] == 1

    assert "Starting SPLIT step" in log_fn.read_text()


def test_split_from_config(tmp_path, split_reads_fn):
    out_fn = tmp_path / "segments.fastq"
    dumped_fn = tmp_path / "effective.yaml"
    conf_fn = tmp_path / "run.yaml"
    conf_fn.write_text(
        f"reads_fn: {split_reads_fn}\n"
        f"out_fn: {out_fn}\n"
        "split:\n"
        "  max_distance: 0\n"
        "  adapters:\n"
        f"    forward: [{ADAPTER_A}, {ADAPTER_B}]\n"
        "    reverse: [CATGATGATG, GTACTACTAC]\n"
    )
    assert main(["split", "--config", str(conf_fn), "--dump-config", str(dumped_fn)]) == 0
    assert out_fn.read_text().splitlines()[1] == PAYLOAD
    assert dumped_fn.exists()


def test_split_needs_both_adapters(tmp_path, split_reads_fn):
    rc = main(["split", str(split_reads_fn), "--adapter-a", ADAPTER_A, "-o", str(tmp_path / "out.fastq")])
    assert rc == 1
    assert not (tmp_path / "out.fastq").exists()


def test_split_without_adapters(tmp_path, split_reads_fn):
    assert main(["split", str(split_reads_fn), "-o", str(tmp_path / "out.fastq")]) == 1


def test_demux_writes_a_line_for_empty_reads(tmp_path, barcodes_fn, write_fastq):
    reads_fn = write_fastq([("r1", "GGGGTTTT", "IIIIIIII"), ("r2", "", ""), ("r3", "ACAC", "IIII")])
    out_fn = tmp_path / "assignments.tsv"
    assert main(["demux", str(barcodes_fn), str(reads_fn), "--max-distance", "0", "-o", str(out_fn)]) == 0
    assert out_fn.read_text().splitlines() == [
        "r1\tBC2\t0\t0\t7",
        "r2\t-\t-\t-\t-",
        "r3\t-\t-\t-\t-",
    ]


def test_split_counts_empty_reads_as_unsegmented(tmp_path, write_fastq):
    reads_fn = write_fastq([("r1", "", "")])
    out_fn = tmp_path / "segments.fastq"
    summary_fn = tmp_path / "summary.tsv"
    rc = main([
        "split", str(reads_fn),
        "--adapter-a", ADAPTER_A,
        "--adapter-b", ADAPTER_B,
        "-o", str(out_fn),
        "--summary", str(summary_fn),
    ])
    assert rc == 0
    assert out_fn.read_text() == ""
    summary = pl.read_csv(summary_fn, separator="\t")
    metrics = dict(zip(summary["metric"].to_list(), summary["value"].to_list()))
    assert metrics["reads_without_segments"] == 1
    assert metrics["skipped_records"] == 0
