from __future__ import annotations

from pathlib import Path

import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast tests of a single module")
    config.addinivalue_line("markers", "e2e: command line runs on small files")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Mark tests by the directory they live in."""
    for item in items:
        path = Path(str(item.fspath)).as_posix()
        if "/tests/unit/" in f"/{path}":
            item.add_marker(pytest.mark.unit)
        elif "/tests/e2e/" in f"/{path}":
            item.add_marker(pytest.mark.e2e)


@pytest.fixture
def write_fastq(tmp_path):
    """Write ``[(name, seq, qual)]`` records to a FASTQ file and return its path"""
    def _write(records, name="reads.fastq"):
        path = tmp_path / name
        with open(path, "w") as fh:
            for read_name, seq, qual in records:
                fh.write(f"@{read_name}\n{seq}\n+\n{qual}\n")
        return path
    return _write


@pytest.fixture
def write_fasta(tmp_path):
    """Write ``[(name, seq)]`` records to a FASTA file and return its path"""
    def _write(records, name="markers.fa"):
        path = tmp_path / name
        with open(path, "w") as fh:
            for record_name, seq in records:
                fh.write(f">{record_name}\n{seq}\n")
        return path
    return _write
