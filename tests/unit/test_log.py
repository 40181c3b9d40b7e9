import logging

import pytest

from readsplit.pipeline.types import StepResults
from readsplit.utils.log import (IO_LEVEL_NUM, STEP_LEVEL_NUM, CustomLogger, Rlogger, call,
                                 format_arg, format_value)


@pytest.fixture
def rlogger():
    rlogger = Rlogger()
    level = rlogger.get_logger().level
    yield rlogger
    rlogger.disable_file_logging()
    rlogger.get_logger().setLevel(level)


def test_singleton(rlogger):
    assert Rlogger() is rlogger
    assert isinstance(rlogger.get_logger(), CustomLogger)
    assert rlogger.get_logger().name == "readsplit"


def test_set_level(rlogger):
    rlogger.set_level("IO")
    assert rlogger.get_logger().level == IO_LEVEL_NUM
    rlogger.set_level("STEP")
    assert rlogger.get_logger().level == STEP_LEVEL_NUM
    with pytest.raises(ValueError):
        rlogger.set_level("LOUD")


def test_file_logging(rlogger, tmp_path):
    log_fn = tmp_path / "logs" / "run.log"
    rlogger.set_level("INFO")
    rlogger.enable_file_logging(log_fn)
    logger = rlogger.get_logger()
    logger.info("first message")
    logger.io("io message")
    rlogger.disable_file_logging()
    logger.info("after disabling")

    text = log_fn.read_text()
    assert "INFO - first message" in text
    assert "io message" not in text
    assert "after disabling" not in text
    assert rlogger.file_handler is None


def test_call_logs_step(rlogger, tmp_path):
    log_fn = tmp_path / "run.log"
    rlogger.set_level("DEBUG")
    rlogger.enable_file_logging(log_fn, level="DEBUG")

    @call
    def add(x, y=2):
        return x + y

    assert add(1) == 3
    rlogger.disable_file_logging()

    text = log_fn.read_text()
    assert "STEP - add" in text
    assert logging.getLevelName(STEP_LEVEL_NUM) == "STEP"


def test_call_logs_arguments_and_counters(rlogger, tmp_path):
    log_fn = tmp_path / "run.log"
    rlogger.set_level("DEBUG")
    rlogger.enable_file_logging(log_fn, level="DEBUG")

    @call
    def run(name, reads):
        return StepResults(results={'out_fn': None}, metrics={'reads': len(reads)})

    run("demux", "A" * 500)
    rlogger.disable_file_logging()

    text = log_fn.read_text()
    assert "name='demux'" in text
    assert "A" * 500 not in text
    assert "reads: 500" in text


def test_format_arg_cuts_long_values():
    assert format_arg("ACGT") == "'ACGT'"
    assert format_arg("A" * 300, width=10) == "'AAAAAAAAA..."
    assert format_value(StepResults(results={}, metrics={'segments': 3})) == "  segments: 3"
