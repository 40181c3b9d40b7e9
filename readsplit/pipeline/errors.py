"""Exceptions raised by the readsplit pipeline.

Fatal conditions (``InputOpenError``, ``ConfigError``) abort a run before any
output is written. ``RecordParseError`` is per record: the streaming loop
catches it, counts the skip and moves on to the next record.
"""


class ReadsplitError(Exception):
    """Base class for readsplit errors"""


class InputOpenError(ReadsplitError):
    """An input source cannot be opened or yields nothing usable"""

    def __init__(self, path, reason):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Could not open {self.path}: {reason}")


class RecordParseError(ReadsplitError):
    """A single sequence record is malformed"""

    def __init__(self, record_id, reason):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Malformed record {record_id!r}: {reason}")


class ConfigError(ReadsplitError, ValueError):
    """Invalid or incomplete run configuration"""
