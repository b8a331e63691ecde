"""
Error types raised inside the core.

Permission denial is deliberately absent: it is always a Decision value
(see services/gate.py), never an exception.
"""


class TrainCoreError(Exception):
    """Base class for all traincore errors."""


class MissingDataError(TrainCoreError):
    """A single input row is absent or lacks a required field."""

    def __init__(self, message: str, row: dict = None):
        super().__init__(message)
        self.row = row or {}


class PartialUpdateError(TrainCoreError):
    """
    A paired mutation succeeded in one store and failed in the other.

    Nothing is rolled back; the caller decides how to reconcile.
    """

    def __init__(self, message: str, committed: str, failed: str):
        super().__init__(message)
        self.committed = committed
        self.failed = failed
