"""Custom exception hierarchy."""

from __future__ import annotations

from typing import Any


class RootsError(Exception):
    """Base exception for all library errors."""

    pass


class DependencyLoadError(RootsError):
    """Follow graph or subscription snapshot could not be loaded.

    Raised before any index read starts. The whole read is aborted and no
    partial results are produced.
    """

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class ThreadSummaryError(RootsError):
    """Thread summary lookup failed for a root.

    Summaries are mandatory, so this aborts the read. Items already
    emitted are not retracted.
    """

    def __init__(self, message: str, root_key: str) -> None:
        super().__init__(message)
        self.root_key = root_key


class RetryExhaustedError(RootsError):
    """Backing stream kept failing after the retry policy gave up."""

    def __init__(self, message: str, attempts: int, watermark: Any = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.watermark = watermark
