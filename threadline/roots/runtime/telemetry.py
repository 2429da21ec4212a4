"""Structured logging for timeline reads.

This module provides telemetry hooks for the roots engine and the
resumable index stream, emitting structured logs for observability.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


def log_read_started(
    *,
    mode: str,
    viewer_count: int,
    reverse: bool = False,
    limit: int | None = None,
    lt: float | None = None,
    gt: float | None = None,
) -> None:
    """Log the start of a timeline read.

    Args:
        mode: "read" or "latest"
        viewer_count: Number of viewer identities
        reverse: Whether the index is read newest first
        limit: Page size (None = unbounded)
        lt: Upper timestamp bound
        gt: Lower timestamp bound
    """
    logger.info(
        "roots_read_started",
        extra={
            "mode": mode,
            "viewer_count": viewer_count,
            "reverse": reverse,
            "limit": limit,
            "lt": lt,
            "gt": gt,
        },
    )


def log_read_complete(
    *,
    emitted: int,
    truncated: bool,
    marker_timestamp: float | None = None,
) -> None:
    """Log completion of a bounded or exhausted read.

    Args:
        emitted: Number of roots emitted
        truncated: Whether a marker was appended
        marker_timestamp: Timestamp carried by the marker, if any
    """
    logger.info(
        "roots_read_complete",
        extra={
            "emitted": emitted,
            "truncated": truncated,
            "marker_timestamp": marker_timestamp,
        },
    )


def log_dependency_load_failed(*, stage: str, error: BaseException) -> None:
    logger.error(
        "dependency_load_failed",
        extra={
            "stage": stage,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def log_index_retry(
    *,
    attempt: int,
    delay: float,
    watermark: Any,
    error: BaseException,
) -> None:
    """Log a resumed index read after a backing failure.

    Args:
        attempt: Consecutive failure count (1-based)
        delay: Backoff delay before reopening (seconds)
        watermark: Position the read resumes from
        error: The failure that interrupted the read
    """
    logger.warning(
        "index_read_retry",
        extra={
            "attempt": attempt,
            "delay": delay,
            "watermark": watermark,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )


def log_index_ended(*, items: int, sub_streams: int) -> None:
    logger.debug(
        "index_read_ended",
        extra={"items": items, "sub_streams": sub_streams},
    )


def log_root_lookup_failed(*, root_key: str, error: BaseException | None = None) -> None:
    """Log a root that could not be resolved; the bump is skipped."""
    logger.debug(
        "root_lookup_failed",
        extra={
            "root_key": root_key,
            "error_type": type(error).__name__ if error else None,
            "error_message": str(error) if error else "not found",
        },
    )


def log_thread_summary_failed(*, root_key: str, error: BaseException) -> None:
    logger.error(
        "thread_summary_failed",
        extra={
            "root_key": root_key,
            "error_type": type(error).__name__,
            "error_message": str(error),
        },
    )
