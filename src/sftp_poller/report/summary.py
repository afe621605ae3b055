"""
Batch summary and scheduler responses.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sftp_poller.models import FileOutcome
from sftp_poller.utils.logging import get_logger

logger = get_logger("sftp_poller.report")

SUCCESS_MESSAGE = "SFTP poll completed successfully"
FAILURE_ERROR = "SFTP poll failed"
UNKNOWN_ERROR = "Unknown error occurred"


@dataclass(frozen=True)
class InvocationSummary:
    total: int
    successful: int
    failed: int
    successful_files: tuple[tuple[str, str], ...] = ()
    failed_files: tuple[tuple[str, str], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Response-body shape of the summary."""
        return {
            "totalFiles": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "successfulFiles": [
                {"filename": filename, "storageKey": key} for filename, key in self.successful_files
            ],
            "failedFiles": [{"filename": filename, "error": error} for filename, error in self.failed_files],
        }


def summarize(outcomes: Iterable[FileOutcome]) -> InvocationSummary:
    """Fold outcomes into a summary, preserving their order."""
    succeeded: list[tuple[str, str]] = []
    failed: list[tuple[str, str]] = []
    for outcome in outcomes:
        if outcome.is_success:
            succeeded.append((outcome.filename, outcome.storage_key or ""))
        else:
            failed.append((outcome.filename, outcome.error or ""))

    return InvocationSummary(
        total=len(succeeded) + len(failed),
        successful=len(succeeded),
        failed=len(failed),
        successful_files=tuple(succeeded),
        failed_files=tuple(failed),
    )


def log_summary(summary: InvocationSummary, bucket: str | None = None) -> None:
    logger.info(
        f"SFTP poll completed: {summary.successful} files downloaded to S3, {summary.failed} failed"
    )

    if summary.successful_files:
        logger.info("Successfully downloaded files to S3:")
        for filename, key in summary.successful_files:
            logger.info(f"  - {filename} -> s3://{bucket or ''}/{key}")
        logger.info("S3 events will automatically trigger file processing via SQS")

    if summary.failed_files:
        logger.warning("Failed to process files:")
        for filename, error in summary.failed_files:
            logger.warning(f"  - {filename}: {error}")


def success_response(summary: InvocationSummary) -> dict[str, Any]:
    """200 response; individual file errors are itemized in the body."""
    return {
        "statusCode": 200,
        "body": json.dumps({"message": SUCCESS_MESSAGE, "summary": summary.to_dict()}),
    }


def failure_response(error: BaseException, event: Mapping[str, Any] | None) -> dict[str, Any]:
    """500 response carrying the error and the trigger event for replay."""
    message = getattr(error, "message", None) or str(error) or UNKNOWN_ERROR
    body = {"error": FAILURE_ERROR, "message": message, "event": event}
    return {
        "statusCode": 500,
        "body": json.dumps(body, default=str),
    }
