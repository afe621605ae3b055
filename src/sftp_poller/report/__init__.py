"""
Result reporting: outcome summary, log output, scheduler response.
"""

from sftp_poller.report.summary import (
    InvocationSummary,
    failure_response,
    log_summary,
    success_response,
    summarize,
)

__all__ = [
    "InvocationSummary",
    "failure_response",
    "log_summary",
    "success_response",
    "summarize",
]
