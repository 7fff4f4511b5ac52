"""Outcome records produced by the notification dispatch loop."""

from __future__ import annotations

from dataclasses import dataclass, field

DISPATCH_STATUS_SENT = "sent"
DISPATCH_STATUS_FAILED = "failed"
DISPATCH_STATUS_SKIPPED_COMPLETED = "skipped_completed"


@dataclass(frozen=True)
class DispatchResult:
    """Per-notification outcome of one dispatch pass."""

    notification_id: str
    status: str
    email_id: str | None = None
    error: str | None = None


@dataclass
class DispatchSummary:
    """Aggregated statistics for a batch."""

    processed: int = 0
    sent: int = 0
    failed: int = 0
    processing_time_ms: int = 0
    cancelled: bool = False
    details: list[DispatchResult] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        return compute_success_rate(self.sent, self.processed)


def compute_success_rate(sent: int, processed: int) -> float:
    """Return ``sent / processed * 100``, or ``100`` for an empty batch."""

    if processed <= 0:
        return 100.0
    return sent / processed * 100


__all__ = [
    "DispatchResult",
    "DispatchSummary",
    "compute_success_rate",
    "DISPATCH_STATUS_SENT",
    "DISPATCH_STATUS_FAILED",
    "DISPATCH_STATUS_SKIPPED_COMPLETED",
]
