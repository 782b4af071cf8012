"""Result models for drains and individual replayed operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Optional


OperationStatus = Literal["success", "failed", "skipped"]
DrainStatus = Literal["success", "partial"]


@dataclass(slots=True)
class OperationResult:
    """Result for a single replayed Operation."""

    entity_id: str
    kind: str
    status: OperationStatus

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    review_url: Optional[str] = None


@dataclass(slots=True)
class DrainResult:
    """Aggregate result for SyncCoordinator.on_connectivity_restored()."""

    status: DrainStatus
    results: list[OperationResult]

    summary: dict[str, int] = field(default_factory=dict)
    finished_at: Optional[datetime] = None

    @property
    def failed_entity_ids(self) -> list[str]:
        return [r.entity_id for r in self.results if r.status == "failed"]
