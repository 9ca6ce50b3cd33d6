"""Last-write-wins conditional update for tag documents.

The gate is a single ``update_one`` whose filter carries the ownership,
liveness and timestamp conditions together. The database evaluates and
applies it in one statement, so of two racing writers only the one with
the higher timestamp can match; the other sees zero modified rows.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass

from tagsync.models.tag import FieldChanges
from tagsync.services.document_store import DocumentCollection

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current server time as Unix milliseconds."""
    return time.time_ns() // 1_000_000


class WriteOutcome(str, enum.Enum):
    APPLIED = "applied"
    STALE = "stale"          # record exists but holds an equal or newer updateTs
    NOT_FOUND = "not_found"  # no live record with this id for this user


@dataclass(frozen=True)
class WriteResult:
    outcome: WriteOutcome
    record_id: str
    timestamp: int | None = None

    def __bool__(self) -> bool:
        return self.outcome is WriteOutcome.APPLIED

    @property
    def applied(self) -> bool:
        return self.outcome is WriteOutcome.APPLIED


def live_record_filter(record_id: str, user_id: str) -> dict:
    return {"_id": record_id, "userId": user_id, "deleted": False}


def apply_update(
    collection: DocumentCollection,
    record_id: str,
    owner_user_id: str,
    changes: FieldChanges,
    candidate_ts: int | None = None,
) -> WriteResult:
    """Write ``changes`` only if ``candidate_ts`` is newer than the stored updateTs."""
    if candidate_ts is None:
        candidate_ts = now_ms()

    gate = {
        **live_record_filter(record_id, owner_user_id),
        "$or": [{"updateTs": {"$lt": candidate_ts}}, {"updateTs": None}],
    }
    result = collection.update_one(gate, {**changes.to_document(), "updateTs": candidate_ts})

    if result.acknowledged and result.modified_count == 1:
        return WriteResult(WriteOutcome.APPLIED, record_id, candidate_ts)

    # Classify the rejection; this lookup never writes.
    live = collection.find_one(live_record_filter(record_id, owner_user_id), ("_id",))
    outcome = WriteOutcome.STALE if live is not None else WriteOutcome.NOT_FOUND
    logger.debug(
        "Rejected update of %s/%s at ts=%d: %s",
        collection.name, record_id, candidate_ts, outcome.value,
    )
    return WriteResult(outcome, record_id, candidate_ts)
