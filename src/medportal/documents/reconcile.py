"""On-demand drift scan between the storage directory and the metadata table."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from ..exceptions import NotFound
from ..storage.local import LocalBlobStore, storage_name_timestamp
from .metadata import MetadataStore

logger = logging.getLogger(__name__)

# An upload writes its blob before its row; younger unreferenced blobs may still get one.
ORPHAN_GRACE_SECONDS = 60.0


@dataclass
class ReconcileReport:
    orphan_blobs: list[str] = field(default_factory=list)
    dangling_records: list[int] = field(default_factory=list)
    recent_blobs: list[str] = field(default_factory=list)
    pruned_blobs: list[str] = field(default_factory=list)
    dropped_records: list[int] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not self.orphan_blobs and not self.dangling_records


async def reconcile(
    metadata: MetadataStore,
    blobs: LocalBlobStore,
    *,
    prune_orphans: bool = False,
    drop_dangling: bool = False,
    grace_seconds: float = ORPHAN_GRACE_SECONDS,
    now_ms: int | None = None,
) -> ReconcileReport:
    """Compare blob keys on disk with storage paths in the table.

    Orphan blobs have no record; dangling records point at a missing blob.
    Nothing is changed unless ``prune_orphans`` / ``drop_dangling`` ask for it.

    An unreferenced blob whose key timestamp is less than ``grace_seconds``
    old is listed in ``recent_blobs`` instead of ``orphan_blobs`` and is never
    pruned: it may belong to an upload whose metadata insert is in flight.
    Keys without a timestamp prefix count as orphans.
    """
    now_ms = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    cutoff_ms = now_ms - int(grace_seconds * 1000)

    report = ReconcileReport()
    records = await metadata.list_all()
    referenced = {r.storage_path for r in records}

    for key in blobs.iter_keys():
        if key in referenced:
            continue
        ts = storage_name_timestamp(key)
        if ts is not None and ts > cutoff_ms:
            report.recent_blobs.append(key)
        else:
            report.orphan_blobs.append(key)

    for record in records:
        if not await blobs.exists(record.storage_path):
            report.dangling_records.append(record.id)

    if prune_orphans:
        for key in report.orphan_blobs:
            if await blobs.delete(key):
                report.pruned_blobs.append(key)

    if drop_dangling:
        for document_id in report.dangling_records:
            try:
                await metadata.delete(document_id)
            except NotFound:
                continue
            report.dropped_records.append(document_id)

    logger.info(
        "Reconcile: %d orphan blob(s), %d dangling record(s), %d recent blob(s) skipped, pruned %d, dropped %d",
        len(report.orphan_blobs),
        len(report.dangling_records),
        len(report.recent_blobs),
        len(report.pruned_blobs),
        len(report.dropped_records),
    )
    return report
