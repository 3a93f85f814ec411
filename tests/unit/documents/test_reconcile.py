from __future__ import annotations

import pytest

from medportal.documents.reconcile import reconcile
from medportal.storage.local import generate_storage_name


@pytest.mark.asyncio
async def test_clean_state(service, metadata, blobs, pdf_bytes):
    await service.upload(pdf_bytes, "a.pdf", "application/pdf")

    report = await reconcile(metadata, blobs)

    assert report.clean
    assert report.orphan_blobs == []
    assert report.dangling_records == []


@pytest.mark.asyncio
async def test_reports_drift_without_changing_anything(service, metadata, blobs, pdf_bytes):
    kept = await service.upload(pdf_bytes, "kept.pdf", "application/pdf")
    dangling = await service.upload(pdf_bytes, "gone.pdf", "application/pdf")
    (blobs.root / dangling.storage_path).unlink()
    orphan = await blobs.write(b"%PDF-orphan", "orphan.pdf")

    report = await reconcile(metadata, blobs, grace_seconds=0)

    assert not report.clean
    assert report.orphan_blobs == [orphan]
    assert report.dangling_records == [dangling.id]
    assert report.pruned_blobs == []
    assert report.dropped_records == []
    assert await blobs.exists(orphan)
    assert {r.id for r in await metadata.list_all()} == {kept.id, dangling.id}


@pytest.mark.asyncio
async def test_prune_and_drop(service, metadata, blobs, pdf_bytes):
    kept = await service.upload(pdf_bytes, "kept.pdf", "application/pdf")
    dangling = await service.upload(pdf_bytes, "gone.pdf", "application/pdf")
    (blobs.root / dangling.storage_path).unlink()
    orphan = await blobs.write(b"%PDF-orphan", "orphan.pdf")

    report = await reconcile(metadata, blobs, prune_orphans=True, drop_dangling=True, grace_seconds=0)

    assert report.pruned_blobs == [orphan]
    assert report.dropped_records == [dangling.id]
    assert not await blobs.exists(orphan)
    assert [r.id for r in await metadata.list_all()] == [kept.id]
    assert (await reconcile(metadata, blobs, grace_seconds=0)).clean


@pytest.mark.asyncio
async def test_fresh_unreferenced_blob_is_not_pruned(metadata, blobs):
    now_ms = 1_700_000_100_000
    in_flight = generate_storage_name("in-flight.pdf", now_ms=now_ms - 5_000, nonce=1)
    stale = generate_storage_name("stale.pdf", now_ms=now_ms - 120_000, nonce=2)
    blobs.ensure_root()
    for key in (in_flight, stale):
        (blobs.root / key).write_bytes(b"%PDF")
    (blobs.root / "stray.pdf").write_bytes(b"%PDF")

    report = await reconcile(metadata, blobs, prune_orphans=True, now_ms=now_ms)

    assert report.recent_blobs == [in_flight]
    assert sorted(report.orphan_blobs) == sorted([stale, "stray.pdf"])
    assert sorted(report.pruned_blobs) == sorted([stale, "stray.pdf"])
    assert await blobs.exists(in_flight)
    assert not await blobs.exists(stale)
