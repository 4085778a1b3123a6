import asyncio

import pytest
from openpyxl import Workbook

from bulk_ingest.config import Settings
from bulk_ingest.db.stores import InMemoryJobStore
from bulk_ingest.jobs.models import JobRecord, JobStatus
from bulk_ingest.pipeline import build_pipeline, build_stores


def _write_upload(directory, name, rows):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    workbook.save(directory / name)


def _settings(tmp_path, **overrides):
    return Settings(upload_dir=str(tmp_path), recovery_interval_seconds=60, **overrides)


@pytest.mark.asyncio
async def test_submitted_file_is_processed_end_to_end(tmp_path):
    _write_upload(
        tmp_path,
        "people.xlsx",
        [
            ["Name", "Age", "Nums"],
            ["John", 30, "5,3,9,1,7"],
            ["Jane", "abc", "1"],
            [None, "  ", None],
            ["Ann", 151, "2"],
        ],
    )
    pipeline = build_pipeline(_settings(tmp_path, chunk_size=2))
    await pipeline.start()
    try:
        job = await pipeline.submit("people.xlsx")
        await asyncio.wait_for(pipeline.queue.join(), timeout=10)
    finally:
        await pipeline.stop()

    stored = await pipeline.job_store.find_by_id(job.id)
    assert stored.status == JobStatus.DONE
    assert stored.mapping_format == "default"
    assert (stored.total_rows, stored.processed_rows) == (3, 3)
    assert [(e.row, e.col) for e in stored.errors] == [(3, 1), (4, 1)]

    data_set = await pipeline.result_store.find_by_job_id(job.id)
    assert data_set.records == [{"name": "John", "age": 30, "nums": [1, 3, 5, 7, 9]}]
    assert not (tmp_path / "people.xlsx").exists()


@pytest.mark.asyncio
async def test_job_abandoned_by_previous_process_is_recovered_on_start(tmp_path):
    _write_upload(tmp_path, "left.xlsx", [["Name", "Age", "Nums"], ["Ada", 36, "2,1"]])
    pipeline = build_pipeline(_settings(tmp_path))
    abandoned = JobRecord(source_file="left.xlsx", status=JobStatus.PROCESSING, processed_rows=0)
    await pipeline.job_store.create(abandoned)

    await pipeline.start()
    try:
        for _ in range(200):
            stored = await pipeline.job_store.find_by_id(abandoned.id)
            if stored.status == JobStatus.DONE:
                break
            await asyncio.sleep(0.02)
    finally:
        await pipeline.stop()

    assert stored.status == JobStatus.DONE
    assert stored.errors == []
    data_set = await pipeline.result_store.find_by_job_id(abandoned.id)
    assert data_set.records == [{"name": "Ada", "age": 36, "nums": [1, 2]}]


@pytest.mark.asyncio
async def test_pipelines_do_not_share_queues(tmp_path):
    first = build_pipeline(_settings(tmp_path))
    second = build_pipeline(_settings(tmp_path))

    await first.job_store.create(JobRecord(id="job-1", source_file="x.xlsx"))
    await first.queue.enqueue("job-1")

    assert first.queue.is_tracked("job-1")
    assert not second.queue.is_tracked("job-1")
    assert await second.job_store.find_by_id("job-1") is None


def test_build_stores_memory_backend(tmp_path):
    job_store, _ = build_stores(_settings(tmp_path))
    assert isinstance(job_store, InMemoryJobStore)


def test_build_stores_rejects_unknown_backend(tmp_path):
    with pytest.raises(ValueError):
        build_stores(_settings(tmp_path, job_store_backend="mongo"))


def test_build_stores_supabase_requires_credentials(tmp_path):
    with pytest.raises(RuntimeError):
        build_stores(_settings(tmp_path, job_store_backend="supabase"))
