"""Integration tests for REST API endpoints against the in-memory session store."""

import asyncio

import pytest

from batchscribe.api.routes.results import content_disposition
from batchscribe.core.exceptions import ApiError
from batchscribe.services.storage.session import get_session_store


def _uploads(*names):
    return [("files", (name, b"fake-bytes-" + name.encode())) for name in names]


async def _upload(client, *names, source="drop"):
    resp = await client.post("/api/v1/files", params={"source": source}, files=_uploads(*names))
    assert resp.status_code == 200
    return resp.json()


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


async def test_health(async_client):
    resp = await async_client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# Admission
# ---------------------------------------------------------------------------


async def test_drop_upload_filters_unsupported(async_client):
    body = await _upload(async_client, "talk.mp3", "notes.txt", "call.wav")

    assert [e["file_name"] for e in body] == ["talk.mp3", "call.wav"]
    assert all(e["status"] == "pending" and e["progress"] == 0 for e in body)
    assert body[0]["size"] == len(b"fake-bytes-talk.mp3")


async def test_picker_upload_admits_everything(async_client):
    body = await _upload(async_client, "talk.mp3", "notes.txt", source="picker")

    assert [e["file_name"] for e in body] == ["talk.mp3", "notes.txt"]


async def test_picker_upload_respects_strict_setting(async_client, monkeypatch):
    from batchscribe.core.config import get_settings

    monkeypatch.setenv("STRICT_FORMAT_CHECK", "1")
    get_settings.cache_clear()

    body = await _upload(async_client, "talk.mp3", "notes.txt", source="picker")

    assert [e["file_name"] for e in body] == ["talk.mp3"]


async def test_folder_import(async_client, tmp_path):
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "deep.flac").write_bytes(b"flac")
    (tmp_path / "cover.jpg").write_bytes(b"jpg")
    (tmp_path / "intro.ogg").write_bytes(b"ogg")

    resp = await async_client.post("/api/v1/files/folder", json={"path": str(tmp_path)})

    assert resp.status_code == 200
    assert sorted(e["file_name"] for e in resp.json()) == ["deep.flac", "intro.ogg"]


async def test_folder_import_missing_path(async_client, tmp_path):
    resp = await async_client.post("/api/v1/files/folder", json={"path": str(tmp_path / "nope")})

    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


async def test_unknown_source_names_the_bad_field(async_client):
    resp = await async_client.post(
        "/api/v1/files", params={"source": "camera"}, files=_uploads("a.mp3")
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "REQUEST_VALIDATION_ERROR"
    assert [e["field"] for e in body["errors"]] == ["query.source"]
    assert body["detail"].startswith("query.source: ")
    assert "timestamp" in body


async def test_list_and_get_files(async_client):
    (entry,) = await _upload(async_client, "a.mp3")

    listed = (await async_client.get("/api/v1/files")).json()
    assert [e["id"] for e in listed] == [entry["id"]]

    resp = await async_client.get(f"/api/v1/files/{entry['id']}")
    assert resp.json()["file_name"] == "a.mp3"

    resp = await async_client.get("/api/v1/files/unknown")
    assert resp.status_code == 404
    assert resp.json()["code"] == "FILE_NOT_FOUND"


# ---------------------------------------------------------------------------
# Batch run
# ---------------------------------------------------------------------------


async def test_batch_lifecycle(async_client, mock_transcriber):
    """Upload → run → results → per-file and bulk export → remove cascades."""
    first, second = await _upload(async_client, "a.mp3", "b.wav")

    resp = await async_client.post(
        "/api/v1/batch/run",
        json={"model": "whisper-large-v3", "api_key": "sk-test", "base_url": "https://x"},
    )
    assert resp.status_code == 200
    assert resp.json() == {"processed": [first["id"], second["id"]], "completed": 2, "failed": 0}
    assert mock_transcriber.transcribe.await_args_list[0].args[1:] == (
        "whisper-large-v3",
        "sk-test",
        "https://x",
    )

    files = (await async_client.get("/api/v1/files")).json()
    assert [(f["status"], f["progress"]) for f in files] == [("completed", 100), ("completed", 100)]

    results = (await async_client.get("/api/v1/results")).json()
    assert [r["file_name"] for r in results] == ["a.mp3", "b.wav"]

    resp = await async_client.get(f"/api/v1/results/{first['id']}/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert 'filename="a_transcription.txt"' in resp.headers["content-disposition"]
    assert resp.text == "transcript of a.mp3"

    resp = await async_client.get("/api/v1/results/export")
    assert 'filename="all_transcriptions.txt"' in resp.headers["content-disposition"]
    assert resp.text == (
        "=== a.mp3 ===\ntranscript of a.mp3\n\n=== b.wav ===\ntranscript of b.wav\n\n"
    )

    resp = await async_client.delete(f"/api/v1/files/{first['id']}")
    assert resp.json() == {"id": first["id"], "removed": True}
    assert [r["id"] for r in (await async_client.get("/api/v1/results")).json()] == [second["id"]]

    resp = await async_client.delete(f"/api/v1/files/{first['id']}")
    assert resp.status_code == 200
    assert resp.json()["removed"] is False


async def test_failed_file_is_reported(async_client, mock_transcriber):
    await _upload(async_client, "good.mp3", "bad.mp3")

    async def _transcribe(file, model_id, api_key, base_url):
        if file.name == "bad.mp3":
            raise ApiError("Audio file is corrupted", 400)
        return "fine"

    mock_transcriber.transcribe.side_effect = _transcribe

    resp = await async_client.post("/api/v1/batch/run", json={"api_key": "sk"})

    assert resp.json()["failed"] == 1
    files = {f["file_name"]: f for f in (await async_client.get("/api/v1/files")).json()}
    assert files["bad.mp3"]["status"] == "error"
    assert files["bad.mp3"]["error"] == "Audio file is corrupted"
    assert files["good.mp3"]["status"] == "completed"

    resp = await async_client.get(f"/api/v1/results/{files['bad.mp3']['id']}/export")
    assert resp.status_code == 404


async def test_run_requires_api_key(async_client, mock_transcriber):
    await _upload(async_client, "a.mp3")

    resp = await async_client.post("/api/v1/batch/run", json={"api_key": "  "})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "API key is required"
    mock_transcriber.transcribe.assert_not_awaited()


async def test_run_uses_settings_api_key(async_client, monkeypatch, mock_transcriber):
    from batchscribe.core.config import get_settings

    monkeypatch.setenv("API_KEY", "from-env")
    get_settings.cache_clear()
    await _upload(async_client, "a.mp3")

    resp = await async_client.post("/api/v1/batch/run")

    assert resp.status_code == 200
    assert mock_transcriber.transcribe.await_args.args[2] == "from-env"


async def test_run_with_empty_queue(async_client):
    resp = await async_client.post("/api/v1/batch/run", json={"api_key": "sk"})

    assert resp.status_code == 400
    assert resp.json()["detail"] == "No files to transcribe"


async def test_background_run(async_client, processor):
    (entry,) = await _upload(async_client, "a.mp3")

    resp = await async_client.post(
        "/api/v1/batch/run", params={"background": "true"}, json={"api_key": "sk"}
    )
    assert resp.status_code == 200
    assert resp.json()["processed"] == [entry["id"]]

    for _ in range(50):
        if not processor.is_running and get_session_store().queue.counts()["completed"] == 1:
            break
        await asyncio.sleep(0.01)

    status = (await async_client.get("/api/v1/batch/status")).json()
    assert status == {
        "running": False,
        "counts": {"pending": 0, "processing": 0, "completed": 1, "error": 0},
    }


async def test_background_run_validates_first(async_client):
    resp = await async_client.post(
        "/api/v1/batch/run", params={"background": "true"}, json={"api_key": "sk"}
    )

    assert resp.status_code == 400


async def test_concurrent_background_runs_reject_the_second(
    async_client, processor, mock_transcriber
):
    release = asyncio.Event()

    async def _slow(file, *args):
        await release.wait()
        return f"transcript of {file.name}"

    mock_transcriber.transcribe.side_effect = _slow
    (entry,) = await _upload(async_client, "a.mp3")

    def _start():
        return async_client.post(
            "/api/v1/batch/run", params={"background": "true"}, json={"api_key": "sk"}
        )

    first, second = await asyncio.gather(_start(), _start())

    assert sorted([first.status_code, second.status_code]) == [200, 409]
    accepted = first if first.status_code == 200 else second
    rejected = second if accepted is first else first
    assert accepted.json()["processed"] == [entry["id"]]
    assert rejected.json()["code"] == "BATCH_ALREADY_RUNNING"
    assert processor.is_running

    release.set()
    for _ in range(50):
        if not processor.is_running:
            break
        await asyncio.sleep(0.01)

    assert not processor.is_running
    assert mock_transcriber.transcribe.await_count == 1


async def test_export_non_ascii_file_name(async_client):
    (entry,) = await _upload(async_client, "会議.mp3")
    await async_client.post("/api/v1/batch/run", json={"api_key": "sk"})

    resp = await async_client.get(f"/api/v1/results/{entry['id']}/export")

    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == (
        "attachment; filename*=utf-8''%E4%BC%9A%E8%AD%B0_transcription.txt"
    )
    assert resp.text == "transcript of 会議.mp3"


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("a_transcription.txt", 'attachment; filename="a_transcription.txt"'),
        ("say \"hi\".txt", "attachment; filename*=utf-8''say%20%22hi%22.txt"),
    ],
)
def test_content_disposition(filename, expected):
    assert content_disposition(filename) == expected


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


async def test_list_default_models(async_client):
    resp = await async_client.get("/api/v1/models")

    assert resp.status_code == 200
    assert resp.json()[0]["identifier"] == "whisper-1"


async def test_refresh_models_failure(async_client, monkeypatch):
    from batchscribe.core.exceptions import ModelDiscoveryError

    async def _fail(*args, **kwargs):
        raise ModelDiscoveryError("Failed to fetch models: 401")

    monkeypatch.setattr("batchscribe.services.catalog.fetch_models", _fail)

    resp = await async_client.post("/api/v1/models/refresh", json={"api_key": "bad"})

    assert resp.status_code == 502
    assert resp.json()["code"] == "MODEL_DISCOVERY_ERROR"
    assert len((await async_client.get("/api/v1/models")).json()) == 4


@pytest.mark.parametrize("found", [["whisper-x"], []])
async def test_refresh_models(async_client, monkeypatch, found):
    from batchscribe.core.models import ModelDescriptor

    async def _fetch(*args, **kwargs):
        return [ModelDescriptor(identifier=i, display_name=i) for i in found]

    monkeypatch.setattr("batchscribe.services.catalog.fetch_models", _fetch)

    resp = await async_client.post("/api/v1/models/refresh")

    identifiers = [m["identifier"] for m in resp.json()]
    assert identifiers == (found or ["whisper-1", "whisper-large-v3", "whisper-large-v2", "azure/whisper-1"])
