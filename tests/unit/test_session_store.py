"""Unit tests for SessionStore admission rules and cascading removal."""

from batchscribe.core.models import AdmissionSource
from batchscribe.services.storage.session import (
    SessionStore,
    get_session_store,
    reset_session_store,
)


def _mixed(make_audio):
    return [make_audio("talk.mp3"), make_audio("notes.txt"), make_audio("call.WAV")]


class TestAdmission:
    def test_drop_filters_by_extension(self, store, make_audio):
        entries = store.admit(_mixed(make_audio), source=AdmissionSource.drop)

        assert [e.file_name for e in entries] == ["talk.mp3", "call.WAV"]
        assert len(store.queue) == 2

    def test_folder_filters_by_extension(self, store, make_audio):
        entries = store.admit(_mixed(make_audio), source=AdmissionSource.folder)

        assert [e.file_name for e in entries] == ["talk.mp3", "call.WAV"]

    def test_picker_admits_everything_by_default(self, store, make_audio):
        entries = store.admit(_mixed(make_audio), source=AdmissionSource.picker)

        assert [e.file_name for e in entries] == ["talk.mp3", "notes.txt", "call.WAV"]

    def test_picker_filters_when_strict(self, make_audio):
        strict = SessionStore(strict_format_check=True)

        entries = strict.admit(_mixed(make_audio), source=AdmissionSource.picker)

        assert [e.file_name for e in entries] == ["talk.mp3", "call.WAV"]

    def test_strict_flag_defaults_to_settings(self, monkeypatch):
        from batchscribe.core.config import get_settings

        monkeypatch.setenv("STRICT_FORMAT_CHECK", "true")
        get_settings.cache_clear()

        assert SessionStore().strict_format_check is True

    def test_nothing_accepted(self, store, make_audio):
        assert store.admit([make_audio("a.doc")], source=AdmissionSource.drop) == []
        assert len(store.queue) == 0


class TestRemoval:
    def test_remove_cascades_to_result(self, store, make_audio):
        (entry,) = store.admit([make_audio("a.mp3")])
        store.queue.mark_processing(entry, 10)
        store.queue.mark_completed(entry, "hello")
        store.results.append(entry.id, entry.file_name, "hello")

        assert store.remove(entry.id) is True

        assert entry.id not in store.queue
        assert entry.id not in store.results

    def test_remove_without_result(self, store, make_audio):
        (entry,) = store.admit([make_audio("a.mp3")])

        assert store.remove(entry.id) is True
        assert len(store.results) == 0

    def test_remove_unknown_is_noop(self, store, make_audio):
        store.admit([make_audio("a.mp3")])

        assert store.remove("unknown") is False
        assert len(store.queue) == 1

    def test_reset(self, store, make_audio):
        (entry,) = store.admit([make_audio("a.mp3")])
        store.results.append(entry.id, entry.file_name, "x")

        store.reset()

        assert len(store.queue) == 0
        assert len(store.results) == 0


def test_process_wide_store_is_shared():
    first = get_session_store()
    assert get_session_store() is first

    reset_session_store()
    assert get_session_store() is not first
