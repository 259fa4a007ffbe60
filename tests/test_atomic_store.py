# tests/test_atomic_store.py

from creditvote_node.runtime.atomic_store import AtomicStateStore


def test_missing_snapshot_loads_none(tmp_path):
    store = AtomicStateStore(data_dir=tmp_path)
    assert store.exists() is False
    assert store.load() is None


def test_save_then_load(tmp_path):
    store = AtomicStateStore(data_dir=tmp_path / "nested")
    state = {"version": 1, "voters": {"@bob": 2}, "proposals": []}
    store.save(state)
    assert store.exists()
    assert not store.journal_path.exists()
    assert store.load() == state


def test_backups_rotate(tmp_path):
    store = AtomicStateStore(data_dir=tmp_path, keep_backups=2)
    for i in range(4):
        store.save({"n": i})
    assert store.load() == {"n": 3}
    assert store.backup_path(1).exists()
    assert store.backup_path(2).exists()
    assert not store.backup_path(3).exists()


def test_corrupt_primary_falls_back_to_backup(tmp_path):
    store = AtomicStateStore(data_dir=tmp_path)
    store.save({"n": 1})
    store.save({"n": 2})
    store.path.write_text("{not json")
    assert store.load() == {"n": 1}


def test_save_from_writes_what_the_export_returns(tmp_path):
    store = AtomicStateStore(data_dir=tmp_path)
    calls = []

    def export():
        calls.append(1)
        return {"n": len(calls)}

    store.save_from(export)
    store.save_from(export)
    assert store.load() == {"n": 2}
    assert store.backup_path(1).exists()
