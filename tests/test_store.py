import random
from pathlib import Path

import pytest

from kvset_store.codec import ABSENT, OK, TRUNCATED, UNRECOGNIZED, decode_snapshot, encode
from kvset_store.compression import is_compressed
from kvset_store.store import KVSetStore, finalize, initialize


def test_insert_find_delete_scenario(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    store.insert("alice", 5)
    store.insert("alice", 3)
    store.insert("alice", 5)
    assert store.find("alice") == (3, 5)
    store.delete("alice", 3)
    store.delete("alice", 5)
    assert store.find("alice") is None
    assert "alice" not in store
    assert len(store) == 0


def test_persists_across_reload(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    path.write_bytes(encode({}))
    store = initialize(path)
    assert store.find("bob") is None
    store.insert("bob", 10)
    finalize(store)

    reloaded = initialize(path)
    assert reloaded.find("bob") == (10,)
    assert reloaded.load_status == OK


def test_insert_is_idempotent(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    assert store.insert(b"k", 1) is True
    first = store.to_bytes()
    assert store.insert(b"k", 1) is False
    assert store.to_bytes() == first
    assert store.record_count == 1


def test_delete_missing_is_noop(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    assert store.delete("nobody", 1) is False
    store.insert("k", 1)
    assert store.delete("k", 2) is False
    assert store.find("k") == (1,)


def test_find_miss_does_not_create_entry(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    assert store.find("ghost") is None
    assert len(store) == 0
    assert list(store.keys()) == []


def test_str_and_bytes_keys_are_the_same_key(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    store.insert("clé", 1)
    assert store.find("clé".encode("utf-8")) == (1,)


def test_rejects_bad_arguments(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    with pytest.raises(TypeError):
        store.insert(3, 1)
    with pytest.raises(ValueError):
        store.insert("k", 2**31)
    with pytest.raises(TypeError):
        store.delete("k", "1")
    assert len(store) == 0


def test_random_operations_match_reference(tmp_path: Path) -> None:
    rng = random.Random(7)
    path = tmp_path / "kv.bin"
    store = KVSetStore(path)
    reference: dict[bytes, set[int]] = {}
    for _ in range(3000):
        key = f"k{rng.randrange(20)}".encode()
        value = rng.randint(-100, 100)
        if rng.random() < 0.6:
            store.insert(key, value)
            reference.setdefault(key, set()).add(value)
        else:
            store.delete(key, value)
            if key in reference:
                reference[key].discard(value)
                if not reference[key]:
                    del reference[key]
    expected = {key: tuple(sorted(values)) for key, values in reference.items()}
    assert dict(store.items()) == expected
    store.close()

    reloaded = KVSetStore(path)
    assert dict(reloaded.items()) == expected
    assert reloaded.record_count == sum(len(v) for v in expected.values())


def test_missing_file_is_not_created_until_close(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    store = KVSetStore(path)
    assert store.load_status == ABSENT
    assert not path.exists()
    store.close()
    assert path.exists()
    assert decode_snapshot(path.read_bytes()).entries == {}


def test_unrecognized_file_loads_empty_and_is_overwritten(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    path.write_bytes(b"not a snapshot at all, just text")
    store = KVSetStore(path)
    assert store.load_status == UNRECOGNIZED
    assert len(store) == 0
    store.insert("k", 1)
    store.close()
    assert KVSetStore(path).find("k") == (1,)


def test_truncated_file_loads_partial(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    path.write_bytes(encode({b"a": [1, 2, 3]})[:-2])
    store = KVSetStore(path)
    assert store.load_status == TRUNCATED
    assert store.find("a") == (1, 2)


def test_reserved_field_is_preserved(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    path.write_bytes(encode({b"a": [1]}, reserved=42))
    store = KVSetStore(path)
    store.insert("b", 2)
    store.close()
    assert decode_snapshot(path.read_bytes()).header.reserved == 42


def test_close_to_other_destination(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    store.insert("k", 1)
    other = tmp_path / "copy.bin"
    store.close(other)
    assert not (tmp_path / "kv.bin").exists()
    assert KVSetStore(other).find("k") == (1,)


def test_finalized_store_rejects_operations(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    store.close()
    assert store.closed
    with pytest.raises(ValueError):
        store.insert("k", 1)
    with pytest.raises(ValueError):
        store.find("k")
    store.close()  # second close is a no-op


def test_unwritable_destination_raises_and_stays_open(tmp_path: Path) -> None:
    store = KVSetStore(tmp_path / "kv.bin")
    store.insert("k", 1)
    with pytest.raises(OSError):
        store.close(tmp_path / "missing-dir" / "kv.bin")
    assert not store.closed
    assert store.find("k") == (1,)
    store.close()
    assert store.closed


def test_context_manager_saves(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    with KVSetStore(path) as store:
        store.insert("k", 3)
    assert store.closed
    assert KVSetStore(path).find("k") == (3,)


def test_compressed_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "kv.bin"
    with KVSetStore(path, compress=True) as store:
        for v in range(100):
            store.insert("k", v)
    assert is_compressed(path.read_bytes())

    reloaded = KVSetStore(path, compress=False)
    assert reloaded.find("k") == tuple(range(100))
    reloaded.close()
    assert not is_compressed(path.read_bytes())
