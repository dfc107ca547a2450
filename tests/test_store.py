"""Tests for the state stores and the request transaction."""

import sys
import tempfile
from pathlib import Path
from unittest import mock

sys.path.insert(0, str(Path(__file__).parent.parent))

from strongbox import box, config, gate, owner
from strongbox.errors import NotInitialized, UninitializedState, ViewingKeyMismatch
from strongbox.messages import CreateViewingKey, GetStrongbox, InstantiateMsg, UpdateStrongbox
from strongbox.store import FileStore, MemoryStore, Transaction


class FailingStore(MemoryStore):
    """MemoryStore whose Nth call to set() raises, once."""

    def __init__(self, fail_at, data=None):
        super().__init__(data)
        self.fail_at = fail_at
        self.sets = 0

    def set(self, key, value):
        self.sets += 1
        if self.sets == self.fail_at:
            raise OSError("disk full")
        super().set(key, value)


def test_memory_store_basics():
    store = MemoryStore()
    assert store.get("owner") is None
    store.set("owner", b"alice")
    assert store.get("owner") == b"alice"
    assert store.has("owner")
    store.delete("owner")
    store.delete("owner")
    assert not store.has("owner")
    print("  [PASS] Memory store get/set/delete")


def test_file_store_survives_reopen():
    """A new FileStore over the same directory sees earlier writes."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = FileStore(tmpdir)
        store.set("owner", b"alice")
        store.set("viewer_keys/bob/../weird name", b"\x00\x01")

        reopened = FileStore(tmpdir)
        assert reopened.get("owner") == b"alice"
        assert reopened.get("viewer_keys/bob/../weird name") == b"\x00\x01"
        assert reopened.keys() == ["owner", "viewer_keys/bob/../weird name"]

        reopened.delete("owner")
        reopened.delete("missing")
        assert FileStore(tmpdir).get("owner") is None
        assert not list(Path(tmpdir).glob("*.tmp"))
        print("  [PASS] File store persists across instances")


def test_transaction_commit():
    backing = MemoryStore({"owner": b"alice", "box": b"old"})
    with Transaction(backing) as txn:
        txn.set("box", b"new")
        txn.delete("owner")
        # Staged changes are visible inside, invisible outside
        assert txn.get("box") == b"new"
        assert txn.get("owner") is None
        assert backing.get("box") == b"old"
        assert txn.pending == 2
    assert backing.snapshot() == {"box": b"new"}
    print("  [PASS] Transaction commits on success")


def test_transaction_discard():
    backing = MemoryStore({"box": b"old"})
    try:
        with Transaction(backing) as txn:
            txn.set("box", b"new")
            txn.set("owner", b"mallory")
            raise ValueError("abort")
    except ValueError:
        pass
    assert backing.snapshot() == {"box": b"old"}
    assert txn.pending == 0
    print("  [PASS] Transaction discards on failure")


def test_commit_rolls_back_partial_write():
    """A backing store failing mid-commit is restored to its prior contents."""
    backing = FailingStore(fail_at=3, data={"box": b"old"})
    txn = Transaction(backing)
    txn.set("box", b"new")
    txn.set("owner", b"alice")
    txn.set("seed", b"material")
    try:
        txn.commit()
    except OSError:
        pass
    else:
        raise AssertionError("The failing set should propagate")
    assert backing.snapshot() == {"box": b"old"}
    assert txn.pending == 0
    print("  [PASS] Partial commit rolled back")


def test_failed_instantiate_can_retry():
    """An instantiate that fails while committing leaves nothing behind."""
    store = FailingStore(fail_at=3)
    try:
        gate.instantiate(store, "alice", InstantiateMsg(seed=b"a" * 32))
    except OSError:
        pass
    else:
        raise AssertionError("The failing set should propagate")
    assert store.snapshot() == {}

    gate.instantiate(store, "alice", InstantiateMsg(seed=b"a" * 32))
    assert owner.get_owner(store) == "alice"
    assert box.read(store) == b""
    print("  [PASS] Failed instantiate is retryable")


def test_file_store_long_keys():
    """Viewer identities of any length map to fixed-length file names."""
    viewer = "v" * 300
    with tempfile.TemporaryDirectory() as tmpdir:
        store = FileStore(tmpdir)
        gate.instantiate(store, "alice", InstantiateMsg(seed=b"a" * 32))
        gate.execute(store, "alice", UpdateStrongbox(strongbox="hello"))
        try:
            gate.query(store, GetStrongbox(behalf=viewer, key="strongbox_key_x"))
        except ViewingKeyMismatch:
            pass
        else:
            raise AssertionError("Unknown long viewer should get a mismatch")

        key = gate.execute(
            store, "alice", CreateViewingKey(viewer=viewer, entropy="e" * 20),
        ).data["key"]
        answer = gate.query(FileStore(tmpdir), GetStrongbox(behalf=viewer, key=key))
        assert answer.strongbox == "hello"
        assert "viewer_keys/" + viewer in store.keys()
        assert all(len(f.name) == len("0" * 64 + ".entry") for f in Path(tmpdir).iterdir())
        print("  [PASS] File store handles long keys")


def test_file_store_default_dir():
    """Without an explicit directory, FileStore uses STRONGBOX_STORE_DIR."""
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "state"
        with mock.patch.object(config, "STORE_DIR", str(target)):
            store = FileStore()
        store.set("owner", b"alice")
        assert store.store_dir == target
        assert FileStore(target).get("owner") == b"alice"
        print("  [PASS] File store defaults to configured directory")


def test_owner_registry():
    store = MemoryStore()
    try:
        owner.get_owner(store)
    except UninitializedState:
        pass
    else:
        raise AssertionError("Owner read before instantiation should fail")

    owner.set_owner(store, "alice")
    assert owner.get_owner(store) == "alice"
    assert owner.is_owner(store, "alice")
    assert not owner.is_owner(store, "Alice")

    try:
        owner.set_owner(store, "")
    except ValueError:
        pass
    else:
        raise AssertionError("Empty owner should be rejected")
    assert owner.get_owner(store) == "alice"
    print("  [PASS] Owner registry")


def test_secret_box():
    store = MemoryStore()
    try:
        box.read(store)
    except NotInitialized:
        pass
    else:
        raise AssertionError("Reading an unwritten box should fail")

    box.write(store, b"")
    assert box.read(store) == b""
    payload = bytes(range(256)) * 1024
    box.write(store, payload)
    assert box.read(store) == payload
    print("  [PASS] Secret box")


if __name__ == "__main__":
    print("Running store tests...")
    test_memory_store_basics()
    test_file_store_survives_reopen()
    test_transaction_commit()
    test_transaction_discard()
    test_commit_rolls_back_partial_write()
    test_failed_instantiate_can_retry()
    test_file_store_long_keys()
    test_file_store_default_dir()
    test_owner_registry()
    test_secret_box()
    print("\nAll store tests passed!")
