"""
Strongbox — Basic Usage Example

Walks one instance through its life: the owner stores a secret, hands a
viewing key to a friend, the friend reads the secret, and the owner
revokes the key again.
"""

import os
import shutil
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from strongbox import (
    FileStore, gate, InstantiateMsg, UpdateStrongbox, CreateViewingKey,
    RevokeViewingKey, GetStrongbox, StrongboxError,
)


def main():
    store_dir = "./example-strongbox"
    # Start from a clean directory even if an earlier run aborted
    shutil.rmtree(store_dir, ignore_errors=True)
    store = FileStore(store_dir)

    print("=" * 50)
    print("  Strongbox — Single-Owner Secret Store")
    print("=" * 50)

    # The caller of instantiate becomes the owner
    gate.instantiate(store, "alice", InstantiateMsg(seed=os.urandom(32)))
    gate.execute(store, "alice", UpdateStrongbox(strongbox="the wifi password is hunter2"))
    print("\nalice instantiated the box and stored a secret")

    # Only alice can change it
    try:
        gate.execute(store, "mallory", UpdateStrongbox(strongbox="pwned"))
    except StrongboxError as e:
        print(f"mallory tried to overwrite it: {e.code}")

    # alice issues a key for bob and passes it to him out-of-band
    response = gate.execute(
        store, "alice",
        CreateViewingKey(viewer="bob", entropy=os.urandom(20).hex()),
    )
    key = response.data["key"]
    print(f"alice issued bob a viewing key ({len(key)} chars)")

    answer = gate.query(store, GetStrongbox(behalf="bob", key=key))
    print(f"bob reads: {answer.strongbox!r}")

    # The key is bound to bob
    try:
        gate.query(store, GetStrongbox(behalf="mallory", key=key))
    except StrongboxError as e:
        print(f"mallory replays bob's key: {e.code}")

    gate.execute(store, "alice", RevokeViewingKey(viewer="bob"))
    try:
        gate.query(store, GetStrongbox(behalf="bob", key=key))
    except StrongboxError as e:
        print(f"bob after revocation: {e.code}")

    # Cleanup
    shutil.rmtree(store_dir, ignore_errors=True)
    print("\nCleaned up example files.")


if __name__ == "__main__":
    main()
