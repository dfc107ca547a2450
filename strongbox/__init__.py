"""
Strongbox — Single-Owner Secret Store
One opaque payload per instance, one owner, revocable viewing keys.

Strongbox has three layers over a shared key-value store:
1. Owner Registry: the one identity allowed to change anything
2. Secret Box: the payload itself, opaque bytes
3. Viewing Keys: capability tokens the owner hands out for read access

Every request goes through the Gate, which checks the caller's role
before any component is touched, and runs the request as a single
transaction.

Usage:
    from strongbox import MemoryStore, gate, InstantiateMsg, UpdateStrongbox

    store = MemoryStore()
    gate.instantiate(store, "alice", InstantiateMsg(seed=os.urandom(32)))
    gate.execute(store, "alice", UpdateStrongbox(strongbox="hello"))
"""

from strongbox import gate
from strongbox.errors import (
    StrongboxError,
    Unauthorized,
    ViewingKeyMismatch,
    InsufficientEntropy,
    InsufficientSeed,
    EntropyReused,
    AlreadyInitialized,
    UninitializedState,
    NotInitialized,
    InvalidMessage,
)
from strongbox.messages import (
    InstantiateMsg,
    UpdateStrongbox,
    CreateViewingKey,
    TransferOwnership,
    RevokeViewingKey,
    GetStrongbox,
    Response,
    StrongboxResponse,
)
from strongbox.store import StateStore, MemoryStore, FileStore, Transaction

__version__ = "0.1.0"
__all__ = [
    "gate",
    "StateStore",
    "MemoryStore",
    "FileStore",
    "Transaction",
    "InstantiateMsg",
    "UpdateStrongbox",
    "CreateViewingKey",
    "TransferOwnership",
    "RevokeViewingKey",
    "GetStrongbox",
    "Response",
    "StrongboxResponse",
    "StrongboxError",
    "Unauthorized",
    "ViewingKeyMismatch",
    "InsufficientEntropy",
    "InsufficientSeed",
    "EntropyReused",
    "AlreadyInitialized",
    "UninitializedState",
    "NotInitialized",
    "InvalidMessage",
]
