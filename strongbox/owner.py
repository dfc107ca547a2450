"""
Owner Registry
The single identity with administrative rights over an instance.

These functions read and write the owner slot only. They never check who
is asking; the Gate does that before calling set_owner.
"""

from strongbox.config import OWNER_KEY
from strongbox.errors import UninitializedState
from strongbox.store import StateStore


def get_owner(store: StateStore) -> str:
    """
    Read the current owner.

    Raises:
        UninitializedState: If no owner was ever written.
    """
    raw = store.get(OWNER_KEY)
    if raw is None:
        raise UninitializedState()
    return raw.decode("utf-8")


def set_owner(store: StateStore, new_identity: str) -> None:
    """Overwrite the owner. The owner slot is never left empty."""
    if not new_identity:
        raise ValueError("Owner identity cannot be empty")
    store.set(OWNER_KEY, new_identity.encode("utf-8"))


def is_owner(store: StateStore, identity: str) -> bool:
    return get_owner(store) == identity
