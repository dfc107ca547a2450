"""
Secret Box
The opaque payload. Stored and returned byte-for-byte; never inspected.
"""

from strongbox.config import BOX_KEY
from strongbox.errors import NotInitialized
from strongbox.store import StateStore


def write(store: StateStore, content: bytes) -> None:
    """Replace the payload. Empty content is legal."""
    store.set(BOX_KEY, bytes(content))


def read(store: StateStore) -> bytes:
    """
    Return the full payload.

    Raises:
        NotInitialized: If the box was never written.
    """
    content = store.get(BOX_KEY)
    if content is None:
        raise NotInitialized()
    return content
