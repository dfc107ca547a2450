"""
Viewing Keys
Revocable, unguessable read capabilities for the Secret Box.

The owner issues a key per viewer. The raw key goes back to the owner once,
in the issuance response, and is never stored: the store only holds its
SHA-256 digest. Presenting the key later proves possession without the
server ever being able to reproduce it.

Derivation:
  Instantiation seed  → Seed material (via HKDF, persisted)
  Seed material       → salt
  entropy ‖ viewer ‖ issuance counter → input keying material
  HKDF-SHA256         → 32 bytes → "strongbox_key_" + base64

Each field is length-prefixed before it enters the KDF so that no two
distinct (entropy, viewer, counter) triples produce the same input.
"""

import base64
import hashlib

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from strongbox.config import (
    DIGEST_SIZE,
    ENTROPY_LEN,
    ENTROPY_PREFIX,
    INITIAL_SEED_LEN,
    KEY_MATERIAL_SIZE,
    SEED_KEY,
    VIEWER_COUNTERS_PREFIX,
    VIEWER_KEYS_PREFIX,
    VIEWING_KEY_PREFIX,
)
from strongbox.errors import (
    EntropyReused,
    InsufficientEntropy,
    InsufficientSeed,
    UninitializedState,
)
from strongbox.log import get_logger
from strongbox.store import StateStore


logger = get_logger(__name__)

# HKDF contexts for seed and key derivation
_SEED_CONTEXT = b"strongbox-seed-material-v1"
_KEY_CONTEXT = b"strongbox-viewing-key-v1"

# Compared against when a viewer has no record, so the work done does not
# depend on whether the record exists.
_ABSENT_DIGEST = bytes(DIGEST_SIZE)


def _frame(*parts: bytes) -> bytes:
    """Concatenate parts, each behind a 4-byte big-endian length header."""
    out = b""
    for part in parts:
        out += len(part).to_bytes(4, "big") + part
    return out


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """
    Compare two byte strings without exiting at the first difference.

    Every byte pair is XORed into an accumulator, so the running time
    depends only on the length. Lengths are not secret here (digests are
    fixed-size), so a length mismatch returns immediately.
    """
    if len(a) != len(b):
        return False
    result = 0
    for x, y in zip(a, b):
        result |= x ^ y
    return result == 0


def hash_key(raw_key: str) -> bytes:
    """SHA-256 digest of a raw viewing key. This is what gets stored."""
    return hashlib.sha256(raw_key.encode("utf-8")).digest()


def derive_seed_material(initial_seed: bytes) -> bytes:
    """
    Derive the persisted seed material from the instantiation seed.

    The raw seed is never stored; HKDF output reveals nothing about it.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_MATERIAL_SIZE,
        salt=None,
        info=_SEED_CONTEXT,
    )
    return hkdf.derive(initial_seed)


def derive_key(seed_material: bytes, entropy: bytes, viewer: str, counter: int) -> str:
    """Derive the raw viewing key for one issuance."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_MATERIAL_SIZE,
        salt=seed_material,
        info=_KEY_CONTEXT,
    )
    material = hkdf.derive(
        _frame(entropy, viewer.encode("utf-8"), counter.to_bytes(8, "big"))
    )
    return VIEWING_KEY_PREFIX + base64.b64encode(material).decode()


def seed(store: StateStore, initial_seed: bytes) -> None:
    """
    Seed the manager once, at instantiation.

    Raises:
        InsufficientSeed: If fewer than 32 bytes are supplied.
    """
    if len(initial_seed) < INITIAL_SEED_LEN:
        raise InsufficientSeed()
    store.set(SEED_KEY, derive_seed_material(initial_seed))


def load_seed_material(store: StateStore) -> bytes:
    material = store.get(SEED_KEY)
    if material is None:
        raise UninitializedState()
    return material


def _record_key(viewer: str) -> str:
    return VIEWER_KEYS_PREFIX + viewer


def _counter_key(viewer: str) -> str:
    return VIEWER_COUNTERS_PREFIX + viewer


def _entropy_key(entropy: bytes) -> str:
    return ENTROPY_PREFIX + hashlib.sha256(entropy).hexdigest()


def issuance_count(store: StateStore, viewer: str) -> int:
    """Number of keys ever issued to the viewer. Revocation does not reset it."""
    raw = store.get(_counter_key(viewer))
    return int.from_bytes(raw, "big") if raw else 0


def issue(store: StateStore, viewer: str, entropy: bytes, seed_material: bytes) -> str:
    """
    Issue a fresh viewing key for a viewer.

    Replaces any existing key for the same viewer, which stops working
    immediately. All checks run before the first write.

    Args:
        store: State handle.
        viewer: Identity the key reads on behalf of.
        entropy: At least 20 bytes of caller randomness, never used before.
        seed_material: Material persisted at instantiation.

    Returns:
        The raw key. It is not recoverable from the store afterwards.

    Raises:
        InsufficientEntropy: Fewer than 20 bytes of entropy.
        EntropyReused: This entropy already produced a key.
    """
    if len(entropy) < ENTROPY_LEN:
        raise InsufficientEntropy()

    entropy_key = _entropy_key(entropy)
    if store.has(entropy_key):
        raise EntropyReused()

    counter = issuance_count(store, viewer) + 1
    raw_key = derive_key(seed_material, entropy, viewer, counter)

    store.set(_record_key(viewer), hash_key(raw_key))
    store.set(_counter_key(viewer), counter.to_bytes(8, "big"))
    store.set(entropy_key, b"1")

    logger.info("Viewing key issued for %s (issuance %d)", viewer, counter)
    return raw_key


def verify(store: StateStore, viewer: str, presented_key: str) -> bool:
    """
    Check a presented key against the viewer's stored digest.

    Read-only. The record is the raw 32-byte digest, used as-is. An unknown
    viewer and a wrong key both return False, and both go through the same
    hash-and-compare work.
    """
    stored = store.get(_record_key(viewer))
    expected = _ABSENT_DIGEST if stored is None else stored
    matched = constant_time_equals(hash_key(presented_key), expected)
    return matched and stored is not None


def revoke(store: StateStore, viewer: str) -> None:
    """
    Delete the viewer's key. Revoking an absent key is a no-op.

    The issuance counter stays, so a later key continues the count.
    """
    store.delete(_record_key(viewer))
    logger.info("Viewing key revoked for %s", viewer)
