"""
Errors
Every failure the core can surface to a caller.

Messages are fixed per category. None of them carry request details, so
an error never tells a caller more than which rule rejected it.
"""


class StrongboxError(Exception):
    """Base class for all Strongbox request failures."""

    code = "strongbox_error"
    message = "Request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": str(self)}}


class Unauthorized(StrongboxError):
    """Caller is not the current owner."""

    code = "unauthorized"
    message = "You are not allowed"


class ViewingKeyMismatch(StrongboxError):
    """Presented key does not match, or no key exists, for the viewer."""

    code = "viewing_key_mismatch"
    message = "Viewing key does not match"


class InsufficientEntropy(StrongboxError):
    code = "insufficient_entropy"
    message = "You need to provide valid entropy"


class EntropyReused(StrongboxError):
    """Entropy was already used for an earlier key."""

    code = "entropy_reused"
    message = "You need to use another entropy"


class InsufficientSeed(StrongboxError):
    code = "insufficient_seed"
    message = "You need to provide valid seed"


class AlreadyInitialized(StrongboxError):
    code = "already_initialized"
    message = "Strongbox is already initialized"


class UninitializedState(StrongboxError):
    """
    The store was never instantiated.

    Unreachable through the Gate under correct platform ordering; seeing
    it means a request was delivered before instantiation.
    """

    code = "uninitialized"
    message = "Strongbox is not initialized"


class NotInitialized(UninitializedState):
    """The box payload was never written."""


class InvalidMessage(StrongboxError):
    """A request could not be decoded into a known message."""

    code = "invalid_message"
    message = "Invalid message"
