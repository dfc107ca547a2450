"""
Access Control Gate
Entry points for every request against a Strongbox instance.

The caller identity is always an explicit argument, supplied by the
hosting platform and trusted as-is. For each request the Gate:

1. Opens a Transaction over the store
2. Checks the operation's required role (owner, or a matching viewing key)
3. Calls the Owner Registry / Secret Box / Viewing Key Manager
4. Commits only if every step succeeded

A failed check raises before any component is touched. A failure later in
a handler discards the transaction, so no request leaves a partial write.

Required roles:
  instantiate: anyone, first call only
  update_strongbox: owner
  create_viewing_key: owner
  transfer_ownership: owner
  revoke_viewing_key: owner
  get_strongbox: holder of a key for `behalf` (or the owner)
"""

from strongbox import box, owner, viewing_key
from strongbox.config import OWNER_KEY
from strongbox.errors import (
    AlreadyInitialized,
    InvalidMessage,
    Unauthorized,
    ViewingKeyMismatch,
)
from strongbox.log import get_logger
from strongbox.messages import (
    CreateViewingKey,
    ExecuteMsg,
    GetStrongbox,
    InstantiateMsg,
    QueryMsg,
    Response,
    RevokeViewingKey,
    StrongboxResponse,
    TransferOwnership,
    UpdateStrongbox,
    parse_execute,
    parse_query,
)
from strongbox.store import StateStore, Transaction


logger = get_logger(__name__)


def _require_owner(store: StateStore, caller: str, operation: str) -> None:
    if caller != owner.get_owner(store):
        logger.warning("Denied %s for %s", operation, caller)
        raise Unauthorized()


def instantiate(store: StateStore, caller: str, msg: InstantiateMsg) -> Response:
    """
    Create the instance: caller becomes owner, box starts empty.

    Raises:
        InsufficientSeed: Seed shorter than 32 bytes.
        AlreadyInitialized: The store already has an owner.
    """
    if not caller:
        raise InvalidMessage("Caller identity is required")

    with Transaction(store) as txn:
        if txn.has(OWNER_KEY):
            raise AlreadyInitialized()
        viewing_key.seed(txn, msg.seed)
        owner.set_owner(txn, caller)
        box.write(txn, b"")

    logger.info("Strongbox was initialized by %s", caller)
    return Response()


def _update_strongbox(store: StateStore, caller: str, msg: UpdateStrongbox) -> Response:
    _require_owner(store, caller, msg.tag)
    box.write(store, msg.strongbox.encode("utf-8"))
    logger.debug("Strongbox updated successfully")
    return Response()


def _create_viewing_key(store: StateStore, caller: str, msg: CreateViewingKey) -> Response:
    _require_owner(store, caller, msg.tag)
    raw_key = viewing_key.issue(
        store,
        msg.viewer,
        msg.entropy.encode("utf-8"),
        viewing_key.load_seed_material(store),
    )
    return Response(data={"key": raw_key})


def _transfer_ownership(store: StateStore, caller: str, msg: TransferOwnership) -> Response:
    _require_owner(store, caller, msg.tag)
    if not msg.new_owner:
        raise InvalidMessage("New owner cannot be empty")
    owner.set_owner(store, msg.new_owner)
    logger.info("Owner updated from %s to %s", caller, msg.new_owner)
    return Response()


def _revoke_viewing_key(store: StateStore, caller: str, msg: RevokeViewingKey) -> Response:
    _require_owner(store, caller, msg.tag)
    viewing_key.revoke(store, msg.viewer)
    return Response()


def execute(store: StateStore, caller: str, msg: ExecuteMsg) -> Response:
    """
    Run one owner-gated operation.

    Args:
        store: State handle for this instance.
        caller: Identity the platform attributes the request to.
        msg: One of the execute message variants.

    Returns:
        Response; for create_viewing_key, data carries {"key": raw_key}.

    Raises:
        Unauthorized: Caller is not the current owner.
        InsufficientEntropy / EntropyReused: Bad key issuance entropy.
        InvalidMessage: Not an execute message.
    """
    with Transaction(store) as txn:
        match msg:
            case UpdateStrongbox():
                return _update_strongbox(txn, caller, msg)
            case CreateViewingKey():
                return _create_viewing_key(txn, caller, msg)
            case TransferOwnership():
                return _transfer_ownership(txn, caller, msg)
            case RevokeViewingKey():
                return _revoke_viewing_key(txn, caller, msg)
            case _:
                raise InvalidMessage()


def _get_strongbox(store: StateStore, msg: GetStrongbox, caller: str | None) -> StrongboxResponse:
    # The key check runs even for the owner so the two paths cost the same
    key_ok = viewing_key.verify(store, msg.behalf, msg.key)
    is_owner = caller is not None and owner.is_owner(store, caller)
    if not (key_ok or is_owner):
        logger.warning("Viewing key mismatch for %s", msg.behalf)
        raise ViewingKeyMismatch()
    return StrongboxResponse(strongbox=box.read(store).decode("utf-8"))


def query(store: StateStore, msg: QueryMsg, caller: str | None = None) -> StrongboxResponse:
    """
    Answer a read request. Never writes.

    Args:
        store: State handle for this instance.
        msg: A query message variant.
        caller: Optional platform identity; the owner reads without a key.

    Raises:
        ViewingKeyMismatch: Wrong key, or no key, for `behalf`.
    """
    match msg:
        case GetStrongbox():
            return _get_strongbox(store, msg, caller)
        case _:
            raise InvalidMessage()


def instantiate_request(store: StateStore, caller: str, data: dict) -> dict:
    """Decode an instantiate dict, run it, and encode the response."""
    return instantiate(store, caller, InstantiateMsg.from_dict(data)).to_dict()


def execute_request(store: StateStore, caller: str, data: dict) -> dict:
    """Decode a tagged execute dict, run it, and encode the response."""
    return execute(store, caller, parse_execute(data)).to_dict()


def query_request(store: StateStore, data: dict, caller: str | None = None) -> dict:
    """Decode a tagged query dict, run it, and encode the response."""
    return query(store, parse_query(data), caller).to_dict()
