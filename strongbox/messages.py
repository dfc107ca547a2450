"""
Messages
The closed set of requests the Gate accepts, and what it answers.

Requests travel as externally tagged dicts, one key naming the variant:

    {"update_strongbox": {"strongbox": "..."}}
    {"create_viewing_key": {"viewer": "...", "entropy": "...", "padding": "..."}}
    {"get_strongbox": {"behalf": "...", "key": "..."}}

Decoding and encoding those dicts is the only transport concern handled
here; moving them over a wire belongs to the host.
"""

from dataclasses import MISSING, asdict, dataclass, fields
from typing import ClassVar, Union

from strongbox.errors import InvalidMessage


@dataclass(frozen=True)
class InstantiateMsg:
    seed: bytes

    @classmethod
    def from_dict(cls, data: dict) -> "InstantiateMsg":
        if not isinstance(data, dict) or set(data) != {"seed"}:
            raise InvalidMessage()
        seed = data["seed"]
        if isinstance(seed, str):
            seed = seed.encode("utf-8")
        if not isinstance(seed, bytes):
            raise InvalidMessage()
        return cls(seed=seed)


@dataclass(frozen=True)
class UpdateStrongbox:
    tag: ClassVar[str] = "update_strongbox"
    strongbox: str


@dataclass(frozen=True)
class CreateViewingKey:
    """`padding` lets callers normalize request sizes. It is ignored."""
    tag: ClassVar[str] = "create_viewing_key"
    viewer: str
    entropy: str
    padding: str | None = None


@dataclass(frozen=True)
class TransferOwnership:
    tag: ClassVar[str] = "transfer_ownership"
    new_owner: str


@dataclass(frozen=True)
class RevokeViewingKey:
    tag: ClassVar[str] = "revoke_viewing_key"
    viewer: str


@dataclass(frozen=True)
class GetStrongbox:
    tag: ClassVar[str] = "get_strongbox"
    behalf: str
    key: str


ExecuteMsg = Union[UpdateStrongbox, CreateViewingKey, TransferOwnership, RevokeViewingKey]
QueryMsg = GetStrongbox

EXECUTE_VARIANTS = {
    cls.tag: cls
    for cls in (UpdateStrongbox, CreateViewingKey, TransferOwnership, RevokeViewingKey)
}
QUERY_VARIANTS = {GetStrongbox.tag: GetStrongbox}


def _decode(data: dict, variants: dict):
    if not isinstance(data, dict) or len(data) != 1:
        raise InvalidMessage()
    (tag, body), = data.items()
    cls = variants.get(tag)
    if cls is None or not isinstance(body, dict):
        raise InvalidMessage()

    known = {f.name: f for f in fields(cls)}
    if set(body) - set(known):
        raise InvalidMessage()
    for name, f in known.items():
        value = body.get(name)
        if value is None:
            # Only fields with a default may be omitted or null
            if f.default is MISSING:
                raise InvalidMessage()
            continue
        if not isinstance(value, str):
            raise InvalidMessage()
    try:
        return cls(**body)
    except TypeError:
        raise InvalidMessage()


def parse_execute(data: dict) -> ExecuteMsg:
    """Decode an execute request dict into its message variant."""
    return _decode(data, EXECUTE_VARIANTS)


def parse_query(data: dict) -> QueryMsg:
    """Decode a query request dict into its message variant."""
    return _decode(data, QUERY_VARIANTS)


def encode(msg: ExecuteMsg | QueryMsg) -> dict:
    """Encode a message variant into its tagged dict form."""
    return {msg.tag: asdict(msg)}


@dataclass
class Response:
    """Result of a successful instantiate or execute."""
    data: dict | None = None

    def to_dict(self) -> dict:
        return {"data": self.data}


@dataclass
class StrongboxResponse:
    strongbox: str

    def to_dict(self) -> dict:
        return {"strongbox": self.strongbox}
