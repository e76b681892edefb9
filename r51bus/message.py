"""Messages carried on the internal bus and the bus node interface."""

from __future__ import annotations

import copy
import enum
from typing import Callable, Optional, Union

from r51bus.event import Event
from r51bus.frames import CAN20Frame, J1939Claim, J1939Message

Payload = Union[Event, CAN20Frame, J1939Claim, J1939Message]


class MessageType(enum.Enum):
    EMPTY = 0
    EVENT = 1
    CAN_FRAME = 2
    J1939_CLAIM = 3
    J1939_MESSAGE = 4


_TYPES = (
    (Event, MessageType.EVENT),
    (CAN20Frame, MessageType.CAN_FRAME),
    (J1939Claim, MessageType.J1939_CLAIM),
    (J1939Message, MessageType.J1939_MESSAGE),
)


def _type_of(payload: Optional[Payload]) -> MessageType:
    if payload is None:
        return MessageType.EMPTY
    for cls, kind in _TYPES:
        if isinstance(payload, cls):
            return kind
    raise TypeError(f"unsupported message payload: {type(payload).__name__}")


class Message:
    """A bus message referencing its payload; use copy() to keep a snapshot."""

    __slots__ = ("_payload", "_type")

    def __init__(self, payload: Union[Payload, "Message", None] = None) -> None:
        if isinstance(payload, Message):
            payload = payload._payload
        self._type = _type_of(payload)
        self._payload = payload

    @property
    def type(self) -> MessageType:
        return self._type

    @property
    def payload(self) -> Optional[Payload]:
        return self._payload

    def _payload_if(self, kind: MessageType):
        return self._payload if self._type is kind else None

    @property
    def event(self) -> Optional[Event]:
        return self._payload_if(MessageType.EVENT)

    @property
    def can_frame(self) -> Optional[CAN20Frame]:
        return self._payload_if(MessageType.CAN_FRAME)

    @property
    def j1939_claim(self) -> Optional[J1939Claim]:
        return self._payload_if(MessageType.J1939_CLAIM)

    @property
    def j1939_message(self) -> Optional[J1939Message]:
        return self._payload_if(MessageType.J1939_MESSAGE)

    def copy(self) -> "Message":
        """Return a message holding its own copy of the payload."""
        if self._payload is None:
            return Message()
        duplicate = copy.copy(self._payload)
        data = getattr(self._payload, "data", None)
        if isinstance(data, bytearray):
            duplicate.data = bytearray(data)
        return Message(duplicate)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Message):
            return NotImplemented
        if self._type is not other._type:
            return False
        if self._payload is other._payload:
            return True
        if self._payload is None or other._payload is None:
            return False
        return self._payload == other._payload

    __hash__ = None  # type: ignore[assignment]

    def __bool__(self) -> bool:
        return self._type is not MessageType.EMPTY

    def __str__(self) -> str:
        return "" if self._payload is None else str(self._payload)

    def __repr__(self) -> str:
        return f"Message({self._type.name}, {self._payload!r})"


Yield = Callable[[Message], None]


class Node:
    """A bus node. Subclasses override the hooks they need."""

    def init(self, yield_: Yield) -> None:
        """Called once before the bus starts; does nothing by default."""

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Called with every message broadcast on the bus; ignores it by default."""

    def emit(self, yield_: Yield) -> None:
        """Called on each bus cycle to produce messages; emits none by default."""