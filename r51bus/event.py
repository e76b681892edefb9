"""Bus events, event properties and the scratch buffer."""

from __future__ import annotations

import enum
from typing import Any, Callable, Iterable, Optional

DATA_SIZE = 6
SCRATCH_CAPACITY = 256


class SubSystem(enum.IntEnum):
    """Identifies the subsystem an event belongs to."""

    CONTROLLER = 0x00
    ECM = 0x14
    IPDM = 0x16
    BCM = 0x18
    CLIMATE = 0x1A
    SETTINGS = 0x1B
    BLUETOOTH = 0x20
    AUDIO = 0x21
    SCREEN = 0x22
    POWER = 0x30
    KEYPAD = 0x31


class ControllerEvent(enum.IntEnum):
    """Events owned by the CONTROLLER subsystem."""

    REQUEST_CMD = 0x10


def _u8(value: Any) -> int:
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"byte value out of range: {value}")
    return value


def _decode_i8(raw: int) -> int:
    return raw - 0x100 if raw >= 0x80 else raw


def _encode_i8(value: Any) -> int:
    value = int(value)
    if not -0x80 <= value <= 0x7F:
        raise ValueError(f"signed byte value out of range: {value}")
    return value & 0xFF


def _enum_decoder(cls: type[enum.IntEnum]) -> Callable[[int], Any]:
    def decode(raw: int) -> Any:
        try:
            return cls(raw)
        except ValueError:
            return raw

    return decode


class _DataField:
    """Descriptor exposing one byte of an event's data as a typed value.

    ``decode`` turns the stored byte into the exposed value (the raw byte when
    None); ``coerce`` normalises an assigned value before ``encode`` stores it.
    """

    def __init__(
        self,
        index: int,
        decode: Optional[Callable[[int], Any]] = None,
        encode: Callable[[Any], int] = _u8,
        coerce: Optional[Callable[[Any], Any]] = None,
    ) -> None:
        self.index = index
        self.decode = decode
        self.encode = encode
        self.coerce = coerce

    @classmethod
    def boolean(cls, index: int) -> "_DataField":
        return cls(index, decode=bool, coerce=bool)

    @classmethod
    def signed(cls, index: int) -> "_DataField":
        return cls(index, _decode_i8, _encode_i8)

    @classmethod
    def of_enum(cls, index: int, enum_cls: type[enum.IntEnum]) -> "_DataField":
        return cls(index, _enum_decoder(enum_cls), _u8)

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, obj: Optional["Event"], owner: type) -> Any:
        if obj is None:
            return self
        raw = obj.data[self.index]
        return raw if self.decode is None else self.decode(raw)

    def __set__(self, obj: "Event", value: Any) -> None:
        if self.coerce is not None:
            value = self.coerce(value)
        obj.data[self.index] = self.encode(value)


class Scratch:
    """Preallocated byte buffer for payloads that do not fit in an event."""

    capacity = SCRATCH_CAPACITY

    def __init__(self) -> None:
        self.bytes = bytearray(SCRATCH_CAPACITY)
        self.size = 0

    @property
    def data(self) -> bytes:
        """The bytes currently occupying the buffer."""
        return bytes(self.bytes[: self.size])

    def clear(self) -> None:
        """Empty the buffer."""
        self.size = 0
        self.bytes[0] = 0


class Event:
    """A bus event: subsystem, id and six data bytes padded with 0xFF."""

    def __init__(
        self,
        subsystem: int = 0,
        id: int = 0,
        data: Iterable[int] = (),
        scratch: Optional[Scratch] = None,
    ) -> None:
        payload = [_u8(b) for b in data]
        if len(payload) > DATA_SIZE:
            raise ValueError(f"event data exceeds {DATA_SIZE} bytes")
        self.subsystem = _u8(subsystem)
        self.id = _u8(id)
        self.data = bytearray(payload + [0xFF] * (DATA_SIZE - len(payload)))
        self.scratch = scratch

    def update(self, **kwargs: Any) -> bool:
        """Set named properties; return True if any value changed."""
        changed = False
        for name, value in kwargs.items():
            if not isinstance(getattr(type(self), name, None), _DataField):
                raise AttributeError(f"{type(self).__name__} has no property {name!r}")
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed = True
        return changed

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return (
            self.subsystem == other.subsystem
            and self.id == other.id
            and self.data == other.data
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        body = ":".join(f"{b:02X}" for b in self.data)
        return f"{self.subsystem:02X}:{self.id:02X}#{body}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self})"


class RequestCommand(Event):
    """CONTROLLER:REQUEST_CMD; 0xFF in either field matches everything."""

    request_subsystem = _DataField.of_enum(0, SubSystem)
    request_id = _DataField(1)

    def __init__(self, request_subsystem: int = 0xFF, request_id: int = 0xFF) -> None:
        super().__init__(
            SubSystem.CONTROLLER,
            ControllerEvent.REQUEST_CMD,
            (request_subsystem, request_id),
        )

    @staticmethod
    def match(event: Event, subsystem: int, id: int) -> bool:
        """Return True if event is a request for the given subsystem and id."""
        if (
            event.subsystem != SubSystem.CONTROLLER
            or event.id != ControllerEvent.REQUEST_CMD
        ):
            return False
        return event.data[0] in (0xFF, int(subsystem)) and event.data[1] in (
            0xFF,
            int(id),
        )