"""CAN frames, J1939 messages and J1939 address claims."""

from __future__ import annotations

from typing import Iterable

NULL_ADDRESS = 0xFE
BROADCAST_ADDRESS = 0xFF
CAN20_MAX_DATA = 8
J1939_NAME_SIZE = 8


class CANError(Exception):
    """Raised by a connection when a frame cannot be read or written."""


class FifoError(CANError):
    """No frame is available to read, or the transmit queue is full."""


def _hex_data(data: bytes) -> str:
    return ":".join(f"{b:02X}" for b in data)


def _bytes(data: Iterable[int]) -> bytearray:
    try:
        return bytearray(data)
    except ValueError as exc:
        raise ValueError(f"invalid frame data: {exc}") from None


def name_arbitrary_address(name: int) -> bool:
    """Return True if the J1939 NAME allows negotiating an arbitrary address."""
    return bool((name >> 63) & 1)


class J1939Claim:
    """An address claim made by this device; NULL_ADDRESS if the claim failed."""

    def __init__(self, address: int = NULL_ADDRESS, name: int = 0) -> None:
        if not 0 <= address <= 0xFF:
            raise ValueError(f"address out of range: {address}")
        if not 0 <= name < 1 << 64:
            raise ValueError(f"name out of range: {name}")
        self.address = address
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, J1939Claim):
            return NotImplemented
        return self.address == other.address and self.name == other.name

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"{self.address:X}:{self.name:016X}"

    def __repr__(self) -> str:
        return f"J1939Claim(address=0x{self.address:02X}, name=0x{self.name:016X})"


class CAN20Frame:
    """A CAN 2.0 frame with a standard or extended id and up to 8 data bytes."""

    def __init__(self, id: int = 0, data: Iterable[int] = (), ext: bool = False) -> None:
        limit = 0x1FFFFFFF if ext else 0x7FF
        if not 0 <= id <= limit:
            raise ValueError(f"frame id out of range: 0x{id:X}")
        payload = _bytes(data)
        if len(payload) > CAN20_MAX_DATA:
            raise ValueError(f"frame data exceeds {CAN20_MAX_DATA} bytes")
        self.id = id
        self.ext = ext
        self.data = payload

    @property
    def size(self) -> int:
        """Number of data bytes in the frame."""
        return len(self.data)

    def resize(self, size: int) -> None:
        """Truncate the data or pad it with zero bytes to the given size."""
        if not 0 <= size <= CAN20_MAX_DATA:
            raise ValueError(f"frame size out of range: {size}")
        if size < len(self.data):
            del self.data[size:]
        else:
            self.data.extend(bytes(size - len(self.data)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CAN20Frame):
            return NotImplemented
        return self.id == other.id and self.ext == other.ext and self.data == other.data

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        width = 8 if self.ext else 3
        return f"{self.id:0{width}X}#{_hex_data(self.data)}"

    def __repr__(self) -> str:
        return f"CAN20Frame({self})"


class J1939Message:
    """A J1939 message: priority, PGN, source and destination address, data."""

    def __init__(
        self,
        pgn: int = 0,
        source_address: int = NULL_ADDRESS,
        dest_address: int = BROADCAST_ADDRESS,
        priority: int = 6,
        data: Iterable[int] = (),
    ) -> None:
        self.priority = priority
        self.source_address = source_address
        self.dest_address = dest_address
        self.pgn = pgn
        self.data = _bytes(data)

    @property
    def priority(self) -> int:
        return self._priority

    @priority.setter
    def priority(self, value: int) -> None:
        if not 0 <= value <= 7:
            raise ValueError(f"priority out of range: {value}")
        self._priority = value

    @property
    def source_address(self) -> int:
        return self._source

    @source_address.setter
    def source_address(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"source address out of range: {value}")
        self._source = value

    @property
    def pgn(self) -> int:
        """The parameter group number; its low byte is zero for PDU1 formats."""
        return self._pgn

    @pgn.setter
    def pgn(self, value: int) -> None:
        if not 0 <= value <= 0x3FFFF:
            raise ValueError(f"pgn out of range: 0x{value:X}")
        if (value >> 8) & 0xFF < 0xF0:
            if value & 0xFF:
                self._dest = value & 0xFF
            value &= 0x3FF00
        self._pgn = value

    @property
    def pdu_format(self) -> int:
        return (self._pgn >> 8) & 0xFF

    @property
    def pdu_specific(self) -> int:
        """Destination address for PDU1 formats, group extension otherwise."""
        if self.pdu_format < 0xF0:
            return self._dest
        return self._pgn & 0xFF

    @property
    def dest_address(self) -> int:
        """Destination address; always broadcast for PDU2 formats."""
        if self.pdu_format < 0xF0:
            return self._dest
        return BROADCAST_ADDRESS

    @dest_address.setter
    def dest_address(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"destination address out of range: {value}")
        self._dest = value

    @property
    def broadcast(self) -> bool:
        return self.dest_address == BROADCAST_ADDRESS

    @property
    def id(self) -> int:
        """The 29-bit extended CAN id carrying this message."""
        pgn = self._pgn | (self._dest if self.pdu_format < 0xF0 else 0)
        return (self._priority << 26) | (pgn << 8) | self._source

    @property
    def size(self) -> int:
        return len(self.data)

    def resize(self, size: int) -> None:
        """Truncate the data or pad it with zero bytes to the given size."""
        if size < 0:
            raise ValueError(f"size out of range: {size}")
        if size < len(self.data):
            del self.data[size:]
        else:
            self.data.extend(bytes(size - len(self.data)))

    @property
    def name(self) -> int:
        """The J1939 NAME carried little-endian in an address claim."""
        return int.from_bytes(bytes(self.data[:J1939_NAME_SIZE]), "little")

    @name.setter
    def name(self, value: int) -> None:
        if not 0 <= value < 1 << 64:
            raise ValueError(f"name out of range: {value}")
        if len(self.data) < J1939_NAME_SIZE:
            self.resize(J1939_NAME_SIZE)
        self.data[:J1939_NAME_SIZE] = value.to_bytes(J1939_NAME_SIZE, "little")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, J1939Message):
            return NotImplemented
        return (
            self.priority == other.priority
            and self.pgn == other.pgn
            and self.source_address == other.source_address
            and self.dest_address == other.dest_address
            and self.data == other.data
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"{self.id:08X}#{_hex_data(self.data)}"

    def __repr__(self) -> str:
        return f"J1939Message({self})"