"""Nodes that connect the internal bus to a J1939 network."""

from __future__ import annotations

from typing import Iterable, Mapping, Optional

from r51bus.event import DATA_SIZE, Event
from r51bus.frames import (
    BROADCAST_ADDRESS,
    NULL_ADDRESS,
    CANError,
    FifoError,
    J1939Claim,
    J1939Message,
    name_arbitrary_address,
)
from r51bus.gateways import Connection
from r51bus.message import Message, MessageType, Node, Yield

EVENT_BROADCAST_PGN = 0xFF00
EVENT_ADDRESSED_PGN = 0xEF00
ADDRESS_CLAIM_PGN = 0xEE00
_REQUEST_PDU_FORMAT = 0xEA
_EVENT_MESSAGE_SIZE = 8


class J1939Adapter(Node):
    """Translates events to and from J1939 messages once an address is claimed.

    ``routes`` maps a subsystem to the destination address of its events;
    unlisted subsystems are broadcast. Events read from J1939 whose subsystem
    is in ``ignored`` are not put on the bus.
    """

    def __init__(
        self,
        routes: Optional[Mapping[int, int]] = None,
        ignored: Iterable[int] = (),
    ) -> None:
        self.source_address = NULL_ADDRESS
        self.routes = {int(k): int(v) for k, v in (routes or {}).items()}
        self.ignored = frozenset(int(s) for s in ignored)

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Track address claims and translate events and J1939 messages."""
        if msg.type is MessageType.J1939_CLAIM:
            self.source_address = msg.j1939_claim.address
        elif msg.type is MessageType.J1939_MESSAGE:
            self._handle_j1939_message(msg.j1939_message, yield_)
        elif msg.type is MessageType.EVENT:
            self._handle_event(msg.event, yield_)

    def route(self, event: Event) -> int:
        """Return the destination address for an event, 0xFF to broadcast,
        or the null address to drop it."""
        return self.routes.get(event.subsystem, BROADCAST_ADDRESS)

    def read_filter(self, event: Event) -> bool:
        """Return True if an event read from J1939 should reach the bus."""
        return event.subsystem not in self.ignored

    def _handle_event(self, event: Event, yield_: Yield) -> None:
        if self.source_address == NULL_ADDRESS:
            return
        dest = self.route(event)
        if dest == NULL_ADDRESS:
            return
        out = J1939Message(EVENT_BROADCAST_PGN, self.source_address)
        if dest != BROADCAST_ADDRESS:
            out.pgn = EVENT_ADDRESSED_PGN
            out.dest_address = dest
        out.data = bytearray([event.subsystem, event.id, *event.data])
        yield_(Message(out))

    def _handle_j1939_message(self, msg: J1939Message, yield_: Yield) -> None:
        if (
            msg.size < _EVENT_MESSAGE_SIZE
            or msg.source_address == self.source_address
            or (
                msg.pgn != EVENT_BROADCAST_PGN
                and (
                    msg.pgn != EVENT_ADDRESSED_PGN
                    or msg.dest_address != self.source_address
                )
            )
        ):
            return
        data = msg.data
        event = Event(data[0], data[1], data[2 : 2 + DATA_SIZE])
        if self.read_filter(event):
            yield_(Message(event))


def _is_address_claim(msg: J1939Message) -> bool:
    return msg.pdu_format == _REQUEST_PDU_FORMAT


def _is_request_address_claim(msg: J1939Message, address: int) -> bool:
    return msg.pdu_format == _REQUEST_PDU_FORMAT and msg.pdu_specific in (
        BROADCAST_ADDRESS,
        address,
    )


class J1939Gateway(Node):
    """Connects the bus to a J1939 network, optionally claiming an address.

    With a non-zero NAME the gateway claims its preferred address on init and
    answers claims and claim requests; with a NAME of zero the address is fixed.
    Unless promiscuous, it drops incoming messages not addressed to it or to
    broadcast, and outgoing messages whose source is not its address.
    """

    def __init__(
        self,
        connection: Connection,
        address: int,
        name: int = 0,
        promiscuous: bool = False,
    ) -> None:
        if not 0 <= address <= 0xFF:
            raise ValueError(f"address out of range: {address}")
        if not 0 <= name < 1 << 64:
            raise ValueError(f"name out of range: {name}")
        self.connection = connection
        self.preferred_address = address
        self._address = address
        self._name = name
        self.promiscuous = promiscuous
        self.read_errors = 0
        self.write_errors = 0
        self.last_error: Optional[CANError] = None

    @property
    def address(self) -> int:
        """The current address of the gateway."""
        return self._address

    @property
    def name(self) -> int:
        """The J1939 NAME of the gateway."""
        return self._name

    def init(self, yield_: Yield) -> None:
        """Send the initial address claim and announce the address."""
        if self._name != 0:
            self._write_claim()
        self._emit_claim(yield_)

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Write outgoing J1939 messages sent from this gateway's address."""
        if msg.type is not MessageType.J1939_MESSAGE:
            return
        out = msg.j1939_message
        if self.promiscuous or (
            out.source_address == self._address and self._address != NULL_ADDRESS
        ):
            self._write(out)

    def emit(self, yield_: Yield) -> None:
        """Read one J1939 message, negotiate claims, and forward it."""
        try:
            msg = self.connection.read()
        except FifoError:
            return
        except CANError as err:
            self.on_read_error(err)
            return

        if self._name != 0:
            if _is_address_claim(msg) and msg.source_address == self._address:
                self._handle_address_claim(msg, yield_)
            elif _is_request_address_claim(msg, self._address):
                self._write_claim()

        if self.promiscuous or msg.dest_address == self._address or msg.broadcast:
            yield_(Message(msg))

    def on_read_error(self, error: CANError) -> None:
        """Called when a J1939 message cannot be read; counts the error."""
        self.read_errors += 1
        self.last_error = error

    def on_write_error(self, error: CANError, msg: J1939Message) -> None:
        """Called when a J1939 message cannot be written; counts the error."""
        self.write_errors += 1
        self.last_error = error

    def _handle_address_claim(self, msg: J1939Message, yield_: Yield) -> None:
        if self._address == NULL_ADDRESS or self._address != msg.source_address:
            return
        if msg.size != _EVENT_MESSAGE_SIZE:
            return
        if self._name <= msg.name:
            self._write_claim()
            return
        if name_arbitrary_address(self._name):
            self._address += 1
            if self._address >= NULL_ADDRESS:
                self._address = 1
            if self._address == self.preferred_address:
                self._address = NULL_ADDRESS
        else:
            self._address = NULL_ADDRESS
        self._write_claim()
        self._emit_claim(yield_)

    def _emit_claim(self, yield_: Yield) -> None:
        yield_(Message(J1939Claim(self._address, self._name)))

    def _write(self, msg: J1939Message) -> None:
        try:
            self.connection.write(msg)
        except FifoError:
            pass
        except CANError as err:
            self.on_write_error(err, msg)

    def _write_claim(self) -> None:
        msg = J1939Message(ADDRESS_CLAIM_PGN, self._address, BROADCAST_ADDRESS, 6)
        msg.name = self._name
        self._write(msg)