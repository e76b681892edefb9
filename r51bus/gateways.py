"""Bus nodes bridging the internal bus to CAN controllers and RealDash."""

from __future__ import annotations

import time
from typing import Callable, Optional, Protocol

from r51bus.event import DATA_SIZE, Event
from r51bus.frames import CAN20_MAX_DATA, CANError, CAN20Frame, FifoError
from r51bus.message import Message, MessageType, Node, Yield

Clock = Callable[[], int]

_STANDARD_ID_MAX = 0x7FF
_EVENT_COMMAND_MIN = 0x10


def _monotonic_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class Connection(Protocol):
    """A frame connection. read() raises FifoError when nothing is waiting."""

    def read(self):  # pragma: no cover - protocol
        ...

    def write(self, frame) -> None:  # pragma: no cover - protocol
        ...


class Ticker:
    """Becomes active once the interval has passed since the last reset."""

    def __init__(self, interval_ms: int, clock: Optional[Clock] = None) -> None:
        if interval_ms < 0:
            raise ValueError(f"interval must not be negative: {interval_ms}")
        self.interval_ms = interval_ms
        self._clock = clock or _monotonic_ms
        self._last = self._clock()

    def active(self) -> bool:
        """Return True if the interval has elapsed since the last reset."""
        return self._clock() - self._last >= self.interval_ms

    def reset(self) -> None:
        """Restart the interval from now."""
        self._last = self._clock()


class _ErrorCounts:
    """Counts read and write errors and remembers the most recent one."""

    def __init__(self) -> None:
        self.read_errors = 0
        self.write_errors = 0
        self.last_error: Optional[CANError] = None

    def _record_read(self, error: CANError) -> None:
        self.read_errors += 1
        self.last_error = error

    def _record_write(self, error: CANError) -> None:
        self.write_errors += 1
        self.last_error = error


class CANGateway(Node, _ErrorCounts):
    """Reads and writes frames on a CAN 2.0 controller."""

    def __init__(self, connection: Connection) -> None:
        _ErrorCounts.__init__(self)
        self.connection = connection

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Write a CAN frame message to the bus."""
        if msg.type is not MessageType.CAN_FRAME:
            return
        frame = msg.can_frame
        try:
            self.connection.write(frame)
        except FifoError:
            pass
        except CANError as err:
            self.on_write_error(err, frame)

    def emit(self, yield_: Yield) -> None:
        """Read one frame from the bus and broadcast it."""
        try:
            frame = self.connection.read()
        except FifoError:
            return
        except CANError as err:
            self.on_read_error(err)
            return
        yield_(Message(frame))

    def on_read_error(self, error: CANError) -> None:
        """Called when a frame cannot be read; counts the error."""
        self._record_read(error)

    def on_write_error(self, error: CANError, frame: CAN20Frame) -> None:
        """Called when a frame cannot be written; counts the error."""
        self._record_write(error)


def _frame(frame_id: int, data) -> CAN20Frame:
    return CAN20Frame(frame_id, data, ext=frame_id > _STANDARD_ID_MAX)


class RealDashGateway(Node, _ErrorCounts):
    """Exchanges events with RealDash as CAN frames, optionally with a heartbeat."""

    def __init__(
        self,
        connection: Connection,
        frame_id: int,
        heartbeat_id: int = 0,
        heartbeat_ms: int = 500,
        clock: Optional[Clock] = None,
    ) -> None:
        _ErrorCounts.__init__(self)
        self.connection = connection
        self.frame_id = frame_id
        self.heartbeat_id = heartbeat_id
        self._counter = 0
        self._ticker = Ticker(heartbeat_ms, clock)

    def _write(self, frame: CAN20Frame) -> None:
        try:
            self.connection.write(frame)
        except CANError as err:
            self.on_write_error(err, frame)

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Encode a state event and send it to RealDash."""
        event = msg.event
        if event is None or event.id >= _EVENT_COMMAND_MIN:
            return
        self._write(_frame(self.frame_id, [event.subsystem, event.id, *event.data]))

    def emit(self, yield_: Yield) -> None:
        """Send a due heartbeat, then yield an event received from RealDash."""
        if self.heartbeat_id > 0 and self._ticker.active():
            data = [self._counter] + [0] * (CAN20_MAX_DATA - 1)
            self._counter = (self._counter + 1) & 0xFF
            self._ticker.reset()
            self._write(_frame(self.heartbeat_id, data))

        try:
            frame = self.connection.read()
        except FifoError:
            return
        except CANError as err:
            self.on_read_error(err)
            return
        if frame.id != self.frame_id or frame.size < CAN20_MAX_DATA:
            return
        data = frame.data
        yield_(Message(Event(data[0], data[1], data[2 : 2 + DATA_SIZE])))

    def on_read_error(self, error: CANError) -> None:
        """Called when a frame cannot be read; counts the error."""
        self._record_read(error)

    def on_write_error(self, error: CANError, frame: CAN20Frame) -> None:
        """Called when a frame cannot be written; counts the error."""
        self._record_write(error)