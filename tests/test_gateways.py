import pytest

from r51bus.event import Event
from r51bus.frames import CANError, CAN20Frame, FifoError
from r51bus.gateways import CANGateway, RealDashGateway, Ticker
from r51bus.message import Message, MessageType


class FakeConnection:
    def __init__(self, frames=(), read_error=None, write_error=None):
        self.inbox = list(frames)
        self.written = []
        self.read_error = read_error
        self.write_error = write_error

    def read(self):
        if self.read_error is not None:
            raise self.read_error
        if not self.inbox:
            raise FifoError()
        return self.inbox.pop(0)

    def write(self, frame):
        if self.write_error is not None:
            raise self.write_error
        self.written.append(frame)


class RecordingCAN(CANGateway):
    def __init__(self, connection):
        super().__init__(connection)
        self.read_errors = []
        self.write_errors = []

    def on_read_error(self, error):
        self.read_errors.append(error)

    def on_write_error(self, error, frame):
        self.write_errors.append((error, frame))


class RecordingRealDash(RealDashGateway):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.read_errors = []
        self.write_errors = []

    def on_read_error(self, error):
        self.read_errors.append(error)

    def on_write_error(self, error, frame):
        self.write_errors.append((error, frame))


FRAME_ID = 0x5400


def test_ticker_activates_after_interval_and_resets():
    now = [0]
    ticker = Ticker(100, clock=lambda: now[0])
    assert not ticker.active()
    now[0] = 99
    assert not ticker.active()
    now[0] = 100
    assert ticker.active()
    ticker.reset()
    assert not ticker.active()


def test_ticker_rejects_negative_interval():
    with pytest.raises(ValueError):
        Ticker(-1)


def test_can_gateway_writes_frames():
    conn = FakeConnection()
    gw = CANGateway(conn)
    frame = CAN20Frame(0x123, [1, 2, 3])
    gw.handle(Message(frame), lambda m: None)
    assert conn.written == [frame]


def test_can_gateway_ignores_non_frames():
    conn = FakeConnection()
    gw = CANGateway(conn)
    gw.handle(Message(Event(0x31, 0x01)), lambda m: None)
    assert conn.written == []


def test_can_gateway_reports_write_errors_except_fifo():
    err = CANError("bus off")
    conn = FakeConnection(write_error=err)
    gw = RecordingCAN(conn)
    frame = CAN20Frame(0x10, [9])
    gw.handle(Message(frame), lambda m: None)
    assert gw.write_errors == [(err, frame)]

    conn.write_error = FifoError()
    gw.handle(Message(frame), lambda m: None)
    assert len(gw.write_errors) == 1


def test_can_gateway_emits_read_frames():
    frame = CAN20Frame(0x321, [4, 5])
    gw = CANGateway(FakeConnection([frame]))
    out = []
    gw.emit(out.append)
    assert [m.can_frame for m in out] == [frame]
    gw.emit(out.append)
    assert len(out) == 1


def test_can_gateway_reports_read_errors():
    err = CANError("read failed")
    gw = RecordingCAN(FakeConnection(read_error=err))
    out = []
    gw.emit(out.append)
    assert out == []
    assert gw.read_errors == [err]


def test_realdash_encodes_state_events():
    conn = FakeConnection()
    gw = RealDashGateway(conn, FRAME_ID)
    event = Event(0x1A, 0x01, [1, 2, 3, 4, 5, 6])
    gw.handle(Message(event), lambda m: None)
    assert len(conn.written) == 1
    frame = conn.written[0]
    assert frame.id == FRAME_ID
    assert bytes(frame.data) == bytes([event.subsystem, event.id, *event.data])


def test_realdash_ignores_commands_and_non_events():
    conn = FakeConnection()
    gw = RealDashGateway(conn, FRAME_ID)
    gw.handle(Message(Event(0x1A, 0x10)), lambda m: None)
    gw.handle(Message(CAN20Frame(0x1, [1])), lambda m: None)
    assert conn.written == []


def test_realdash_reports_all_write_errors():
    conn = FakeConnection(write_error=FifoError())
    gw = RecordingRealDash(conn, FRAME_ID)
    gw.handle(Message(Event(0x1A, 0x01)), lambda m: None)
    assert len(gw.write_errors) == 1
    assert isinstance(gw.write_errors[0][0], FifoError)


def test_realdash_round_trip_event():
    sender_conn = FakeConnection()
    sender = RealDashGateway(sender_conn, FRAME_ID)
    event = Event(0x21, 0x02, [7, 8, 9])
    sender.handle(Message(event), lambda m: None)

    receiver = RealDashGateway(FakeConnection(sender_conn.written), FRAME_ID)
    out = []
    receiver.emit(out.append)
    assert len(out) == 1
    assert out[0].type is MessageType.EVENT
    assert out[0].event == event


def test_realdash_ignores_foreign_and_short_frames():
    frames = [
        CAN20Frame(FRAME_ID + 1, [1] * 8, ext=True),
        CAN20Frame(FRAME_ID, [1] * 7, ext=True),
    ]
    gw = RealDashGateway(FakeConnection(frames), FRAME_ID)
    out = []
    gw.emit(out.append)
    gw.emit(out.append)
    gw.emit(out.append)
    assert out == []


def test_realdash_reports_read_errors():
    err = CANError("read failed")
    gw = RecordingRealDash(FakeConnection(read_error=err), FRAME_ID)
    out = []
    gw.emit(out.append)
    assert out == []
    assert gw.read_errors == [err]


def test_realdash_heartbeat_counts_up():
    now = [0]
    conn = FakeConnection()
    hb_id = FRAME_ID + 1
    gw = RealDashGateway(conn, FRAME_ID, heartbeat_id=hb_id, heartbeat_ms=500,
                         clock=lambda: now[0])
    gw.emit(lambda m: None)
    assert conn.written == []

    now[0] = 500
    gw.emit(lambda m: None)
    gw.emit(lambda m: None)
    assert len(conn.written) == 1
    assert conn.written[0].id == hb_id
    assert bytes(conn.written[0].data) == bytes(8)

    now[0] = 1000
    gw.emit(lambda m: None)
    assert [f.data[0] for f in conn.written] == [0, 1]
    assert all(bytes(f.data[1:]) == bytes(7) for f in conn.written)


def test_realdash_without_heartbeat_never_writes_on_emit():
    now = [0]
    conn = FakeConnection()
    gw = RealDashGateway(conn, FRAME_ID, clock=lambda: now[0])
    now[0] = 10_000
    gw.emit(lambda m: None)
    assert conn.written == []