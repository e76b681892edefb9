import pytest

from r51bus.frames import (
    NULL_ADDRESS,
    CAN20Frame,
    J1939Claim,
    J1939Message,
    name_arbitrary_address,
)


def test_claim_defaults_to_null_address():
    claim = J1939Claim()
    assert claim.address == NULL_ADDRESS
    assert claim.name == 0


def test_claim_equality():
    assert J1939Claim(0x1C, 42) == J1939Claim(0x1C, 42)
    assert not J1939Claim(0x1C, 42) == J1939Claim(0x1D, 42)
    assert not J1939Claim(0x1C, 42) == J1939Claim(0x1C, 43)


def test_claim_str_format():
    assert str(J1939Claim(0x1C, 0x0102030405060708)) == "1C:0102030405060708"


def test_claim_rejects_bad_address():
    with pytest.raises(ValueError):
        J1939Claim(0x100, 0)


def test_name_arbitrary_address_bit():
    assert name_arbitrary_address(1 << 63) is True
    assert name_arbitrary_address((1 << 63) - 1) is False


def test_can_frame_resize_pads_and_truncates():
    frame = CAN20Frame(0x100, [1, 2])
    frame.resize(4)
    assert bytes(frame.data) == bytes([1, 2, 0, 0])
    frame.resize(1)
    assert bytes(frame.data) == bytes([1])
    assert frame.size == 1


def test_can_frame_limits():
    with pytest.raises(ValueError):
        CAN20Frame(0x100, range(9))
    with pytest.raises(ValueError):
        CAN20Frame(0x800)
    with pytest.raises(ValueError):
        CAN20Frame(0x100).resize(9)


def test_can_frame_equality():
    assert CAN20Frame(0x5, [1, 2]) == CAN20Frame(0x5, [1, 2])
    assert not CAN20Frame(0x5, [1, 2]) == CAN20Frame(0x5, [1, 3])


def test_j1939_name_round_trip():
    msg = J1939Message(0xEE00, 0x1C)
    msg.name = 0x8123456789ABCDEF
    assert msg.size == 8
    assert msg.name == 0x8123456789ABCDEF
    assert msg.data[0] == 0xEF


def test_j1939_address_claim_id():
    msg = J1939Message(0xEE00, 0x1C, 0xFF, 6)
    assert msg.id == 0x18EEFF1C


def test_j1939_pdu1_destination():
    msg = J1939Message(0xEF00, 0x10)
    msg.dest_address = 0x20
    assert msg.pgn == 0xEF00
    assert msg.dest_address == 0x20
    assert msg.pdu_specific == 0x20
    assert msg.pdu_format == 0xEF
    assert not msg.broadcast


def test_j1939_pdu2_is_broadcast():
    msg = J1939Message(0xFF00, 0x10, 0x20)
    assert msg.dest_address == 0xFF
    assert msg.broadcast
    assert msg.pgn == 0xFF00


def test_j1939_resize_and_equality():
    msg = J1939Message(0xFF00, 0x10)
    msg.resize(8)
    other = J1939Message(0xFF00, 0x10, data=bytes(8))
    assert msg == other
    other.data[0] = 1
    assert not msg == other


def test_j1939_rejects_bad_priority():
    with pytest.raises(ValueError):
        J1939Message(0xFF00, 0x10, priority=8)