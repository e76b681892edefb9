import pytest

from r51bus.event import SubSystem
from r51bus.power import (
    InputState,
    PowerCmd,
    PowerCommand,
    PowerEvent,
    PowerMode,
    PowerState,
)


def test_power_state_layout():
    state = PowerState(1, 5)
    assert state.subsystem == SubSystem.POWER
    assert state.id == PowerEvent.POWER_STATE
    assert state.pdm == 1
    assert state.pin == 5
    assert list(state.data[2:]) == [0xFF] * 4


def test_power_state_defaults():
    state = PowerState()
    assert state.pdm == 0xFF
    assert state.pin == 0xFF
    assert state.mode == 0xFF


def test_power_state_mode_round_trip():
    state = PowerState(1, 2)
    assert state.update(mode=PowerMode.PWM, duty_cycle=0x80) is True
    assert state.mode == PowerMode.PWM
    assert state.duty_cycle == 0x80
    assert state.update(mode=PowerMode.PWM) is False


def test_input_state():
    state = InputState(2, 3)
    assert state.id == PowerEvent.INPUT_STATE
    assert state.state is True
    state.state = False
    assert state.data[2] == 0
    assert state.state is False


def test_power_command():
    cmd = PowerCommand(4, 10)
    assert cmd.id == PowerEvent.POWER_CMD
    cmd.cmd = PowerCmd.TOGGLE
    assert cmd.data[2] == PowerCmd.TOGGLE
    assert cmd.cmd == PowerCmd.TOGGLE


def test_power_command_equality():
    left = PowerCommand(4, 10)
    right = PowerCommand(4, 10)
    left.cmd = PowerCmd.ON
    right.cmd = PowerCmd.ON
    assert left == right
    right.cmd = PowerCmd.OFF
    assert left != right


def test_power_command_rejects_bad_pin():
    with pytest.raises(ValueError):
        PowerCommand(1, 300)


def test_power_state_str_matches_data():
    state = PowerState(1, 2)
    state.mode = PowerMode.ON
    assert str(state) == "30:01#01:02:01:FF:FF:FF"