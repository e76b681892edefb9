"""Power distribution module events and commands."""

from __future__ import annotations

import enum

from r51bus.event import Event, SubSystem, _DataField


class PowerEvent(enum.IntEnum):
    POWER_STATE = 0x01
    INPUT_STATE = 0x02
    POWER_CMD = 0x10


class PowerMode(enum.IntEnum):
    OFF = 0
    ON = 1
    PWM = 2
    FAULT = 3


class PowerCmd(enum.IntEnum):
    OFF = 0
    ON = 1
    TOGGLE = 2
    PWM = 3
    RESET = 4


class PowerState(Event):
    """Sent by a PDM with the power state of one of its pins."""

    pdm = _DataField(0)
    pin = _DataField(1)
    mode = _DataField.of_enum(2, PowerMode)
    duty_cycle = _DataField(3)

    def __init__(self, pdm: int = 0xFF, pin: int = 0xFF) -> None:
        super().__init__(SubSystem.POWER, PowerEvent.POWER_STATE, (pdm, pin))


class InputState(Event):
    """Sent by a PDM with the state of an input pin."""

    pdm = _DataField(0)
    pin = _DataField(1)
    state = _DataField.boolean(2)

    def __init__(self, pdm: int = 0xFF, pin: int = 0xFF) -> None:
        super().__init__(SubSystem.POWER, PowerEvent.INPUT_STATE, (pdm, pin))


class PowerCommand(Event):
    """Sent to a PDM to set the output of a pin."""

    pdm = _DataField(0)
    pin = _DataField(1)
    cmd = _DataField.of_enum(2, PowerCmd)
    duty_cycle = _DataField(3)

    def __init__(self, pdm: int = 0xFF, pin: int = 0xFF) -> None:
        super().__init__(SubSystem.POWER, PowerEvent.POWER_CMD, (pdm, pin))