"""Keypad events and commands."""

from __future__ import annotations

import enum

from r51bus.event import Event, SubSystem, _DataField


class LEDMode(enum.IntEnum):
    OFF = 0
    ON = 1
    BLINK = 2
    ALT_BLINK = 3


class LEDColor(enum.IntEnum):
    WHITE = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    CYAN = 4
    YELLOW = 5
    MAGENTA = 6
    AMBER = 7


class KeypadEvent(enum.IntEnum):
    KEY_STATE = 0x01
    ENCODER_STATE = 0x02
    INDICATOR_CMD = 0x11
    BRIGHTNESS_CMD = 0x12
    BACKLIGHT_CMD = 0x13


class KeyState(Event):
    """Sent when a key is pressed or released."""

    keypad = _DataField(0)
    key = _DataField(1)
    pressed = _DataField.boolean(2)

    def __init__(self, keypad: int = 0x00, key: int = 0x00, pressed: bool = False) -> None:
        super().__init__(
            SubSystem.KEYPAD, KeypadEvent.KEY_STATE, (keypad, key, 1 if pressed else 0)
        )


class EncoderState(Event):
    """Sent when a rotary encoder is turned; positive delta is clockwise."""

    keypad = _DataField(0)
    encoder = _DataField(1)
    delta = _DataField.signed(2)

    def __init__(self, keypad: int = 0x00, encoder: int = 0x00, delta: int = 0) -> None:
        super().__init__(SubSystem.KEYPAD, KeypadEvent.ENCODER_STATE, (keypad, encoder, 0))
        self.delta = delta


class IndicatorCommand(Event):
    """Command to change the indicator LED of a key."""

    keypad = _DataField(0)
    led = _DataField(1)
    mode = _DataField.of_enum(2, LEDMode)
    color = _DataField.of_enum(3, LEDColor)
    alt_color = _DataField.of_enum(4, LEDColor)

    def __init__(self, keypad: int = 0xFF) -> None:
        super().__init__(
            SubSystem.KEYPAD, KeypadEvent.INDICATOR_CMD, (keypad, 0xFF, 0x00, 0x00, 0x00)
        )


class BrightnessCommand(Event):
    """Command to change the brightness of a keypad's indicator LEDs."""

    keypad = _DataField(0)
    brightness = _DataField(1)

    def __init__(self, keypad: int = 0xFF) -> None:
        super().__init__(SubSystem.KEYPAD, KeypadEvent.BRIGHTNESS_CMD, (keypad, 0x00))


class BacklightCommand(Event):
    """Command to change the colour and brightness of a keypad backlight."""

    keypad = _DataField(0)
    brightness = _DataField(1)
    color = _DataField.of_enum(2, LEDColor)

    def __init__(self, keypad: int = 0xFF) -> None:
        super().__init__(SubSystem.KEYPAD, KeypadEvent.BACKLIGHT_CMD, (keypad, 0x00))