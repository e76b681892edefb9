"""Seesaw rotary encoders with a neopixel, grouped as a keypad bus node."""

from __future__ import annotations

import time
from typing import Iterable, Optional, Protocol

from r51bus.event import Event, SubSystem
from r51bus.keypad import EncoderState, KeypadEvent, KeyState, LEDMode, LEDColor
from r51bus.message import Message, Node, Yield

SWITCH_PIN = 24
MAX_ENCODERS = 8

_COLORS = {
    LEDColor.WHITE: 0xFFFFFF,
    LEDColor.RED: 0xFF0000,
    LEDColor.GREEN: 0x00FF00,
    LEDColor.BLUE: 0x0000FF,
    LEDColor.CYAN: 0x00FFFF,
    LEDColor.YELLOW: 0xFFFF00,
    LEDColor.MAGENTA: 0xFF00FF,
    LEDColor.AMBER: 0xFF4000,
}


class Seesaw(Protocol):
    """The encoder breakout's seesaw controller."""

    def begin(self, addr: int) -> bool: ...

    def enable_pullup_input(self, pin: int) -> None: ...

    def set_gpio_interrupts(self, mask: int, enabled: bool) -> None: ...

    def enable_encoder_interrupt(self) -> None: ...

    def get_encoder_position(self) -> int: ...

    def digital_read(self, pin: int) -> bool: ...


class NeoPixel(Protocol):
    """The single neopixel on the encoder breakout."""

    def begin(self, addr: int) -> bool: ...

    def set_brightness(self, value: int) -> None: ...

    def set_pixel_color(self, index: int, red: int, green: int, blue: int) -> None: ...

    def show(self) -> None: ...


class GPIO(Protocol):
    """Host GPIO pins; read() returns False when the pin is driven low."""

    def setup_input(self, pin: int) -> None: ...

    def read(self, pin: int) -> bool: ...


def neopixel_color(color: int) -> int:
    """Return the 0xRRGGBB value for an LED colour; black if unknown."""
    return _COLORS.get(color, 0x000000)


def _byte(value: int) -> int:
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"brightness out of range: {value}")
    return value


def _int8(value: int) -> int:
    return ((value + 0x80) & 0xFF) - 0x80


class RotaryEncoder:
    """A single seesaw rotary encoder with a push switch and a neopixel.

    If irq_pin is given, gpio must be too; the encoder drives that pin low
    when it has data to read.
    """

    def __init__(
        self,
        seesaw: Seesaw,
        neopixel: NeoPixel,
        irq_pin: Optional[int] = None,
        gpio: Optional[GPIO] = None,
    ) -> None:
        if irq_pin is not None and gpio is None:
            raise ValueError("an IRQ pin needs a GPIO interface to read it")
        self.seesaw = seesaw
        self.neopixel = neopixel
        self.irq_pin = irq_pin
        self.gpio = gpio
        self.color = 0x000000
        self.brightness = 0xFF
        self.backlight_color = 0x000000
        self.backlight_brightness = 0xFF
        self._pos = 0
        self._new_pos = 0
        self._sw = False
        self._new_sw = False

    def begin(self, addr: int) -> None:
        """Connect to the encoder at the given I2C address."""
        if not self.seesaw.begin(addr) or not self.neopixel.begin(addr):
            raise OSError(f"no rotary encoder responding at I2C address 0x{addr:02X}")
        if self.irq_pin is not None:
            self.gpio.setup_input(self.irq_pin)
        self.seesaw.enable_pullup_input(SWITCH_PIN)
        time.sleep(0.01)
        self.seesaw.set_gpio_interrupts(1 << SWITCH_PIN, True)
        self.seesaw.enable_encoder_interrupt()
        self.show_pixel()

    def get_delta(self) -> int:
        """Return the change in position since the last call."""
        self._pos = self._new_pos
        self._new_pos = self.seesaw.get_encoder_position()
        return _int8(self._pos - self._new_pos)

    def get_switch(self) -> int:
        """Return 1 if the switch was pressed, -1 if released, 0 if unchanged."""
        self._sw = self._new_sw
        self._new_sw = not self.seesaw.digital_read(SWITCH_PIN)
        if self._new_sw != self._sw:
            return 1 if self._new_sw else -1
        return 0

    def set_color(self, mode: int, color: int) -> None:
        """Set the indicator colour; takes effect on show_pixel()."""
        self.color = neopixel_color(color) if mode == LEDMode.ON else 0x000000

    def set_brightness(self, value: int) -> None:
        """Set the indicator brightness; takes effect on show_pixel()."""
        self.brightness = _byte(value)

    def set_backlight(self, color: int, brightness: int) -> None:
        """Set the colour shown while the indicator is off."""
        self.backlight_brightness = _byte(brightness)
        self.backlight_color = neopixel_color(color)

    def show_pixel(self) -> None:
        """Update the neopixel with the current colour and brightness."""
        if self.brightness == 0 or self.color == 0x000000:
            self.neopixel.set_brightness(self.backlight_brightness)
            if self.backlight_brightness == 0:
                self._set_pixel_color(0x000000)
            else:
                self._set_pixel_color(self.backlight_color)
        else:
            self.neopixel.set_brightness(self.brightness)
            self._set_pixel_color(self.color)
        self.neopixel.show()

    def _data_ready(self) -> bool:
        return self.irq_pin is None or not self.gpio.read(self.irq_pin)

    def _set_pixel_color(self, color: int) -> None:
        self.neopixel.set_pixel_color(
            0, (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
        )


class RotaryEncoderGroup(Node):
    """A keypad made of rotary encoders; each encoder's knob, switch and LED
    share the encoder's index as id."""

    def __init__(self, keypad: int, encoders: Iterable[RotaryEncoder]) -> None:
        self.keypad = _byte(keypad)
        self.encoders = list(encoders)

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Apply indicator, brightness and backlight commands for this keypad."""
        event = msg.event
        if event is None or event.subsystem != SubSystem.KEYPAD:
            return
        if event.data[0] != self.keypad:
            return
        if event.id == KeypadEvent.INDICATOR_CMD:
            self._handle_indicator(event)
        elif event.id == KeypadEvent.BRIGHTNESS_CMD:
            for encoder in self.encoders:
                encoder.set_brightness(event.data[1])
                encoder.show_pixel()
        elif event.id == KeypadEvent.BACKLIGHT_CMD:
            for encoder in self.encoders:
                encoder.set_backlight(event.data[2], event.data[1])
                encoder.show_pixel()

    def _handle_indicator(self, event: Event) -> None:
        led = event.data[1]
        if led >= len(self.encoders):
            return
        encoder = self.encoders[led]
        encoder.set_color(event.data[2], event.data[3])
        encoder.show_pixel()

    def emit(self, yield_: Yield) -> None:
        """Yield key and encoder events for encoders with new input."""
        for index, encoder in enumerate(self.encoders):
            if not encoder._data_ready():
                continue
            switch = encoder.get_switch()
            delta = encoder.get_delta()
            if switch != 0:
                yield_(Message(KeyState(self.keypad, index, switch == 1)))
            if delta != 0:
                yield_(Message(EncoderState(self.keypad, index, delta)))