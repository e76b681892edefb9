# r51bus

`r51bus` is a small library for building an in-vehicle controller out of bus
*nodes*. A node reacts to messages broadcast on an internal bus and may emit
messages of its own. The library has no dependencies outside the standard
library.

## What is in it

- **Events** (`r51bus.event`): `Event` holds a subsystem, an id and six data
  bytes, padded with `0xFF`. `SubSystem` and `ControllerEvent` name the ids.
  `RequestCommand` asks a controller to broadcast its state again. Its static
  `match(event, subsystem, id)` tells whether an event is such a request, with
  `0xFF` in either field matching anything. `Event.update(**kwargs)` sets named
  properties and returns `True` if any of them changed. `Scratch` is a
  256-byte buffer for payloads too large for an event.
- **Keypad and power events** (`r51bus.keypad`, `r51bus.power`): `KeyState`,
  `EncoderState`, `IndicatorCommand`, `BrightnessCommand`, `BacklightCommand`,
  `PowerState`, `InputState` and `PowerCommand`. Each exposes its data bytes as
  typed properties, for example `KeyState.pressed` or `EncoderState.delta`,
  which is signed. The enums `LEDMode`, `LEDColor`, `KeypadEvent`,
  `PowerEvent`, `PowerMode` and `PowerCmd` go with them.
- **Frames** (`r51bus.frames`):
  - `CAN20Frame` takes a standard or extended id and up to 8 data bytes.
  - `J1939Message` carries a priority, PGN, source and destination address, a
    `name` property for address claims, and a computed 29-bit `id`.
  - `J1939Claim` is an address claim.
  - `name_arbitrary_address(name)` tests the arbitrary-address bit of a NAME.
  - `CANError` and its subclass `FifoError` are raised by connections.
- **Messages and nodes** (`r51bus.message`): `Message` wraps an event, frame,
  claim or nothing. Its `type` is a `MessageType`, and the `event`,
  `can_frame`, `j1939_claim` and `j1939_message` properties each return the
  payload when it is of their kind and `None` otherwise. `Node` is the base
  class with `init`, `handle` and `emit` hooks, which do nothing by default.
- **CAN and RealDash** (`r51bus.gateways`):
  - `CANGateway` writes CAN frame messages to a connection and emits the
    frames it reads.
  - `RealDashGateway` sends state events (ids below `0x10`) as 8-byte frames
    with a given frame id. It turns matching frames it reads back into events.
    When a `heartbeat_id` is set, it writes a counter frame every
    `heartbeat_ms`, timed by a `Ticker`.
- **J1939** (`r51bus.j1939`):
  - `J1939Adapter` turns events into J1939 messages and back, once it has seen
    a `J1939Claim`. Events are broadcast with PGN `0xFF00`, or sent to an
    address with PGN `0xEF00` when their subsystem is listed in `routes`.
    Subsystems in `ignored` are not read back. Override `route` and
    `read_filter` for other rules.
  - `J1939Gateway` connects the bus to a J1939 connection. With a non-zero
    NAME it claims its preferred address on `init`, answers claims and claim
    requests, and moves to another address when it loses a claim and the
    NAME allows that. It emits a `J1939Claim` whenever its address changes.
    Unless `promiscuous` is set, it drops traffic not meant for it.
- **Cross-thread pipe** (`r51bus.pipe`):
  - `Pipe(left_capacity, right_capacity)` joins two buses through a pair of
    bounded queues. Add `pipe.left` to one bus and `pipe.right` to the other.
    Messages are copied on the way across. Messages that arrive at a full
    queue are dropped and counted in `overruns`. Optional `left_filter` and
    `right_filter` callables drop messages on either side.
  - `SyncWait.wait()` holds the first of two threads until the second arrives.
- **Rotary encoders** (`r51bus.rotary_encoder`):
  - `RotaryEncoder` reads a seesaw encoder's position and push switch and
    drives its neopixel. The indicator colour and brightness show when the
    indicator is on; otherwise the backlight shows.
  - `RotaryEncoderGroup(keypad, encoders)` is a node that emits `KeyState` and
    `EncoderState` events for its encoders. It applies indicator, brightness
    and backlight commands addressed to its keypad id.
  - `neopixel_color` maps an `LEDColor` to `0xRRGGBB`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Nodes and yield

Every node method takes a `yield_` callable. The node calls it once for each
message it puts on the bus:

```python
from r51bus.keypad import KeyState
from r51bus.message import Message

emitted = []
node.handle(Message(KeyState(keypad=1, key=0, pressed=True)), emitted.append)
```

A `Message` holds a reference to its payload, not a copy. Call
`Message.copy()` to keep a snapshot that later changes will not touch.

## Connections and errors

Gateways take a connection object with `read()` and `write(frame)` methods.
`read()` returns a frame, or a `J1939Message` for `J1939Gateway`.

A connection raises `FifoError` when there is nothing to read. Every gateway
treats this as normal and emits nothing. On writes, `CANGateway` and
`J1939Gateway` also ignore `FifoError`, while `RealDashGateway` reports any
`CANError` it gets.

Any other `CANError` goes to the gateway's `on_read_error` or `on_write_error`
hook. By default these count the error in `read_errors` or `write_errors` and
keep it in `last_error`. Override them to log or react instead.

## What it does not do

- It has no CAN, serial or I2C drivers. Connections, the seesaw controller,
  the neopixel and the GPIO pins are objects you supply.
  `r51bus.rotary_encoder` describes the methods it needs in the `Seesaw`,
  `NeoPixel` and `GPIO` protocols.
- It has no loop that runs a bus. Calling each node's `init` once, then
  `emit` and `handle` in turn, and passing yielded messages to every node is
  up to the application.
- It has no command-line tools.