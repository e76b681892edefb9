"""Bus events, messages, CAN/J1939 gateways, a cross-thread pipe and rotary encoder nodes."""

__version__ = "0.1.0"