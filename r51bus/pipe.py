"""Connect two buses running on separate threads, and synchronise their start."""

from __future__ import annotations

import queue
import threading
from typing import Callable, Optional

from r51bus.message import Message, Node, Yield

MessageFilter = Callable[[Message], bool]


class PipeNode(Node):
    """One end of a Pipe. Use Pipe.left and Pipe.right rather than this directly."""

    def __init__(self, parent: "Pipe", side: int) -> None:
        self._parent = parent
        self._side = side

    @property
    def _read_queue(self) -> "queue.Queue[Message]":
        if self._side <= 0:
            return self._parent._left_queue
        return self._parent._right_queue

    @property
    def _write_queue(self) -> "queue.Queue[Message]":
        if self._side <= 0:
            return self._parent._right_queue
        return self._parent._left_queue

    def _filter(self, msg: Message) -> bool:
        if self._side <= 0:
            return self._parent.filter_left(msg)
        return self._parent.filter_right(msg)

    def handle(self, msg: Message, yield_: Yield) -> None:
        """Copy the message onto the queue read by the other end."""
        if not self._filter(msg):
            return
        try:
            self._write_queue.put_nowait(msg.copy())
        except queue.Full:
            self._parent.on_buffer_overrun(msg)

    def emit(self, yield_: Yield) -> None:
        """Yield the next message sent from the other end, if any."""
        try:
            msg = self._read_queue.get_nowait()
        except queue.Empty:
            return
        yield_(msg)


class Pipe:
    """Two nodes joined by bounded queues, one for each bus.

    Messages handled by the left node are emitted by the right node and the
    other way round. Messages that arrive while a queue is full are dropped
    and reported to on_buffer_overrun(), which counts them in ``overruns``.
    Optional filter callables may be given to drop messages on either side;
    without them every message is passed.
    """

    def __init__(
        self,
        left_capacity: int,
        right_capacity: int,
        left_filter: Optional[MessageFilter] = None,
        right_filter: Optional[MessageFilter] = None,
    ) -> None:
        for capacity in (left_capacity, right_capacity):
            if capacity < 1:
                raise ValueError(f"queue capacity must be positive: {capacity}")
        self._left_queue: "queue.Queue[Message]" = queue.Queue(left_capacity)
        self._right_queue: "queue.Queue[Message]" = queue.Queue(right_capacity)
        self._left_filter = left_filter
        self._right_filter = right_filter
        self._left_node = PipeNode(self, -1)
        self._right_node = PipeNode(self, +1)
        self.overruns = 0

    @property
    def left(self) -> PipeNode:
        """The left node; messages it handles are emitted on the right bus."""
        return self._left_node

    @property
    def right(self) -> PipeNode:
        """The right node; messages it handles are emitted on the left bus."""
        return self._right_node

    def filter_left(self, msg: Message) -> bool:
        """Return False to drop a message handled by the left node."""
        return self._left_filter is None or bool(self._left_filter(msg))

    def filter_right(self, msg: Message) -> bool:
        """Return False to drop a message handled by the right node."""
        return self._right_filter is None or bool(self._right_filter(msg))

    def on_buffer_overrun(self, msg: Message) -> None:
        """Called when a message is dropped because its queue is full."""
        self.overruns += 1


class SyncWait:
    """Holds two threads until both have reached wait().

    The first caller blocks; the second releases it and does not block.
    Later calls return at once.
    """

    def __init__(self) -> None:
        self._tickets = 2
        self._cond = threading.Condition()

    def wait(self) -> None:
        """Block until the other thread has also called wait()."""
        with self._cond:
            if self._tickets <= 0:
                return
            self._tickets -= 1
            self._cond.notify_all()
            self._cond.wait_for(lambda: self._tickets <= 0)