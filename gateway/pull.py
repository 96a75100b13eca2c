"""
Pull sources over one-shot node operations.

A source is a callable ``source(end, cb)``:

- ``end is True``: the consumer is done. Return without calling back.
- any other truthy ``end``: the consumer aborts. Call back with ``end`` as the error.
- falsy ``end``: read. Call back with ``cb(None, value)`` or ``cb(err, None)``.

Only one adapter shape (``one_shot``) and one consumption pattern
(``take_one`` / ``first``) are provided.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Callback = Callable[..., None]
Source = Callable[[Any, Callback], None]


class SourceEnded(Exception):
    """The source ended before producing a value."""


class SourceError(Exception):
    """A source reported an error value that is not an exception."""

    def __init__(self, error: Any):
        super().__init__(f"source error: {error!r}")
        self.error = error


class State(enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    VALUE = "value"
    ERROR = "error"
    ENDED = "ended"


SETTLED = (State.VALUE, State.ERROR, State.ENDED)


class OneShotSource:
    """
    Pull source that runs ``op(callback)`` on its first read and never again.

    The outcome of the operation is recorded as an explicit state so that
    late or duplicate callbacks from ``op`` and reads after settling cannot
    produce a second value.
    """

    def __init__(self, op: Callable[[Callback], None]):
        self._op = op
        self.state = State.PENDING
        self.outcome: Any = None

    def __call__(self, end: Any, cb: Callback) -> None:
        if end is True:
            if self.state not in SETTLED:
                self.state = State.ENDED
            return
        if end:
            if self.state not in SETTLED:
                self.state = State.ENDED
            cb(end, None)
            return

        if self.state is State.RUNNING:
            raise RuntimeError("read while a previous read is still pending")
        if self.state in SETTLED:
            cb(True, None)
            return

        self.state = State.RUNNING
        try:
            self._op(self._complete(cb))
        except Exception as exc:
            self._complete(cb)(exc)

    def _complete(self, cb: Callback) -> Callback:
        def done(err: Any = None, value: Any = None) -> None:
            if self.state is not State.RUNNING:
                logger.debug("Dropping callback from one-shot operation in state=%s", self.state.value)
                return
            if err:
                self.state = State.ERROR
                self.outcome = err
                cb(err, None)
            else:
                self.state = State.VALUE
                self.outcome = value
                cb(None, value)

        return done


def one_shot(op: Callable[[Callback], None]) -> OneShotSource:
    return OneShotSource(op)


def create_invite(node: Any, n: int) -> OneShotSource:
    """Source yielding the invitation produced by ``node.create_invitation(n, cb)``."""
    if int(n) < 1:
        raise ValueError("n must be >= 1")
    return one_shot(lambda cb: node.create_invitation(int(n), cb))


def _ignore(*_args: Any) -> None:
    pass


def take_one(
    source: Source,
    on_value: Callable[[Any], None],
    on_done: Callable[[Any], None],
) -> None:
    """
    Read one value from ``source`` and then end it.

    On a value the source is ended with ``end=True`` before ``on_value`` runs,
    then ``on_done(None)`` is called. On an error ``on_done(err)`` is called
    and the source is not read again. The source is read at most twice.
    """
    finished = False

    def on_read(end: Any, data: Any = None) -> None:
        nonlocal finished
        if finished:
            return
        finished = True
        if end is True:
            on_done(None)
            return
        if end:
            on_done(end)
            return
        source(True, _ignore)
        on_value(data)
        on_done(None)

    source(None, on_read)


def as_exception(err: Any) -> BaseException:
    if isinstance(err, BaseException):
        return err
    return SourceError(err)


def _settle(future: asyncio.Future, value: Any = None, exc: Optional[BaseException] = None) -> None:
    # The waiter may be gone already (client disconnected)
    if future.done():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(value)


async def first(source: Source) -> Any:
    """
    Await the single value ``take_one`` reads from ``source``.

    Callbacks may arrive on any thread; they are handed to the running loop.
    Raises the source's error (wrapped in ``SourceError`` when it is not an
    exception) or ``SourceEnded`` when the source had nothing to give.
    """
    loop = asyncio.get_running_loop()
    future = loop.create_future()
    received = False

    def on_value(value: Any) -> None:
        nonlocal received
        received = True
        loop.call_soon_threadsafe(_settle, future, value)

    def on_done(err: Any) -> None:
        if err:
            loop.call_soon_threadsafe(_settle, future, None, as_exception(err))
        elif not received:
            loop.call_soon_threadsafe(_settle, future, None, SourceEnded())

    take_one(source, on_value, on_done)
    return await future
