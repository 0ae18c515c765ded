"""Waits for readiness on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import select
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from sponge.file_descriptor import FileDescriptor


class Direction(Enum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """Outcome of one call to EventLoop.wait_next_event."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


def _always() -> bool:
    return True


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callable[[], None]
    interest: Callable[[], bool]
    cancel: Callable[[], None] | None

    def service_count(self) -> int:
        return self.fd.read_count if self.direction is Direction.IN else self.fd.write_count

    def run_cancel(self) -> None:
        if self.cancel is not None:
            self.cancel()


class EventLoop:
    """Holds rules (descriptor, direction, callbacks) and polls them.

    Every callback must read from or write to its descriptor, or its interest
    must turn false afterwards; otherwise a busy wait is reported.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callable[[], None],
        interest: Callable[[], bool] = _always,
        cancel: Callable[[], None] | None = None,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` is true.

        ``cancel``, if given, is called when the rule is dropped.
        """
        self._rules.append(_Rule(fd.duplicate(), direction, callback, interest, cancel))

    def _prune(self) -> None:
        kept: list[_Rule] = []
        for rule in self._rules:
            if (rule.direction is Direction.IN and rule.fd.eof) or rule.fd.closed:
                rule.run_cancel()
            else:
                kept.append(rule)
        self._rules = kept

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once and run the callbacks of ready rules.

        Returns EXIT when no rule is left to poll (or poll was interrupted),
        TIMEOUT when nothing became ready, and SUCCESS otherwise.
        """
        self._prune()
        polled = list(self._rules)
        wanted = [rule.direction.value if rule.interest() else 0 for rule in polled]
        if not any(wanted):
            return Result.EXIT

        registrations: dict[int, int] = {}
        for rule, events in zip(polled, wanted):
            fd = rule.fd.fileno()
            registrations[fd] = registrations.get(fd, 0) | events
        poller = select.poll()
        for fd, events in registrations.items():
            poller.register(fd, events)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.EXIT
        if not ready:
            return Result.TIMEOUT
        revents_by_fd = dict(ready)

        for rule, events in zip(polled, wanted):
            revents = revents_by_fd.get(rule.fd.fileno(), 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                # The only condition was a hangup: this descriptor is defunct.
                rule.run_cancel()
                self._rules.remove(rule)
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd and is still interested"
                    )

        return Result.SUCCESS