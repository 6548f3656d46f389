"""In-process domain event bus.

Handlers are registered per event name and invoked one after another in
registration order. Every invocation yields a ``HandlerResult`` so the
caller can see which handlers failed; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from finance_core.exceptions import EventDispatchError
from finance_core.logging import event_context
from finance_core.models.base import DomainEvent

logger = logging.getLogger(__name__)


class EventHandler(Protocol):
    async def handle(self, event: DomainEvent) -> None: ...


class ErrorPolicy(str, Enum):
    """What the bus does after a handler raises."""

    CONTINUE = "continue"  # run the remaining handlers
    ABORT = "abort"  # stop at the first failure


@dataclass(frozen=True)
class HandlerResult:
    handler: str
    ok: bool
    error: Exception | None = None


@dataclass
class DispatchResult:
    """Outcome of dispatching one event."""

    event: DomainEvent
    results: list[HandlerResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failures(self) -> list[HandlerResult]:
        return [r for r in self.results if not r.ok]

    def raise_for_failures(self) -> None:
        """Raise ``EventDispatchError`` if any handler failed."""
        failures = self.failures
        if not failures:
            return
        names = ", ".join(f.handler for f in failures)
        raise EventDispatchError(
            f"{len(failures)} handler(s) failed for {self.event.event_name}: {names}",
            result=self,
        ) from failures[0].error


class EventBus:
    """Maps event names to ordered handler lists.

    Registration does not de-duplicate: registering the same handler twice
    runs it twice.

    Parameters
    ----------
    error_policy : ErrorPolicy | str
        Default policy applied by :meth:`dispatch`.
    """

    def __init__(self, error_policy: ErrorPolicy | str = ErrorPolicy.CONTINUE) -> None:
        self.error_policy = ErrorPolicy(error_policy)
        self._handlers: dict[str, list[EventHandler]] = {}

    def register(self, event_name: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug("Registered %s for %s", _handler_name(handler), event_name)

    def unregister(self, event_name: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_name: str) -> list[EventHandler]:
        return list(self._handlers.get(event_name, []))

    async def dispatch(
        self,
        event: DomainEvent,
        policy: ErrorPolicy | str | None = None,
    ) -> DispatchResult:
        """Run every handler registered for ``event.event_name``.

        Parameters
        ----------
        event : DomainEvent
            Event to deliver.
        policy : ErrorPolicy | str | None
            Overrides the bus default for this dispatch.

        Returns
        -------
        DispatchResult
            One ``HandlerResult`` per handler that ran. With ``ABORT``,
            handlers after the first failure are not run and
            ``aborted`` is set.
        """
        active_policy = ErrorPolicy(policy) if policy is not None else self.error_policy
        dispatch = DispatchResult(event=event)

        handlers = self.handlers_for(event.event_name)
        if not handlers:
            logger.debug("No handlers for %s", event.event_name)
            return dispatch

        for handler in handlers:
            name = _handler_name(handler)
            try:
                await handler.handle(event)
            except Exception as exc:
                logger.exception(
                    "Handler %s failed for %s",
                    name,
                    event.event_name,
                    extra=event_context(event, handler=name),
                )
                dispatch.results.append(HandlerResult(handler=name, ok=False, error=exc))
                if active_policy is ErrorPolicy.ABORT:
                    dispatch.aborted = True
                    break
            else:
                dispatch.results.append(HandlerResult(handler=name, ok=True))

        logger.debug(
            "Dispatched %s: handlers=%d, failed=%d",
            event.event_name,
            len(dispatch.results),
            len(dispatch.failures),
        )
        return dispatch


def _handler_name(handler: object) -> str:
    return type(handler).__name__
