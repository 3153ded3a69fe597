"""
Message Bus

Routes the booking commands to their handlers and fans domain events out to
subscribers such as the audit trail.

Commands have exactly one handler and return its result. Events are
delivered after the originating transaction commits; a failing subscriber
is logged and skipped so a committed booking is never reported as failed.
"""

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Type
import logging
import time

from shared.domain.base import DomainError, DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]


def _name(handler: Handler) -> str:
    return getattr(handler, '__qualname__', repr(handler))


class MessageBus:
    def __init__(self):
        self._commands: Dict[Type, Handler] = {}
        self._subscribers: DefaultDict[Type[DomainEvent], List[Handler]] = defaultdict(list)

    def register_command_handler(self, command_type: Type, handler: Handler):
        existing = self._commands.get(command_type)
        if existing is not None:
            raise ValueError(f"{command_type.__name__} is already handled by {_name(existing)}")
        self._commands[command_type] = handler

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._commands

    def register_event_handler(self, event_type: Type[DomainEvent], handler: Handler):
        """Subscribe ``handler`` to ``event_type``; subscribing twice is a no-op."""
        subscribers = self._subscribers[event_type]
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug(f"{_name(handler)} subscribed to {event_type.__name__}")

    def handle_command(self, command: Any) -> Any:
        """
        Run the handler registered for ``type(command)``

        Rejections (DomainError) are expected outcomes and are re-raised
        as they are; anything else is logged with its traceback first.
        Raises ValueError when nothing handles the command.
        """
        command_name = type(command).__name__
        handler = self._commands.get(type(command))
        if handler is None:
            raise ValueError(f"No handler registered for command {command_name}")

        started = time.monotonic()
        try:
            return handler(command)
        except DomainError as exc:
            logger.info(f"{command_name} rejected: {exc}")
            raise
        except Exception:
            logger.exception(f"{command_name} failed")
            raise
        finally:
            logger.debug(f"{command_name} finished in {(time.monotonic() - started) * 1000:.1f} ms")

    def publish_events(self, events: Iterable[DomainEvent]) -> int:
        """Deliver ``events`` in order and return the number of failed deliveries."""
        failures = 0
        for event in events:
            event_name = type(event).__name__
            subscribers = self._subscribers.get(type(event))
            if not subscribers:
                logger.warning(f"No subscribers for {event_name} {event.event_id}")
                continue

            for handler in subscribers:
                try:
                    handler(event)
                except Exception:
                    failures += 1
                    logger.exception(f"{_name(handler)} failed on {event_name} {event.event_id}")
        return failures


message_bus = MessageBus()
