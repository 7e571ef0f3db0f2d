# hm_ipd/common/events.py
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

Handler = Callable[[Dict[str, Any]], None]

logger = logging.getLogger(__name__)

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("admission.discharged")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def unsubscribe(event_name: str, fn: Handler) -> None:
    handlers = _registry.get(event_name, [])
    if fn in handlers:
        handlers.remove(fn)


def publish(event_name: str, payload: Dict[str, Any]) -> int:
    """
    Publish an event to in-process subscribers.
    Keep payloads ID-based to avoid cross-app imports.

    Subscribers are downstream collaborators (billing, reporting). A failing
    subscriber is logged and skipped; it never propagates to the publisher.
    Returns the number of handlers that failed.
    """
    failures = 0
    for handler in list(_registry.get(event_name, [])):
        try:
            handler(payload)
        except Exception:
            failures += 1
            logger.exception(
                "Event subscriber failed event=%s handler=%s",
                event_name,
                getattr(handler, "__qualname__", repr(handler)),
            )
    return failures
