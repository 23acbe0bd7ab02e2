"""Synchronous publish/subscribe hub with optional hierarchical bubbling.

Usage:
    hub = EventHub().with_event_bubbling()

    def on_saved(path):
        print(f"Saved: {path}")

    hub.subscribe("file", on_saved)

    # Reaches "file:saved" subscribers first, then "file" subscribers.
    hub.publish("file:saved", "/tmp/notes.txt")

    # The context (scope, or the hub when no scope was given) comes first.
    def index_file(index, path):
        index.add(path)

    hub.subscribe("file:saved", index_file, scope=search_index, with_context=True)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
import types
from typing import Any

from pydantic import ValidationError

from .config import DEFAULT_SEPARATOR, HubConfig, load_config
from .exceptions import ConfigValidationError, InvalidArgumentError

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Any]

# Capability surface installed by EventHub.mixin().
HUB_METHODS: tuple[str, ...] = (
    "subscribe",
    "on",
    "unsubscribe",
    "un",
    "off",
    "publish",
    "fire",
    "emit",
    "has_listeners",
    "with_event_bubbling",
    "listen_to",
    "listen_to_once",
    "stop_listening",
)


@dataclass(frozen=True, eq=False)
class Subscription:
    """A handler registered under one event name.

    Records compare by identity so that two subscriptions of the same handler
    are still removed independently.
    """

    handler: Handler
    scope: Any = None
    once: bool = False
    with_context: bool = False


def _coerce_event_name(event_name: Any) -> str | None:
    """Return the string form of ``event_name``, or None when it has none."""
    if event_name is None:
        return None
    if isinstance(event_name, str):
        return event_name
    try:
        return str(event_name)
    except Exception:  # noqa: BLE001 - a broken __str__ leaves no usable name.
        LOGGER.debug("Ignoring event name without a string form: %r", type(event_name))
        return None


def _bubble_events(event_name: str, separator: str) -> list[str]:
    """Return every prefix of ``event_name``, shortest first.

    ``"a:b:c"`` yields ``["a", "a:b", "a:b:c"]``.
    """
    segments = event_name.split(separator)
    return [separator.join(segments[: index + 1]) for index in range(len(segments))]


def _topics_of(hub: Any) -> dict[str, list[Subscription]]:
    # State is created lazily so mixin targets work without an __init__.
    topics = getattr(hub, "_topics", None)
    if topics is None:
        topics = {}
        hub._topics = topics
    return topics


def _observing_of(hub: Any) -> list[Any]:
    observing = getattr(hub, "_observing", None)
    if observing is None:
        observing = []
        hub._observing = observing
    return observing


def _consume(
    topics: dict[str, list[Subscription]], event_name: str, subscription: Subscription
) -> None:
    """Remove a once-subscription from the live topic by identity.

    An emptied list stays in place until the next unsubscribe() targeting the
    name prunes it.
    """
    live = topics.get(event_name)
    if not live:
        return
    for index, candidate in enumerate(live):
        if candidate is subscription:
            del live[index]
            return


def _dispatch(
    hub: Any, event_name: str, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> bool:
    """Invoke one topic's handlers; return False when bubbling must stop."""
    topics = _topics_of(hub)
    subscriptions = topics.get(event_name)
    if subscriptions:
        for subscription in list(subscriptions):
            if subscription.with_context:
                context = hub if subscription.scope is None else subscription.scope
                result = subscription.handler(context, *args, **kwargs)
            else:
                result = subscription.handler(*args, **kwargs)
            # Only a handler that returned is consumed; one that raised stays.
            if subscription.once:
                _consume(topics, event_name, subscription)
            if result is False:
                LOGGER.debug(
                    "hub.publish.stopped",
                    extra={"event": "hub.publish.stopped", "event_name": event_name},
                )
                return False
    return bool(getattr(hub, "_events_should_bubble", False))


class EventHub:
    """Observer that maps event names to ordered handler lists.

    Handlers run synchronously, in subscription order, on the publishing
    thread. Exceptions raised by a handler propagate to the publisher and end
    the dispatch. A handler returning exactly ``False`` stops the remaining
    handlers of that event and any bubbling to parent names.
    """

    _topics: dict[str, list[Subscription]] | None = None
    _observing: list[Any] | None = None
    _events_should_bubble: bool = False
    _separator: str = DEFAULT_SEPARATOR

    def __init__(self, *, bubbling: bool = False, separator: str = DEFAULT_SEPARATOR) -> None:
        if not isinstance(separator, str) or not separator:
            raise InvalidArgumentError("EventHub: separator must be a non-empty string.")
        self._topics = {}
        self._observing = []
        self._separator = separator
        if bubbling:
            self.with_event_bubbling()

    def __repr__(self) -> str:
        topics = sorted(_topics_of(self))
        return f"{type(self).__name__}(topics={topics!r}, bubbling={self._events_should_bubble})"

    @classmethod
    def create(
        cls,
        config: HubConfig | Mapping[str, Any] | None = None,
        *,
        config_path: Path | None = None,
    ) -> EventHub:
        """Build a hub from hub settings.

        Args:
            config: A ``HubConfig`` or a mapping of its fields. When omitted the
                ``[hub]`` section of the TOML config file is used.
            config_path: Config file to read when ``config`` is omitted;
                defaults to ``~/.config/eventhub/config.toml``.

        Raises:
            ConfigValidationError: ``config`` holds invalid hub settings.
        """
        if config is None:
            config = load_config(config_path)["hub"]
        if isinstance(config, HubConfig):
            settings = config
        else:
            try:
                settings = HubConfig.model_validate(dict(config))
            except ValidationError as exc:
                raise ConfigValidationError(f"Invalid hub configuration: {exc}") from exc
        return cls(bubbling=settings.bubbling, separator=settings.separator)

    def with_event_bubbling(self) -> Any:
        """Let published events bubble up to their parent names. Idempotent."""
        self._events_should_bubble = True
        return self

    def subscribe(
        self,
        event_name: Any,
        handler: Handler,
        scope: Any = None,
        once: bool = False,
        *,
        with_context: bool = False,
    ) -> Any:
        """Register ``handler`` for ``event_name``.

        Args:
            event_name: Event to listen for; segments are joined by the separator
                (e.g., "file:saved"). Non-string names are coerced with ``str()``.
            handler: Callable invoked with the published arguments.
            scope: Optional context object, used to unsubscribe by scope.
            once: Remove the subscription after its first invocation that
                returns normally.
            with_context: Pass the context (``scope``, or this hub when no
                scope is given) as the handler's first argument.

        Raises:
            InvalidArgumentError: ``handler`` is not callable.
        """
        if not callable(handler):
            raise InvalidArgumentError(
                "EventHub.subscribe: please provide a callable as the handler argument."
            )
        name = _coerce_event_name(event_name)
        if name is None:
            return self

        _topics_of(self).setdefault(name, []).append(
            Subscription(
                handler=handler,
                scope=scope,
                once=bool(once),
                with_context=bool(with_context),
            )
        )
        LOGGER.debug(
            "hub.subscribe",
            extra={"event": "hub.subscribe", "event_name": name, "once": bool(once)},
        )
        return self

    on = subscribe

    def unsubscribe(self, event_name: Any = None, scope: Any = None) -> Any:
        """Remove subscriptions by event name, by scope, or both.

        Without ``event_name`` every topic is considered. Without ``scope``
        every subscription of the considered topics is removed, whatever scope
        it was registered with; with ``scope`` only subscriptions registered
        with that exact object are removed.
        """
        topics = _topics_of(self)
        if event_name is None:
            candidates = list(topics)
        else:
            name = _coerce_event_name(event_name)
            if name is None:
                return self
            candidates = [name]

        removed = 0
        for name in candidates:
            topic = topics.get(name)
            if topic is None:
                continue
            if scope is None:
                remaining: list[Subscription] = []
            else:
                remaining = [sub for sub in topic if sub.scope is not scope]
            removed += len(topic) - len(remaining)
            if remaining:
                topics[name] = remaining
            else:
                del topics[name]

        LOGGER.debug(
            "hub.unsubscribe",
            extra={"event": "hub.unsubscribe", "event_name": event_name, "removed": removed},
        )
        return self

    un = unsubscribe
    off = unsubscribe

    def publish(self, event_name: Any, *args: Any, **kwargs: Any) -> Any:
        """Invoke the handlers of ``event_name`` with the given arguments.

        With bubbling enabled the event is then re-dispatched to each parent
        name, most specific first, until a handler returns ``False``.
        """
        name = _coerce_event_name(event_name)
        if name is None:
            return self

        separator = getattr(self, "_separator", DEFAULT_SEPARATOR)
        LOGGER.debug("hub.publish", extra={"event": "hub.publish", "event_name": name})
        for level in reversed(_bubble_events(name, separator)):
            if not _dispatch(self, level, args, kwargs):
                break
        return self

    fire = publish
    emit = publish

    def has_listeners(self, event_name: Any = None) -> bool:
        """Check one event for subscribers, or for any known topic when no name is given.

        A topic whose once-handlers were all consumed is still known until an
        unsubscribe() call targets it.
        """
        topics = _topics_of(self)
        if event_name is None:
            return bool(topics)
        name = _coerce_event_name(event_name)
        return name is not None and bool(topics.get(name))

    def listen_to(
        self,
        other: EventHub,
        event_name: Any,
        handler: Handler,
        once: bool = False,
        *,
        with_context: bool = False,
    ) -> Any:
        """Subscribe to ``other`` with this object as scope, so stop_listening() can undo it.

        Raises:
            InvalidArgumentError: ``other`` is not an EventHub.
        """
        if not EventHub.is_event_hub(other):
            raise InvalidArgumentError(
                "EventHub.listen_to: please provide an EventHub to listen to."
            )
        observing = _observing_of(self)
        if not any(hub is other for hub in observing):
            observing.append(other)
        other.subscribe(event_name, handler, self, once, with_context=with_context)
        LOGGER.debug(
            "hub.listen_to",
            extra={"event": "hub.listen_to", "event_name": event_name, "once": bool(once)},
        )
        return self

    def listen_to_once(self, other: EventHub, event_name: Any, handler: Handler) -> Any:
        """Like listen_to(), but the handler is dropped after it first returns."""
        return self.listen_to(other, event_name, handler, once=True)

    def stop_listening(self, other: EventHub | None = None) -> Any:
        """Drop every subscription this object made through listen_to().

        When ``other`` is given only that hub is detached. Observed hubs stay
        recorded, so calling this again is harmless.
        """
        for hub in list(_observing_of(self)):
            if other is None or hub is other:
                hub.unsubscribe(None, self)
        LOGGER.debug("hub.stop_listening", extra={"event": "hub.stop_listening"})
        return self

    @staticmethod
    def is_event_hub(value: Any) -> bool:
        """Return True for EventHub instances; mixin targets do not count."""
        return isinstance(value, EventHub)

    @staticmethod
    def mixin(target: Any) -> Any:
        """Install the hub methods on ``target`` in place and return it.

        Classes receive plain functions, so every instance gains the methods;
        other objects receive methods bound to themselves. Attributes outside
        ``HUB_METHODS`` are left untouched.

        Raises:
            InvalidArgumentError: ``target`` is None or does not accept attributes.
        """
        if target is None:
            raise InvalidArgumentError("EventHub.mixin: please provide a base object to extend.")
        is_class = isinstance(target, type)
        for method_name in HUB_METHODS:
            function = getattr(EventHub, method_name)
            value = function if is_class else types.MethodType(function, target)
            try:
                setattr(target, method_name, value)
            except (AttributeError, TypeError) as exc:
                raise InvalidArgumentError(
                    f"EventHub.mixin: cannot extend {type(target).__name__!r} objects."
                ) from exc
        return target


mixin = EventHub.mixin
is_event_hub = EventHub.is_event_hub
