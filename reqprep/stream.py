"""reqprep stream - re-resolve a request whenever its inputs change."""

from collections.abc import Callable
from typing import Any

from reqprep.effective import GlobalsProvider, get_effective_request
from reqprep.scope import global_variables

_UNSET = object()

Listener = Callable[[Any], None]


class Source:
    """Holds a latest value and pushes every new value to subscribers.

    New subscribers immediately receive the current value, if any.
    """

    def __init__(self, value: Any = _UNSET):
        self._value = value
        self._listeners: list[Listener] = []

    @property
    def has_value(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> Any:
        if self._value is _UNSET:
            raise LookupError("Source has not emitted yet")
        return self._value

    def emit(self, value: Any) -> None:
        self._value = value
        for listener in list(self._listeners):
            listener(value)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)
        if self.has_value:
            listener(self._value)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe


def map_source(source: Source, fn: Callable[[Any], Any]) -> Source:
    out = Source()
    source.subscribe(lambda value: out.emit(fn(value)))
    return out


def combine_latest(first: Source, second: Source) -> Source:
    """Emit (latest_first, latest_second) once both have a value, then on each change."""
    out = Source()
    latest = [_UNSET, _UNSET]

    def _on(index: int) -> Listener:
        def _listener(value: Any) -> None:
            latest[index] = value
            if latest[0] is not _UNSET and latest[1] is not _UNSET:
                out.emit((latest[0], latest[1]))

        return _listener

    first.subscribe(_on(0))
    second.subscribe(_on(1))
    return out


def resolve_stream(
    request_source: Source,
    environment_source: Source,
    globals_provider: GlobalsProvider = global_variables,
) -> Source:
    """Source of EffectiveRequests, recomputed on every request/environment change."""
    return map_source(
        combine_latest(request_source, environment_source),
        lambda pair: get_effective_request(pair[0], pair[1], globals_provider),
    )
