"""Concurrent memoizing map used for definitions and resolved members."""

import threading
from collections.abc import Callable
from collections.abc import Hashable
from collections.abc import Iterator
from concurrent.futures import Future
from typing import Generic
from typing import TypeVar

from shadowlink.errors import ShadowConfigurationError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Pending(Generic[V]):
    """One in-flight computation."""

    future: "Future[V]"
    owner_thread_id: int

    def __init__(self, owner_thread_id: int) -> None:
        """Initialize an in-flight computation.

        :param owner_thread_id: Identifier of the computing thread.
        """
        self.future = Future()
        self.owner_thread_id = owner_thread_id


class LoadingMap(Generic[K, V]):
    """Mapping whose values are computed on first access, at most once per key.

    The table lock is held only to publish or look up entries; the loader runs
    outside it, so loaders may use other ``LoadingMap`` instances. Concurrent
    callers for the same key wait on the first caller's result. A failed load
    is not stored: waiting callers see the same exception and later calls
    compute again.
    """

    _loader: Callable[[K], V]
    _lock: threading.Lock
    _values: dict[K, V]
    _pending: dict[K, _Pending[V]]

    def __init__(self, loader: Callable[[K], V]) -> None:
        """Initialize an empty map.

        :param loader: Function computing the value for a missing key.
        """
        self._loader = loader
        self._lock = threading.Lock()
        self._values = {}
        self._pending = {}

    def get(self, key: K) -> V:
        """Return the value for ``key``, computing it if absent.

        :param key: Lookup key.
        :returns: Cached or freshly computed value.
        :raises ShadowConfigurationError: If the current thread is already computing ``key``.
        """
        current_thread_id: int = threading.get_ident()
        with self._lock:
            if key in self._values:
                return self._values[key]
            pending: _Pending[V] | None = self._pending.get(key)
            is_owner: bool = pending is None
            if pending is None:
                pending = _Pending(current_thread_id)
                self._pending[key] = pending

        if is_owner is False:
            if pending.owner_thread_id == current_thread_id:
                raise ShadowConfigurationError(f"Recursive resolution of {key!r}")
            return pending.future.result()

        try:
            value: V = self._loader(key)
        except BaseException as exc:
            with self._lock:
                self._pending.pop(key, None)
            pending.future.set_exception(exc)
            raise

        with self._lock:
            self._values[key] = value
            self._pending.pop(key, None)
        pending.future.set_result(value)
        return value

    def get_if_present(self, key: K) -> V | None:
        """Return the value for ``key`` without computing it.

        :param key: Lookup key.
        :returns: Cached value or ``None``.
        """
        with self._lock:
            return self._values.get(key)

    def __contains__(self, key: object) -> bool:
        """Report whether a value has been computed for ``key``.

        :param key: Lookup key.
        :returns: ``True`` when cached.
        """
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        """Return the number of cached values.

        :returns: Cached value count.
        """
        with self._lock:
            return len(self._values)

    def __iter__(self) -> Iterator[K]:
        """Iterate over a snapshot of cached keys.

        :returns: Key iterator.
        """
        return iter(self.keys())

    def keys(self) -> list[K]:
        """Return a snapshot of cached keys.

        :returns: Cached keys.
        """
        with self._lock:
            return list(self._values.keys())

    def values(self) -> list[V]:
        """Return a snapshot of cached values.

        :returns: Cached values.
        """
        with self._lock:
            return list(self._values.values())

    def clear(self) -> None:
        """Drop every cached value."""
        with self._lock:
            self._values.clear()
