"""Target resolution strategies and the ordered resolver chain."""

import inspect
import logging
import re
import threading
from collections.abc import Iterable
from collections.abc import Mapping

from shadowlink.errors import ShadowConfigurationError
from shadowlink.introspection import load_class
from shadowlink.introspection import shared_instance
from shadowlink.markers import ClassTargetFunction
from shadowlink.markers import ClassTargetMarker
from shadowlink.markers import DynamicClassTargetMarker
from shadowlink.markers import DynamicFieldTargetMarker
from shadowlink.markers import DynamicMethodTargetMarker
from shadowlink.markers import FieldTargetFunction
from shadowlink.markers import MethodTargetFunction
from shadowlink.markers import NameTargetMarker
from shadowlink.markers import find_marker
from shadowlink.methods import ShadowMethod

_LOG: logging.Logger = logging.getLogger("shadowlink.resolvers")


class TargetResolver:
    """A pluggable rule mapping shadow metadata to a target class or member name.

    Every lookup returns ``None`` when the resolver has no answer.
    """

    def lookup_class(self, shadow_class: type) -> type | None:
        """Find the target class for ``shadow_class``.

        :param shadow_class: Shadow interface class.
        :returns: Target class or ``None``.
        """
        return None

    def lookup_method(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        """Find the target method name for ``shadow_method``.

        :param shadow_method: Shadow method descriptor.
        :param shadow_class: Shadow interface being bound.
        :param target_class: Resolved target class.
        :returns: Target method name or ``None``.
        """
        return None

    def lookup_field(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        """Find the target field name for ``shadow_method``.

        :param shadow_method: Shadow method descriptor.
        :param shadow_class: Shadow interface being bound.
        :param target_class: Resolved target class.
        :returns: Target field name or ``None``.
        """
        return None


class ClassTargetResolver(TargetResolver):
    """Resolves ``@class_target`` constant classes."""

    def lookup_class(self, shadow_class: type) -> type | None:
        marker: ClassTargetMarker | None = find_marker(shadow_class, ClassTargetMarker)
        if marker is None:
            return None
        return marker.value


class NameTargetResolver(TargetResolver):
    """Resolves ``@target`` strings: class paths on classes, member names on methods."""

    def lookup_class(self, shadow_class: type) -> type | None:
        marker: NameTargetMarker | None = find_marker(shadow_class, NameTargetMarker)
        if marker is None:
            return None
        return load_class(marker.value)

    def lookup_method(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        marker: NameTargetMarker | None = find_marker(shadow_method.function, NameTargetMarker)
        if marker is None:
            return None
        return marker.value

    def lookup_field(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        return self.lookup_method(shadow_method, shadow_class, target_class)


class DynamicClassTargetResolver(TargetResolver):
    """Resolves ``@dynamic_class_target`` through a :class:`ClassTargetFunction`."""

    def lookup_class(self, shadow_class: type) -> type | None:
        marker: DynamicClassTargetMarker | None = find_marker(shadow_class, DynamicClassTargetMarker)
        if marker is None:
            return None
        function: ClassTargetFunction = shared_instance(ClassTargetFunction, marker.function_type)
        computed: object = function.compute_class(shadow_class)
        if inspect.isclass(computed) is False:
            raise ShadowConfigurationError(
                f"{marker.function_type.__qualname__} computed {computed!r} for "
                + f"{shadow_class.__qualname__}, which is not a class"
            )
        return computed  # type: ignore[return-value]


class DynamicMethodTargetResolver(TargetResolver):
    """Resolves ``@dynamic_method_target`` through a :class:`MethodTargetFunction`."""

    def lookup_method(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        marker: DynamicMethodTargetMarker | None = find_marker(shadow_method.function, DynamicMethodTargetMarker)
        if marker is None:
            return None
        function: MethodTargetFunction = shared_instance(MethodTargetFunction, marker.function_type)
        return function.compute_method(shadow_method, shadow_class, target_class)


class DynamicFieldTargetResolver(TargetResolver):
    """Resolves ``@dynamic_field_target`` through a :class:`FieldTargetFunction`."""

    def lookup_field(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        marker: DynamicFieldTargetMarker | None = find_marker(shadow_method.function, DynamicFieldTargetMarker)
        if marker is None:
            return None
        function: FieldTargetFunction = shared_instance(FieldTargetFunction, marker.function_type)
        return function.compute_field(shadow_method, shadow_class, target_class)


_SNAKE_ACCESSOR_PATTERN: re.Pattern[str] = re.compile(r"^(?:get|is|set)_([A-Za-z_]\w*)$")
_CAMEL_ACCESSOR_PATTERN: re.Pattern[str] = re.compile(r"^(?:get|is|set)([A-Z]\w*)$")


def _decapitalize(name: str) -> str:
    return name[:1].lower() + name[1:]


class FuzzyFieldTargetResolver(TargetResolver):
    """Derives field names from getter and setter method names.

    ``get_name``, ``is_name`` and ``set_name`` map to ``name``; the camel-case
    ``getName``, ``isName`` and ``setName`` map to the decapitalized remainder.
    """

    def lookup_field(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        method_name: str = shadow_method.name
        snake_match: re.Match[str] | None = _SNAKE_ACCESSOR_PATTERN.match(method_name)
        if snake_match is not None:
            return snake_match.group(1)
        camel_match: re.Match[str] | None = _CAMEL_ACCESSOR_PATTERN.match(method_name)
        if camel_match is not None:
            return _decapitalize(camel_match.group(1))
        return None


class MappingTargetResolver(TargetResolver):
    """Dictionary-backed resolver for renamed or per-deployment targets.

    Classes are keyed by shadow interface; methods and fields by
    ``(shadow_class, method_name)``. Class values may be classes or importable
    class paths.
    """

    _classes: dict[type, type | str]
    _methods: dict[tuple[type, str], str]
    _fields: dict[tuple[type, str], str]

    def __init__(
        self,
        classes: Mapping[type, type | str] | None = None,
        methods: Mapping[tuple[type, str], str] | None = None,
        fields: Mapping[tuple[type, str], str] | None = None,
    ) -> None:
        """Initialize the mapping resolver.

        :param classes: Target class (or class path) per shadow interface.
        :param methods: Target method name per ``(shadow_class, method_name)``.
        :param fields: Target field name per ``(shadow_class, method_name)``.
        """
        self._classes = dict(classes or {})
        self._methods = dict(methods or {})
        self._fields = dict(fields or {})

    def lookup_class(self, shadow_class: type) -> type | None:
        mapped: type | str | None = self._classes.get(shadow_class)
        if mapped is None:
            return None
        if isinstance(mapped, str) is True:
            return load_class(mapped)  # type: ignore[arg-type]
        return mapped  # type: ignore[return-value]

    def lookup_method(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        return self._methods.get((shadow_class, shadow_method.name))

    def lookup_field(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        return self._fields.get((shadow_class, shadow_method.name))


CLASS_TARGET_RESOLVER: TargetResolver = ClassTargetResolver()
NAME_TARGET_RESOLVER: TargetResolver = NameTargetResolver()
DYNAMIC_CLASS_TARGET_RESOLVER: TargetResolver = DynamicClassTargetResolver()
DYNAMIC_METHOD_TARGET_RESOLVER: TargetResolver = DynamicMethodTargetResolver()
DYNAMIC_FIELD_TARGET_RESOLVER: TargetResolver = DynamicFieldTargetResolver()
FUZZY_FIELD_RESOLVER: TargetResolver = FuzzyFieldTargetResolver()
DEFAULT_RESOLVERS: tuple[TargetResolver, ...] = (
    CLASS_TARGET_RESOLVER,
    NAME_TARGET_RESOLVER,
    DYNAMIC_CLASS_TARGET_RESOLVER,
    DYNAMIC_METHOD_TARGET_RESOLVER,
    DYNAMIC_FIELD_TARGET_RESOLVER,
    FUZZY_FIELD_RESOLVER,
)


class TargetLookup(TargetResolver):
    """Ordered resolver chain answering with the first non-``None`` result.

    The chain is an immutable tuple replaced on registration, so lookups
    iterate a consistent snapshot while another thread registers.
    """

    _lock: threading.Lock
    _resolvers: tuple[TargetResolver, ...]

    def __init__(self, resolvers: Iterable[TargetResolver] | None = None) -> None:
        """Initialize the chain with the built-in resolvers.

        :param resolvers: Extra resolvers, highest priority first, placed ahead of the built-ins.
        """
        self._lock = threading.Lock()
        self._resolvers = DEFAULT_RESOLVERS
        if resolvers is not None:
            for resolver in reversed(list(resolvers)):
                self.register_resolver(resolver)

    @property
    def resolvers(self) -> tuple[TargetResolver, ...]:
        """Return the current chain, highest priority first.

        :returns: Resolver snapshot.
        """
        return self._resolvers

    def register_resolver(self, resolver: TargetResolver) -> bool:
        """Insert ``resolver`` at the highest priority.

        :param resolver: Resolver to register.
        :returns: ``False`` when the same resolver object is already registered.
        :raises TypeError: If ``resolver`` is not a ``TargetResolver``.
        """
        if isinstance(resolver, TargetResolver) is False:
            raise TypeError("resolver must be a TargetResolver")
        with self._lock:
            current: tuple[TargetResolver, ...] = self._resolvers
            already_registered: bool = any(existing is resolver for existing in current)
            if already_registered is True:
                return False
            self._resolvers = (resolver,) + current
        _LOG.debug("Registered target resolver %r", resolver)
        return True

    def lookup_class(self, shadow_class: type) -> type | None:
        for resolver in self._resolvers:
            result: type | None = resolver.lookup_class(shadow_class)
            if result is not None:
                return result
        return None

    def lookup_method(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        for resolver in self._resolvers:
            result: str | None = resolver.lookup_method(shadow_method, shadow_class, target_class)
            if result is not None:
                return result
        return None

    def lookup_field(self, shadow_method: ShadowMethod, shadow_class: type, target_class: type) -> str | None:
        for resolver in self._resolvers:
            result: str | None = resolver.lookup_field(shadow_method, shadow_class, target_class)
            if result is not None:
                return result
        return None
