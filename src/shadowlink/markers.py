"""Declarative markers attached to shadow interfaces and their methods.

Markers form a closed set of frozen dataclasses. Decorators in this module
append them to the decorated class or function; the resolver chain and the
dispatch layer query them through :func:`get_markers` and :func:`find_marker`.
Any method carrying a marker is treated as an abstract, forwarded method.
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar
from typing import Union

MARKERS_ATTR: str = "__shadowlink_markers__"
_Decorated = TypeVar("_Decorated")


class ClassTargetFunction:
    """Computes the target class for a shadow interface."""

    def compute_class(self, shadow_class: type) -> type:
        """Compute the target class.

        :param shadow_class: Shadow interface to compute a target for.
        :returns: Target class.
        """
        raise NotImplementedError


class MethodTargetFunction:
    """Computes the target method name for a shadow method."""

    def compute_method(self, shadow_method: object, shadow_class: type, target_class: type) -> str:
        """Compute the target method name.

        :param shadow_method: Shadow method descriptor.
        :param shadow_class: Interface declaring the method.
        :param target_class: Resolved target class.
        :returns: Target method name.
        """
        raise NotImplementedError


class FieldTargetFunction:
    """Computes the target field name for a shadow method."""

    def compute_field(self, shadow_method: object, shadow_class: type, target_class: type) -> str:
        """Compute the target field name.

        :param shadow_method: Shadow method descriptor.
        :param shadow_class: Interface declaring the method.
        :param target_class: Resolved target class.
        :returns: Target field name.
        """
        raise NotImplementedError


@dataclass(frozen=True)
class ClassTargetMarker:
    """Constant target class."""

    value: type


@dataclass(frozen=True)
class NameTargetMarker:
    """String target: an importable class path, or a member name."""

    value: str


@dataclass(frozen=True)
class DynamicClassTargetMarker:
    """Target class computed by a :class:`ClassTargetFunction`."""

    function_type: type


@dataclass(frozen=True)
class DynamicMethodTargetMarker:
    """Target method name computed by a :class:`MethodTargetFunction`."""

    function_type: type


@dataclass(frozen=True)
class DynamicFieldTargetMarker:
    """Target field name computed by a :class:`FieldTargetFunction`."""

    function_type: type


@dataclass(frozen=True)
class StaticMarker:
    """The method binds to a static target member."""


@dataclass(frozen=True)
class FieldMarker:
    """The method is a field getter or setter."""


@dataclass(frozen=True)
class StrategyMarker:
    """Wrap/unwrap policy pair; ``None`` keeps the default for that side."""

    wrapper: type | None
    unwrapper: type | None


Marker = Union[
    ClassTargetMarker,
    NameTargetMarker,
    DynamicClassTargetMarker,
    DynamicMethodTargetMarker,
    DynamicFieldTargetMarker,
    StaticMarker,
    FieldMarker,
    StrategyMarker,
]
_MarkerT = TypeVar("_MarkerT")


def get_markers(element: object) -> tuple[Marker, ...]:
    """Return the markers declared directly on a class or function.

    Class markers are not inherited by subclasses.

    :param element: Shadow interface class or shadow method function.
    :returns: Declared markers in declaration order.
    """
    if inspect.isclass(element) is True:
        return vars(element).get(MARKERS_ATTR, ())
    return getattr(element, MARKERS_ATTR, ())


def find_marker(element: object, marker_type: type[_MarkerT]) -> _MarkerT | None:
    """Return the first marker of ``marker_type`` declared on ``element``.

    :param element: Shadow interface class or shadow method function.
    :param marker_type: Marker dataclass to look for.
    :returns: Marker instance or ``None``.
    """
    for marker in get_markers(element):
        if isinstance(marker, marker_type) is True:
            return marker
    return None


def has_marker(element: object, marker_type: type) -> bool:
    """Report whether ``element`` declares a marker of ``marker_type``.

    :param element: Shadow interface class or shadow method function.
    :param marker_type: Marker dataclass to look for.
    :returns: ``True`` when present.
    """
    return find_marker(element, marker_type) is not None


def _add_marker(element: _Decorated, marker: Marker) -> _Decorated:
    existing: tuple[Marker, ...] = get_markers(element)
    setattr(element, MARKERS_ATTR, existing + (marker,))
    if inspect.isfunction(element) is True:
        element.__isabstractmethod__ = True  # type: ignore[attr-defined]
    return element


def _require_class(element: object, decorator_name: str) -> None:
    if inspect.isclass(element) is False:
        raise TypeError(f"@{decorator_name} can only decorate a shadow class")


def _require_function(element: object, decorator_name: str) -> None:
    if inspect.isfunction(element) is False:
        raise TypeError(f"@{decorator_name} can only decorate a shadow method")


def class_target(value: type) -> Callable[[_Decorated], _Decorated]:
    """Bind a shadow interface to a constant target class.

    :param value: Target class.
    :returns: Class decorator.
    """
    if inspect.isclass(value) is False:
        raise TypeError("class_target value must be a class")

    def decorator(element: _Decorated) -> _Decorated:
        _require_class(element, "class_target")
        return _add_marker(element, ClassTargetMarker(value))

    return decorator


def target(value: str) -> Callable[[_Decorated], _Decorated]:
    """Name the target explicitly.

    On a class, ``value`` is an importable class path in ``module.path:ClassName``
    or ``module.path.ClassName`` form. On a method, it is the target member name.

    :param value: Target class path or member name.
    :returns: Class or method decorator.
    """
    if isinstance(value, str) is False or len(value) == 0:
        raise ValueError("target value must be a non-empty string")

    def decorator(element: _Decorated) -> _Decorated:
        return _add_marker(element, NameTargetMarker(value))

    return decorator


def dynamic_class_target(function_type: type) -> Callable[[_Decorated], _Decorated]:
    """Compute the target class with a :class:`ClassTargetFunction`.

    :param function_type: Function class; instantiated on demand.
    :returns: Class decorator.
    """

    def decorator(element: _Decorated) -> _Decorated:
        _require_class(element, "dynamic_class_target")
        return _add_marker(element, DynamicClassTargetMarker(function_type))

    return decorator


def dynamic_method_target(function_type: type) -> Callable[[_Decorated], _Decorated]:
    """Compute the target method name with a :class:`MethodTargetFunction`.

    :param function_type: Function class; instantiated on demand.
    :returns: Method decorator.
    """

    def decorator(element: _Decorated) -> _Decorated:
        _require_function(element, "dynamic_method_target")
        return _add_marker(element, DynamicMethodTargetMarker(function_type))

    return decorator


def dynamic_field_target(function_type: type) -> Callable[[_Decorated], _Decorated]:
    """Compute the target field name with a :class:`FieldTargetFunction`.

    :param function_type: Function class; instantiated on demand.
    :returns: Method decorator.
    """

    def decorator(element: _Decorated) -> _Decorated:
        _require_function(element, "dynamic_field_target")
        return _add_marker(element, DynamicFieldTargetMarker(function_type))

    return decorator


def static(element: _Decorated) -> _Decorated:
    """Mark a shadow method as bound to a static target member."""
    _require_function(element, "static")
    return _add_marker(element, StaticMarker())


def field(element: _Decorated) -> _Decorated:
    """Mark a shadow method as a field getter (no arguments) or setter (one argument)."""
    _require_function(element, "field")
    return _add_marker(element, FieldMarker())


def shadowing_strategy(
    wrapper: type | None = None,
    unwrapper: type | None = None,
) -> Callable[[_Decorated], _Decorated]:
    """Choose the wrap/unwrap policy for one shadow method.

    Policy instances are obtained on demand via ``get_instance`` lookup rules.

    :param wrapper: ``Wrapper`` implementation type for return values.
    :param unwrapper: ``Unwrapper`` implementation type for arguments.
    :returns: Method decorator.
    """

    def decorator(element: _Decorated) -> _Decorated:
        _require_function(element, "shadowing_strategy")
        return _add_marker(element, StrategyMarker(wrapper, unwrapper))

    return decorator
