"""Wrap/unwrap policies applied at the shadow call boundary."""

import collections.abc
import typing
from collections.abc import Sequence
from typing import TYPE_CHECKING
from typing import ClassVar

from shadowlink.base import Shadow
from shadowlink.base import shadow_type_of
from shadowlink.errors import ShadowConfigurationError
from shadowlink.introspection import shared_instance
from shadowlink.markers import StrategyMarker
from shadowlink.markers import find_marker
from shadowlink.methods import ShadowMethod

if TYPE_CHECKING:
    from shadowlink.runtime import ShadowFactory

_SEQUENCE_ORIGINS: tuple[object, ...] = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)


class Wrapper:
    """Turns values returned by targets into values handed to callers."""

    def wrap(self, unwrapped: object, expected_type: object, shadow_factory: "ShadowFactory") -> object:
        """Wrap ``unwrapped`` as ``expected_type``.

        :param unwrapped: Value produced by the target.
        :param expected_type: Declared return annotation.
        :param shadow_factory: Factory used to create shadows.
        :returns: Value for the caller.
        """
        raise NotImplementedError


class Unwrapper:
    """Turns caller-supplied values into values handed to targets."""

    def unwrap(self, wrapped: object, expected_type: object, shadow_factory: "ShadowFactory") -> object:
        """Unwrap ``wrapped`` to a plain target-side value.

        :param wrapped: Value supplied by the caller.
        :param expected_type: Unwrapped parameter annotation.
        :param shadow_factory: Factory used to resolve shadows.
        :returns: Value for the target.
        """
        raise NotImplementedError

    def unwrap_type(self, wrapped_type: object, shadow_factory: "ShadowFactory") -> object:
        """Map a declared shadow-side annotation to its target-side annotation.

        :param wrapped_type: Declared parameter annotation.
        :param shadow_factory: Factory used to resolve shadows.
        :returns: Target-side annotation.
        """
        raise NotImplementedError

    def unwrap_all(
        self,
        wrapped: Sequence[object],
        expected_types: Sequence[object],
        shadow_factory: "ShadowFactory",
    ) -> list[object]:
        """Unwrap every value in ``wrapped``.

        :param wrapped: Values supplied by the caller.
        :param expected_types: Unwrapped annotation per value.
        :param shadow_factory: Factory used to resolve shadows.
        :returns: Values for the target.
        :raises ValueError: If the lengths differ.
        """
        if len(wrapped) != len(expected_types):
            raise ValueError("wrapped and expected_types must have the same length")
        return [
            self.unwrap(value, expected_type, shadow_factory)
            for value, expected_type in zip(wrapped, expected_types)
        ]

    def unwrap_all_types(self, wrapped_types: Sequence[object], shadow_factory: "ShadowFactory") -> list[object]:
        """Map every declared annotation to its target-side annotation.

        :param wrapped_types: Declared parameter annotations.
        :param shadow_factory: Factory used to resolve shadows.
        :returns: Target-side annotations.
        """
        return [self.unwrap_type(wrapped_type, shadow_factory) for wrapped_type in wrapped_types]


class ForShadows(Wrapper, Unwrapper):
    """Default policy: values expected as shadows are bound, shadows unwrap to their targets."""

    INSTANCE: ClassVar["ForShadows"]

    def wrap(self, unwrapped: object, expected_type: object, shadow_factory: "ShadowFactory") -> object:
        if unwrapped is None:
            return None
        shadow_class: type[Shadow] | None = shadow_type_of(expected_type)
        if shadow_class is None or isinstance(unwrapped, Shadow) is True:
            return unwrapped
        return shadow_factory.shadow(shadow_class, unwrapped)

    def unwrap(self, wrapped: object, expected_type: object, shadow_factory: "ShadowFactory") -> object:
        if isinstance(wrapped, Shadow) is True:
            return wrapped.shadow_target
        return wrapped

    def unwrap_type(self, wrapped_type: object, shadow_factory: "ShadowFactory") -> object:
        shadow_class: type[Shadow] | None = shadow_type_of(wrapped_type)
        if shadow_class is None:
            return wrapped_type
        return shadow_factory.get_target_class(shadow_class)


ForShadows.INSTANCE = ForShadows()


def _sequence_parts(annotation: object) -> tuple[type, object] | None:
    """Split a one-dimensional sequence annotation into ``(container, element)``.

    :param annotation: Declared annotation.
    :returns: Container class and element annotation, or ``None``.
    """
    origin: object = typing.get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return None
    arguments: tuple[object, ...] = typing.get_args(annotation)
    if origin is tuple:
        if len(arguments) != 2 or arguments[1] is not Ellipsis:
            return None
        return tuple, arguments[0]
    if len(arguments) != 1:
        return None
    return list, arguments[0]


class ForShadowArrays(Wrapper, Unwrapper):
    """Policy for one-dimensional lists or tuples of shadows, element by element."""

    INSTANCE: ClassVar["ForShadowArrays"]

    def _element_shadow(self, annotation: object, role: str) -> tuple[type, type[Shadow]]:
        parts: tuple[type, object] | None = _sequence_parts(annotation)
        if parts is None:
            raise ShadowConfigurationError(f"{role} type is not a one-dimensional sequence: {annotation!r}")
        container, element = parts
        shadow_class: type[Shadow] | None = shadow_type_of(element)
        if shadow_class is None:
            raise ShadowConfigurationError(f"{role} type is not a sequence of shadow components: {annotation!r}")
        return container, shadow_class

    def wrap(self, unwrapped: object, expected_type: object, shadow_factory: "ShadowFactory") -> object:
        if unwrapped is None:
            return None
        if isinstance(unwrapped, (list, tuple)) is False:
            raise ShadowConfigurationError(f"Object to be wrapped is not a sequence: {type(unwrapped)!r}")
        container, shadow_class = self._element_shadow(expected_type, "Expected")
        wrapped: list[object] = [
            None if item is None else shadow_factory.shadow(shadow_class, item)
            for item in unwrapped  # type: ignore[union-attr]
        ]
        return container(wrapped)

    def unwrap(self, wrapped: object, expected_type: object, shadow_factory: "ShadowFactory") -> object:
        if wrapped is None:
            return None
        if isinstance(wrapped, (list, tuple)) is False:
            raise ShadowConfigurationError(f"Object to be unwrapped is not a sequence: {type(wrapped)!r}")
        unwrapped: list[object] = []
        for item in wrapped:  # type: ignore[union-attr]
            if item is None:
                unwrapped.append(None)
                continue
            if isinstance(item, Shadow) is False:
                raise ShadowConfigurationError(f"Sequence element is not a shadow: {type(item)!r}")
            unwrapped.append(item.shadow_target)
        return type(wrapped)(unwrapped)

    def unwrap_type(self, wrapped_type: object, shadow_factory: "ShadowFactory") -> object:
        container, shadow_class = self._element_shadow(wrapped_type, "Wrapped")
        target_class: type = shadow_factory.get_target_class(shadow_class)
        if container is tuple:
            return tuple[target_class, ...]  # type: ignore[valid-type]
        return list[target_class]  # type: ignore[valid-type]


ForShadowArrays.INSTANCE = ForShadowArrays()


def resolve_wrapper(shadow_method: ShadowMethod) -> Wrapper:
    """Return the wrapper declared for ``shadow_method``, or the default.

    :param shadow_method: Shadow method descriptor.
    :returns: Wrapper instance.
    """
    marker: StrategyMarker | None = find_marker(shadow_method.function, StrategyMarker)
    if marker is None or marker.wrapper is None:
        return ForShadows.INSTANCE
    return shared_instance(Wrapper, marker.wrapper)


def resolve_unwrapper(shadow_method: ShadowMethod) -> Unwrapper:
    """Return the unwrapper declared for ``shadow_method``, or the default.

    :param shadow_method: Shadow method descriptor.
    :returns: Unwrapper instance.
    """
    marker: StrategyMarker | None = find_marker(shadow_method.function, StrategyMarker)
    if marker is None or marker.unwrapper is None:
        return ForShadows.INSTANCE
    return shared_instance(Unwrapper, marker.unwrapper)
