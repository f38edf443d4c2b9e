"""Base type for shadow interfaces."""

import abc
import inspect
import types
import typing

from shadowlink.introspection import NoneType


class Shadow(abc.ABC):
    """Base class for interfaces bound to runtime-determined target objects.

    Abstract methods, and any method carrying a shadowlink marker, are
    forwarded to the resolved target member. Concrete methods run directly on
    the synthesized instance and may call the forwarded ones.
    """

    __slots__ = ()

    @property
    @abc.abstractmethod
    def shadow_class(self) -> type["Shadow"]:
        """Return the shadow interface this instance implements.

        :returns: Shadow interface class.
        """

    @property
    @abc.abstractmethod
    def shadow_target(self) -> object:
        """Return the bound target object, or ``None`` for static shadows.

        :returns: Bound target.
        """


def is_shadow_class(candidate: object) -> bool:
    """Report whether ``candidate`` is a shadow interface class.

    :param candidate: Object to inspect.
    :returns: ``True`` for ``Shadow`` subclasses other than ``Shadow`` itself.
    """
    if inspect.isclass(candidate) is False:
        return False
    return issubclass(candidate, Shadow) is True and candidate is not Shadow


def shadow_type_of(annotation: object) -> type[Shadow] | None:
    """Return the shadow interface named by an annotation.

    ``S`` and ``S | None`` both name ``S``; anything else names no shadow.

    :param annotation: Resolved annotation.
    :returns: Shadow interface class or ``None``.
    """
    if is_shadow_class(annotation) is True:
        return annotation  # type: ignore[return-value]
    origin: object = typing.get_origin(annotation)
    if origin is not typing.Union and origin is not types.UnionType:
        return None
    members: list[object] = [member for member in typing.get_args(annotation) if member is not NoneType]
    if len(members) == 1 and is_shadow_class(members[0]) is True:
        return members[0]  # type: ignore[return-value]
    return None
