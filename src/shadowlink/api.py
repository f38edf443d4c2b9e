"""User-facing API entrypoints for shadowlink.

These operate on the shared factory returned by :func:`global_factory`.
"""

from typing import TypeVar

from shadowlink.base import Shadow
from shadowlink.resolvers import TargetResolver
from shadowlink.runtime import global_factory
from shadowlink.strategies import Unwrapper

S = TypeVar("S", bound=Shadow)


def shadow(shadow_class: type[S], target: object) -> S:
    """Bind ``shadow_class`` to a live ``target`` object.

    :param shadow_class: Shadow interface.
    :param target: Instance of the interface's target class.
    :returns: Shadow instance forwarding to ``target``.
    """
    return global_factory().shadow(shadow_class, target)


def static_shadow(shadow_class: type[S]) -> S:
    """Create a target-less shadow for static members.

    :param shadow_class: Shadow interface.
    :returns: Static shadow instance.
    """
    return global_factory().static_shadow(shadow_class)


def construct_shadow(shadow_class: type[S], *args: object, unwrapper: Unwrapper | None = None) -> S:
    """Construct a target instance through a matching constructor and bind it.

    :param shadow_class: Shadow interface.
    :param args: Constructor arguments.
    :param unwrapper: Optional argument unwrapper.
    :returns: Shadow bound to the new target.
    """
    return global_factory().construct_shadow(shadow_class, *args, unwrapper=unwrapper)


def register_target_resolver(resolver: TargetResolver) -> bool:
    """Register a resolver on the shared factory, ahead of all others.

    :param resolver: Resolver to register.
    :returns: ``False`` when already registered.
    """
    return global_factory().register_target_resolver(resolver)
