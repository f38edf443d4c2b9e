"""Dispatch layer and factory for synthesized shadow instances."""

import logging
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from typing import ClassVar
from typing import TypeVar

from shadowlink.base import Shadow
from shadowlink.base import is_shadow_class
from shadowlink.base import shadow_type_of
from shadowlink.cache import LoadingMap
from shadowlink.definition import ResolvedConstructor
from shadowlink.definition import ResolvedField
from shadowlink.definition import ResolvedMethod
from shadowlink.definition import ShadowDefinition
from shadowlink.errors import ShadowConfigurationError
from shadowlink.errors import ShadowError
from shadowlink.errors import ShadowInvocationError
from shadowlink.introspection import normalize_annotation
from shadowlink.introspection import representative_type
from shadowlink.methods import ShadowMethod
from shadowlink.resolvers import TargetLookup
from shadowlink.resolvers import TargetResolver
from shadowlink.strategies import ForShadows
from shadowlink.strategies import Unwrapper
from shadowlink.strategies import Wrapper
from shadowlink.strategies import resolve_unwrapper
from shadowlink.strategies import resolve_wrapper

_LOG: logging.Logger = logging.getLogger("shadowlink.runtime")

S = TypeVar("S", bound=Shadow)


def argument_types_of(arguments: Sequence[object], fallback_types: Sequence[object] | None) -> tuple[type, ...]:
    """Return the runtime type of each argument.

    A ``None`` argument takes the type of its declared parameter, or ``object``.

    :param arguments: Unwrapped arguments.
    :param fallback_types: Unwrapped declared parameter annotations.
    :returns: Argument types.
    """
    types: list[type] = []
    for index, argument in enumerate(arguments):
        if argument is not None:
            types.append(type(argument))
            continue
        if fallback_types is None:
            types.append(object)
            continue
        types.append(representative_type(normalize_annotation(fallback_types[index])))
    return tuple(types)


def _declared_type_of(argument: object) -> object:
    if isinstance(argument, Shadow) is True:
        return argument.shadow_class  # type: ignore[union-attr]
    if argument is None:
        return object
    if isinstance(argument, (list, tuple)) is True:
        element_classes: set[type] = {
            item.shadow_class  # type: ignore[union-attr]
            for item in argument  # type: ignore[union-attr]
            if isinstance(item, Shadow) is True
        }
        non_null: list[object] = [item for item in argument if item is not None]  # type: ignore[union-attr]
        if len(element_classes) == 1 and len(non_null) > 0 and all(isinstance(item, Shadow) for item in non_null):
            element_class: type = next(iter(element_classes))
            if isinstance(argument, tuple) is True:
                return tuple[element_class, ...]  # type: ignore[valid-type]
            return list[element_class]  # type: ignore[valid-type]
    return type(argument)


class ShadowProxyBase:
    """Base of every synthesized shadow class.

    Identity, equality, hashing and ``repr`` depend on the shadow interface
    and the bound target only; they are never forwarded to the target.
    """

    _shadow_definition: ClassVar[ShadowDefinition]
    _shadow_handler: ClassVar["ShadowInvocationHandler"]
    _shadow_target: object

    def __init__(self) -> None:
        """Prevent direct initialization.

        :raises ShadowError: Always.
        """
        raise ShadowError("Shadow instances are created by a ShadowFactory only")

    @property
    def shadow_class(self) -> type[Shadow]:
        return self._shadow_definition.shadow_class  # type: ignore[return-value]

    @property
    def shadow_target(self) -> object:
        return self._shadow_target

    def __eq__(self, other: object) -> bool:
        if other is self:
            return True
        if isinstance(other, Shadow) is False:
            return False
        if self.shadow_class is not other.shadow_class:  # type: ignore[union-attr]
            return False
        return bool(self._shadow_target == other.shadow_target)  # type: ignore[union-attr]

    def __ne__(self, other: object) -> bool:
        return self.__eq__(other) is False

    def __hash__(self) -> int:
        try:
            target_hash: int = hash(self._shadow_target)
        except TypeError:
            return hash(self.shadow_class)
        return hash(self.shadow_class) ^ target_hash

    def __repr__(self) -> str:
        return (
            f"Shadow(shadow_class={self.shadow_class.__qualname__}, "
            + f"target_class={self._shadow_definition.target_class.__qualname__}, "
            + f"target={self._shadow_target!r})"
        )


class ShadowInvocationHandler:
    """Routes calls on synthesized instances to resolved target members."""

    shadow_factory: "ShadowFactory"
    definition: ShadowDefinition

    def __init__(self, shadow_factory: "ShadowFactory", definition: ShadowDefinition) -> None:
        """Initialize a handler for one definition.

        :param shadow_factory: Factory used for nested wrapping.
        :param definition: Definition the handled proxies belong to.
        """
        self.shadow_factory = shadow_factory
        self.definition = definition

    def invoke(
        self,
        proxy: ShadowProxyBase,
        shadow_method: ShadowMethod,
        args: tuple[object, ...],
        kwargs: dict[str, object],
    ) -> object:
        """Forward one interface call.

        :param proxy: Synthesized instance the call was made on.
        :param shadow_method: Called interface method.
        :param args: Positional arguments.
        :param kwargs: Keyword arguments.
        :returns: Wrapped result.
        :raises ShadowConfigurationError: If the call cannot be bound.
        :raises ShadowInvocationError: If the target member raises.
        """
        arguments: list[object] = shadow_method.bind_arguments(args, kwargs)
        if shadow_method.is_field is True:
            return self._invoke_field(proxy, shadow_method, arguments)
        return self._invoke_method(proxy, shadow_method, arguments)

    def _bound_target(self, proxy: ShadowProxyBase, shadow_method: ShadowMethod) -> object:
        if shadow_method.is_static is True:
            return None
        target: object = proxy.shadow_target
        if target is None:
            raise ShadowConfigurationError("Cannot call non-static method from a static shadow instance.")
        return target

    def _call(self, member_name: str, function: Callable[..., object], *args: object) -> object:
        try:
            return function(*args)
        except Exception as exc:
            raise ShadowInvocationError(
                self.definition.shadow_class,
                self.definition.target_class,
                member_name,
                exc,
            ) from exc

    def _invoke_field(self, proxy: ShadowProxyBase, shadow_method: ShadowMethod, arguments: list[object]) -> object:
        if len(arguments) > 1:
            raise ShadowConfigurationError(
                "Unable to determine accessor type (getter/setter) for "
                + f"{self.definition.target_class.__qualname__}#{shadow_method.name}"
            )

        resolved_field: ResolvedField = self.definition.find_target_field(shadow_method)
        target: object = self._bound_target(proxy, shadow_method)
        if len(arguments) == 0:
            value: object = self._call(resolved_field.name, resolved_field.get, target)
            wrapper: Wrapper = resolve_wrapper(shadow_method)
            return wrapper.wrap(value, shadow_method.return_annotation, self.shadow_factory)

        unwrapper: Unwrapper = resolve_unwrapper(shadow_method)
        unwrapped_type: object = unwrapper.unwrap_type(shadow_method.parameter_annotations[0], self.shadow_factory)
        new_value: object = unwrapper.unwrap(arguments[0], unwrapped_type, self.shadow_factory)
        self._call(resolved_field.name, resolved_field.set, target, new_value)

        if shadow_method.returns_nothing is True:
            return None
        chained_class: type[Shadow] | None = shadow_type_of(shadow_method.return_annotation)
        if chained_class is not None and isinstance(proxy, chained_class) is True:
            return proxy
        return resolve_wrapper(shadow_method).wrap(target, shadow_method.return_annotation, self.shadow_factory)

    def _invoke_method(self, proxy: ShadowProxyBase, shadow_method: ShadowMethod, arguments: list[object]) -> object:
        unwrapper: Unwrapper = resolve_unwrapper(shadow_method)
        parameter_types: list[object] = unwrapper.unwrap_all_types(
            shadow_method.parameter_annotations, self.shadow_factory
        )
        unwrapped_arguments: list[object] = unwrapper.unwrap_all(arguments, parameter_types, self.shadow_factory)
        argument_types: tuple[type, ...] = argument_types_of(unwrapped_arguments, parameter_types)

        resolved_method: ResolvedMethod = self.definition.find_target_method(shadow_method, argument_types)
        target: object = self._bound_target(proxy, shadow_method)
        result: object = self._call(resolved_method.name, resolved_method.invoke, target, unwrapped_arguments)

        wrapper: Wrapper = resolve_wrapper(shadow_method)
        return wrapper.wrap(result, shadow_method.return_annotation, self.shadow_factory)


def _make_forwarder(shadow_method: ShadowMethod) -> Callable[..., object]:
    def forwarder(self: ShadowProxyBase, *args: object, **kwargs: object) -> object:
        return self._shadow_handler.invoke(self, shadow_method, args, kwargs)

    forwarder.__name__ = shadow_method.name
    forwarder.__qualname__ = f"{shadow_method.declaring_class.__qualname__}.{shadow_method.name}"
    forwarder.__doc__ = shadow_method.function.__doc__
    return forwarder


def _build_proxy_class(shadow_factory: "ShadowFactory", definition: ShadowDefinition) -> type:
    """Build the synthesized class implementing a shadow interface.

    :param shadow_factory: Owning factory.
    :param definition: Definition of the interface.
    :returns: Proxy class.
    """
    shadow_class: type = definition.shadow_class
    namespace: dict[str, object] = {
        "__module__": "shadowlink.runtime",
        "__qualname__": f"{shadow_class.__qualname__}Shadow",
        "__doc__": f"Synthesized shadow of {shadow_class.__qualname__} bound to {definition.target_class.__qualname__}.",
        "_shadow_definition": definition,
        "_shadow_handler": ShadowInvocationHandler(shadow_factory, definition),
    }
    for name, shadow_method in definition.shadow_methods.items():
        namespace[name] = _make_forwarder(shadow_method)

    metaclass: type = type(shadow_class)
    proxy_class: type = metaclass(f"{shadow_class.__name__}Shadow", (ShadowProxyBase, shadow_class), namespace)
    return proxy_class


class ShadowFactory:
    """Creates shadow instances and owns their definitions.

    Definitions, and the members they resolve, are cached for the lifetime of
    the factory.
    """

    target_lookup: TargetLookup
    _definitions: LoadingMap[type, ShadowDefinition]

    def __init__(self, resolvers: Iterable[TargetResolver] | None = None) -> None:
        """Initialize a factory.

        :param resolvers: Extra resolvers, highest priority first, consulted before the built-ins.
        """
        self.target_lookup = TargetLookup(resolvers)
        self._definitions = LoadingMap(self._init_definition)

    def definition(self, shadow_class: type) -> ShadowDefinition:
        """Return the definition of ``shadow_class``, creating it on first use.

        :param shadow_class: Shadow interface.
        :returns: Definition.
        :raises TypeError: If ``shadow_class`` is not a ``Shadow`` subclass.
        :raises ShadowConfigurationError: If no target class can be resolved.
        """
        if is_shadow_class(shadow_class) is False:
            raise TypeError(f"{shadow_class!r} is not a Shadow subclass")
        return self._definitions.get(shadow_class)

    def shadow(self, shadow_class: type[S], target: object) -> S:
        """Create a shadow bound to ``target``.

        :param shadow_class: Shadow interface.
        :param target: Target object.
        :returns: Shadow instance.
        :raises ShadowConfigurationError: If ``target`` is not an instance of the target class.
        """
        if target is None:
            raise TypeError("target must not be None")
        definition: ShadowDefinition = self.definition(shadow_class)
        if isinstance(target, definition.target_class) is False:
            raise ShadowConfigurationError(
                f"Target class {definition.target_class.__qualname__} is not assignable from "
                + f"handle class {type(target).__qualname__}"
            )
        return self._create_proxy(definition, target)  # type: ignore[return-value]

    def static_shadow(self, shadow_class: type[S]) -> S:
        """Create a shadow with no bound target, for static members only.

        :param shadow_class: Shadow interface.
        :returns: Static shadow instance.
        """
        definition: ShadowDefinition = self.definition(shadow_class)
        return self._create_proxy(definition, None)  # type: ignore[return-value]

    def construct_shadow(self, shadow_class: type[S], *args: object, unwrapper: Unwrapper | None = None) -> S:
        """Construct a new target instance and return a shadow bound to it.

        Arguments carry no declared annotations, so each one is described by its
        runtime type. A non-empty list or tuple whose elements are all shadows
        of one interface ``S`` is described as ``list[S]`` or ``tuple[S, ...]``,
        which lets :class:`ForShadowArrays` unwrap it.

        :param shadow_class: Shadow interface.
        :param args: Constructor arguments; shadows are unwrapped to their targets.
        :param unwrapper: Argument unwrapper, :class:`ForShadows` by default.
        :returns: Shadow bound to the new target.
        :raises NoSuchMemberError: If no constructor accepts the arguments.
        :raises ShadowInvocationError: If the constructor raises.
        """
        if unwrapper is None:
            unwrapper = ForShadows.INSTANCE
        definition: ShadowDefinition = self.definition(shadow_class)

        declared_types: list[object] = [_declared_type_of(argument) for argument in args]
        parameter_types: list[object] = unwrapper.unwrap_all_types(declared_types, self)
        unwrapped_arguments: list[object] = unwrapper.unwrap_all(list(args), parameter_types, self)
        argument_types: tuple[type, ...] = argument_types_of(unwrapped_arguments, parameter_types)

        constructor: ResolvedConstructor = definition.find_target_constructor(argument_types)
        try:
            instance: object = constructor.invoke(unwrapped_arguments)
        except Exception as exc:
            raise ShadowInvocationError(
                definition.shadow_class,
                definition.target_class,
                constructor.signature.name,
                exc,
            ) from exc
        return self.shadow(shadow_class, instance)

    def register_target_resolver(self, resolver: TargetResolver) -> bool:
        """Register ``resolver`` ahead of every existing resolver.

        :param resolver: Resolver to register.
        :returns: ``False`` when already registered.
        """
        return self.target_lookup.register_resolver(resolver)

    def get_target_class(self, shadow_class: type) -> type:
        """Return the target class of a shadow interface.

        Any other class is returned unchanged.

        :param shadow_class: Shadow interface or plain class.
        :returns: Target class.
        """
        if is_shadow_class(shadow_class) is False:
            return shadow_class
        return self.definition(shadow_class).target_class

    def _init_definition(self, shadow_class: type) -> ShadowDefinition:
        target_class: type | None = self.target_lookup.lookup_class(shadow_class)
        if target_class is None:
            raise ShadowConfigurationError(
                f"Shadow class {shadow_class.__qualname__} does not have a defined target class."
            )
        definition: ShadowDefinition = ShadowDefinition(self, shadow_class, target_class)
        definition.proxy_class = _build_proxy_class(self, definition)
        _LOG.debug("Created %r", definition)
        return definition

    def _create_proxy(self, definition: ShadowDefinition, target: object) -> ShadowProxyBase:
        proxy: ShadowProxyBase = object.__new__(definition.proxy_class)  # type: ignore[arg-type]
        object.__setattr__(proxy, "_shadow_target", target)
        return proxy


_GLOBAL_FACTORY: ShadowFactory = ShadowFactory()


def global_factory() -> ShadowFactory:
    """Return the shared process-wide factory.

    :returns: Shared factory.
    """
    return _GLOBAL_FACTORY
