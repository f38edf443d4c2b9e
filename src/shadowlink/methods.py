"""Descriptors for the forwarded methods of a shadow interface."""

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field as dataclass_field

from shadowlink.errors import ShadowConfigurationError
from shadowlink.introspection import NoneType
from shadowlink.introspection import safe_type_hints
from shadowlink.markers import FieldMarker
from shadowlink.markers import Marker
from shadowlink.markers import StaticMarker
from shadowlink.markers import get_markers
from shadowlink.markers import has_marker

BUILTIN_ACCESSOR_NAMES: frozenset[str] = frozenset({"shadow_class", "shadow_target"})
_FORWARDABLE_KINDS: tuple[inspect._ParameterKind, ...] = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(frozen=True)
class ShadowMethod:
    """One forwarded method of a shadow interface.

    Equality and hashing follow the underlying function object, so a method
    inherited by several interfaces is the same key everywhere.

    Attributes:
        function: Function object declared on the interface.
        name: Method name.
        declaring_class: Interface class whose body declares the method.
        signature: Call signature without ``self``.
        parameter_annotations: Resolved annotation per parameter.
        return_annotation: Resolved return annotation.
        markers: Declared markers.
    """

    function: Callable[..., object]
    name: str = dataclass_field(compare=False)
    declaring_class: type = dataclass_field(compare=False)
    signature: inspect.Signature = dataclass_field(compare=False, repr=False)
    parameter_annotations: tuple[object, ...] = dataclass_field(compare=False, repr=False)
    return_annotation: object = dataclass_field(compare=False, repr=False)
    markers: tuple[Marker, ...] = dataclass_field(compare=False, repr=False)

    @property
    def is_static(self) -> bool:
        """Report whether the method binds to a static target member.

        :returns: ``True`` when marked static.
        """
        return has_marker(self.function, StaticMarker)

    @property
    def is_field(self) -> bool:
        """Report whether the method is a field accessor.

        :returns: ``True`` when marked as a field.
        """
        return has_marker(self.function, FieldMarker)

    @property
    def returns_nothing(self) -> bool:
        """Report whether the declared return type is ``None`` or undeclared.

        :returns: ``True`` when the method returns nothing.
        """
        return self.return_annotation in (None, NoneType, inspect.Signature.empty)

    def bind_arguments(self, args: tuple[object, ...], kwargs: dict[str, object]) -> list[object]:
        """Bind a call against the interface signature and flatten it positionally.

        :param args: Positional arguments as supplied.
        :param kwargs: Keyword arguments as supplied.
        :returns: Arguments in declaration order, defaults applied.
        :raises TypeError: If the call does not fit the interface signature.
        """
        if len(kwargs) == 0 and len(args) == len(self.parameter_annotations):
            return list(args)
        bound: inspect.BoundArguments = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return list(bound.arguments.values())

    def __repr__(self) -> str:
        """Return a readable method reference.

        :returns: ``Interface.method`` string.
        """
        return f"{self.declaring_class.__qualname__}.{self.name}"


def _declaring_class(shadow_class: type, name: str) -> type:
    for owner in shadow_class.__mro__:
        if name in vars(owner):
            return owner
    return shadow_class


def describe_method(shadow_class: type, name: str) -> ShadowMethod:
    """Build the descriptor for one forwarded interface method.

    :param shadow_class: Shadow interface class.
    :param name: Method name.
    :returns: Shadow method descriptor.
    :raises ShadowConfigurationError: If the member is not a plain method with positional parameters.
    """
    function: object = inspect.getattr_static(shadow_class, name)
    if inspect.isfunction(function) is False:
        raise ShadowConfigurationError(
            f"Shadow member {shadow_class.__qualname__}.{name} must be a plain method"
        )

    full_signature: inspect.Signature = inspect.signature(function)
    parameters: list[inspect.Parameter] = list(full_signature.parameters.values())[1:]
    for parameter in parameters:
        if parameter.kind not in _FORWARDABLE_KINDS:
            raise ShadowConfigurationError(
                f"Shadow method {shadow_class.__qualname__}.{name} declares unsupported "
                + f"parameter {parameter.name!r}; only positional parameters are forwarded"
            )

    hints: dict[str, object] = safe_type_hints(function)
    parameter_annotations: tuple[object, ...] = tuple(
        hints.get(parameter.name, parameter.annotation) for parameter in parameters
    )
    return ShadowMethod(
        function=function,
        name=name,
        declaring_class=_declaring_class(shadow_class, name),
        signature=full_signature.replace(parameters=parameters),
        parameter_annotations=parameter_annotations,
        return_annotation=hints.get("return", full_signature.return_annotation),
        markers=get_markers(function),
    )


def collect_shadow_methods(shadow_class: type) -> dict[str, ShadowMethod]:
    """Describe every forwarded method of a shadow interface.

    :param shadow_class: Shadow interface class.
    :returns: Descriptors keyed by method name.
    """
    abstract_names: frozenset[str] = getattr(shadow_class, "__abstractmethods__", frozenset())
    collected: dict[str, ShadowMethod] = {}
    for name in sorted(abstract_names):
        if name in BUILTIN_ACCESSOR_NAMES:
            continue
        collected[name] = describe_method(shadow_class, name)
    return collected
