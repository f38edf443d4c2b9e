"""Per-interface binding registry resolving shadow methods to target members."""

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import TYPE_CHECKING

from shadowlink.cache import LoadingMap
from shadowlink.errors import NoSuchMemberError
from shadowlink.errors import StaticMismatchError
from shadowlink.introspection import CandidateSignature
from shadowlink.introspection import FieldInfo
from shadowlink.introspection import find_field
from shadowlink.matching import find_constructor
from shadowlink.matching import find_method
from shadowlink.methods import ShadowMethod
from shadowlink.methods import collect_shadow_methods

if TYPE_CHECKING:
    from shadowlink.runtime import ShadowFactory

_LOG: logging.Logger = logging.getLogger("shadowlink.definition")


@dataclass(frozen=True)
class MethodKey:
    """Method cache key; only the shadow method takes part in equality."""

    shadow_method: ShadowMethod
    is_static: bool = dataclass_field(compare=False)
    argument_types: tuple[type, ...] = dataclass_field(compare=False)


@dataclass(frozen=True)
class FieldKey:
    """Field cache key; only the shadow method takes part in equality."""

    shadow_method: ShadowMethod
    is_static: bool = dataclass_field(compare=False)


@dataclass(frozen=True)
class ConstructorKey:
    """Constructor cache key over the ordered argument types."""

    argument_types: tuple[type, ...]


class ResolvedMethod:
    """A target method bound to one shadow method."""

    signature: CandidateSignature
    target_class: type
    _static_handle: object

    def __init__(self, signature: CandidateSignature, target_class: type) -> None:
        """Initialize a resolved method.

        :param signature: Matched candidate signature.
        :param target_class: Resolved target class.
        """
        self.signature = signature
        self.target_class = target_class
        self._static_handle = None
        if signature.is_static is True:
            self._static_handle = getattr(target_class, signature.name)

    @property
    def name(self) -> str:
        """Return the stored member name.

        :returns: Member name.
        """
        return self.signature.name

    def invoke(self, target: object, arguments: list[object]) -> object:
        """Call the method.

        :param target: Bound target, ignored for static methods.
        :param arguments: Positional arguments.
        :returns: Method result.
        """
        if self._static_handle is not None:
            return self._static_handle(*arguments)  # type: ignore[operator]
        return getattr(target, self.signature.name)(*arguments)

    def __repr__(self) -> str:
        return f"ResolvedMethod({self.signature.declaring_class.__qualname__}.{self.signature.name})"


class ResolvedField:
    """A target field bound to one shadow accessor."""

    info: FieldInfo

    def __init__(self, info: FieldInfo) -> None:
        """Initialize a resolved field.

        :param info: Located field.
        """
        self.info = info

    @property
    def name(self) -> str:
        """Return the stored field name.

        :returns: Field name.
        """
        return self.info.name

    def get(self, target: object) -> object:
        """Read the field.

        :param target: Bound target, ignored for static fields.
        :returns: Current value.
        """
        if self.info.is_static is True:
            return getattr(self.info.declaring_class, self.info.name)
        return getattr(target, self.info.name)

    def set(self, target: object, value: object) -> None:
        """Write the field, bypassing ``__setattr__`` overrides on frozen targets.

        :param target: Bound target, ignored for static fields.
        :param value: New value.
        """
        if self.info.is_static is True:
            type.__setattr__(self.info.declaring_class, self.info.name, value)
            return
        object.__setattr__(target, self.info.name, value)

    def __repr__(self) -> str:
        return f"ResolvedField({self.info.declaring_class.__qualname__}.{self.info.name})"


class ResolvedConstructor:
    """A matched constructor shape of the target class."""

    signature: CandidateSignature
    target_class: type

    def __init__(self, signature: CandidateSignature, target_class: type) -> None:
        """Initialize a resolved constructor.

        :param signature: Matched candidate signature.
        :param target_class: Class to instantiate.
        """
        self.signature = signature
        self.target_class = target_class

    def invoke(self, arguments: list[object]) -> object:
        """Create a new target instance.

        :param arguments: Positional constructor arguments.
        :returns: New target instance.
        """
        return self.target_class(*arguments)

    def __repr__(self) -> str:
        return f"ResolvedConstructor({self.target_class.__qualname__})"


def _describe_types(argument_types: tuple[type, ...]) -> str:
    return "(" + ", ".join(argument_type.__qualname__ for argument_type in argument_types) + ")"


class ShadowDefinition:
    """Binding of one shadow interface to its target class.

    Each member is resolved on first use and memoized. Method and field
    resolutions are keyed by the declared shadow method alone, so the argument
    types of the first call decide the overload used by every later call.
    """

    shadow_factory: "ShadowFactory"
    shadow_class: type
    target_class: type
    shadow_methods: dict[str, ShadowMethod]
    proxy_class: type | None
    _methods: LoadingMap[MethodKey, ResolvedMethod]
    _fields: LoadingMap[FieldKey, ResolvedField]
    _constructors: LoadingMap[ConstructorKey, ResolvedConstructor]

    def __init__(self, shadow_factory: "ShadowFactory", shadow_class: type, target_class: type) -> None:
        """Initialize a definition.

        :param shadow_factory: Owning factory; supplies the resolver chain.
        :param shadow_class: Shadow interface.
        :param target_class: Resolved target class.
        """
        self.shadow_factory = shadow_factory
        self.shadow_class = shadow_class
        self.target_class = target_class
        self.shadow_methods = collect_shadow_methods(shadow_class)
        self.proxy_class = None
        self._methods = LoadingMap(self._load_target_method)
        self._fields = LoadingMap(self._load_target_field)
        self._constructors = LoadingMap(self._load_target_constructor)

    def find_target_method(self, shadow_method: ShadowMethod, argument_types: tuple[type, ...]) -> ResolvedMethod:
        """Return the target method for ``shadow_method``.

        :param shadow_method: Shadow method descriptor.
        :param argument_types: Runtime argument types of the current call.
        :returns: Resolved method.
        :raises NoSuchMemberError: If no compatible method exists.
        :raises StaticMismatchError: If the static marker disagrees with the target.
        """
        return self._methods.get(MethodKey(shadow_method, shadow_method.is_static, tuple(argument_types)))

    def find_target_field(self, shadow_method: ShadowMethod) -> ResolvedField:
        """Return the target field for accessor ``shadow_method``.

        :param shadow_method: Shadow accessor descriptor.
        :returns: Resolved field.
        :raises NoSuchMemberError: If no field is declared.
        :raises StaticMismatchError: If the static marker disagrees with the target.
        """
        return self._fields.get(FieldKey(shadow_method, shadow_method.is_static))

    def find_target_constructor(self, argument_types: tuple[type, ...]) -> ResolvedConstructor:
        """Return the target constructor accepting ``argument_types``.

        :param argument_types: Runtime argument types.
        :returns: Resolved constructor.
        :raises NoSuchMemberError: If no constructor shape accepts the arguments.
        """
        return self._constructors.get(ConstructorKey(tuple(argument_types)))

    def _load_target_method(self, key: MethodKey) -> ResolvedMethod:
        shadow_method: ShadowMethod = key.shadow_method
        method_name: str | None = self.shadow_factory.target_lookup.lookup_method(
            shadow_method, self.shadow_class, self.target_class
        )
        if method_name is None:
            method_name = shadow_method.name

        signature: CandidateSignature | None = find_method(self.target_class, method_name, key.argument_types)
        if signature is None:
            raise NoSuchMemberError(
                f"No method {self.target_class.__qualname__}.{method_name} accepts "
                + _describe_types(key.argument_types)
            )
        if key.is_static is True and signature.is_static is False:
            raise StaticMismatchError(
                f"Shadow method {shadow_method!r} is marked as static, but the target method "
                + f"{signature.declaring_class.__qualname__}.{signature.name} is not."
            )
        if key.is_static is False and signature.is_static is True:
            raise StaticMismatchError(
                f"Shadow method {shadow_method!r} is not marked as static, but the target method "
                + f"{signature.declaring_class.__qualname__}.{signature.name} is."
            )

        resolved: ResolvedMethod = ResolvedMethod(signature, self.target_class)
        _LOG.debug("Resolved %r to %r", shadow_method, resolved)
        return resolved

    def _load_target_field(self, key: FieldKey) -> ResolvedField:
        shadow_method: ShadowMethod = key.shadow_method
        field_name: str | None = self.shadow_factory.target_lookup.lookup_field(
            shadow_method, self.shadow_class, self.target_class
        )
        if field_name is None:
            field_name = shadow_method.name

        info: FieldInfo | None = find_field(self.target_class, field_name)
        if info is None:
            raise NoSuchMemberError(f"No field {self.target_class.__qualname__}#{field_name}")
        if key.is_static is True and info.is_static is False:
            raise StaticMismatchError(
                f"Shadow method {shadow_method!r} is marked as static, but the target field "
                + f"{info.declaring_class.__qualname__}.{info.name} is not."
            )
        if key.is_static is False and info.is_static is True:
            raise StaticMismatchError(
                f"Shadow method {shadow_method!r} is not marked as static, but the target field "
                + f"{info.declaring_class.__qualname__}.{info.name} is."
            )

        resolved: ResolvedField = ResolvedField(info)
        _LOG.debug("Resolved %r to %r", shadow_method, resolved)
        return resolved

    def _load_target_constructor(self, key: ConstructorKey) -> ResolvedConstructor:
        signature: CandidateSignature | None = find_constructor(self.target_class, key.argument_types)
        if signature is None:
            raise NoSuchMemberError(
                f"No constructor {self.target_class.__qualname__}{_describe_types(key.argument_types)}"
            )
        resolved: ResolvedConstructor = ResolvedConstructor(signature, self.target_class)
        _LOG.debug("Resolved constructor %s for %r", _describe_types(key.argument_types), resolved)
        return resolved

    def __repr__(self) -> str:
        return f"ShadowDefinition({self.shadow_class.__qualname__} -> {self.target_class.__qualname__})"
