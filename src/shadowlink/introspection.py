"""Introspection capability over concrete target classes.

Everything that reads Python's reflection surface (signatures, annotations,
class dictionaries, private-name mangling) lives here so the matcher and the
binding registry only deal in :class:`CandidateSignature` and
:class:`FieldInfo` values.
"""

import abc
import ctypes
import enum
import importlib
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any
from typing import ClassVar

from shadowlink.cache import LoadingMap
from shadowlink.errors import ShadowConfigurationError

NoneType: type = type(None)
AcceptedTypes = tuple[type, ...]

# ctypes scalars stand in for primitives; the value is the boxed Python type.
PRIMITIVE_WRAPPERS: dict[type, type] = {
    ctypes.c_bool: bool,
    ctypes.c_byte: int,
    ctypes.c_ubyte: int,
    ctypes.c_short: int,
    ctypes.c_ushort: int,
    ctypes.c_int: int,
    ctypes.c_uint: int,
    ctypes.c_long: int,
    ctypes.c_ulong: int,
    ctypes.c_longlong: int,
    ctypes.c_ulonglong: int,
    ctypes.c_float: float,
    ctypes.c_double: float,
    ctypes.c_longdouble: float,
    ctypes.c_char: bytes,
    ctypes.c_wchar: str,
}
_POSITIONAL_KINDS: tuple[inspect._ParameterKind, ...] = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)
_UNION_ORIGINS: tuple[object, ...] = (typing.Union, types.UnionType)
_INSTANCE_FIELD_NAMES: tuple[str, ...] = ("instance", "INSTANCE")


def primitive_wrapper(primitive_type: type) -> type | None:
    """Return the boxed counterpart of a primitive-like type.

    :param primitive_type: Candidate primitive-like type.
    :returns: Boxed Python type, or ``None`` when not primitive-like.
    """
    return PRIMITIVE_WRAPPERS.get(primitive_type)


def is_interface_type(candidate: type) -> bool:
    """Report whether ``candidate`` is an interface (an ABC or protocol).

    :param candidate: Type to inspect.
    :returns: ``True`` for classes created by ``abc.ABCMeta``.
    """
    return isinstance(candidate, abc.ABCMeta)


def normalize_annotation(annotation: object) -> AcceptedTypes:
    """Reduce a type annotation to the runtime classes it accepts.

    :param annotation: Resolved annotation object.
    :returns: Tuple of accepted runtime classes.
    """
    if annotation is None or annotation is NoneType:
        return (NoneType,)
    if annotation is inspect.Parameter.empty or annotation is Any:
        return (object,)
    if isinstance(annotation, typing.TypeVar):
        bound: object = annotation.__bound__
        if bound is None:
            return (object,)
        return normalize_annotation(bound)
    supertype: object = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return normalize_annotation(supertype)

    origin: object = typing.get_origin(annotation)
    if origin in _UNION_ORIGINS:
        accepted: list[type] = []
        for member in typing.get_args(annotation):
            for member_type in normalize_annotation(member):
                if member_type not in accepted:
                    accepted.append(member_type)
        return tuple(accepted)
    if origin is typing.Annotated or origin is ClassVar or origin is typing.Final:
        return normalize_annotation(typing.get_args(annotation)[0])
    if origin is typing.Literal:
        literal_types: list[type] = []
        for value in typing.get_args(annotation):
            if type(value) not in literal_types:
                literal_types.append(type(value))
        return tuple(literal_types)
    if isinstance(origin, type) is True:
        return (origin,)
    if isinstance(annotation, type) is True:
        return (annotation,)
    return (object,)


def representative_type(accepted: AcceptedTypes) -> type:
    """Pick the type used in place of a ``None`` argument.

    :param accepted: Accepted classes of a declared parameter.
    :returns: First non-``None`` accepted class.
    """
    for candidate in accepted:
        if candidate is not NoneType:
            return candidate
    return object


def mangle_name(owner: type, name: str) -> str:
    """Apply private-name mangling for ``name`` as declared in ``owner``.

    :param owner: Class the name is declared in.
    :param name: Source-level member name.
    :returns: Name as stored in the class or instance dictionary.
    """
    is_private: bool = name.startswith("__") and name.endswith("__") is False
    if is_private is False:
        return name
    stripped_owner: str = owner.__name__.lstrip("_")
    if len(stripped_owner) == 0:
        return name
    return f"_{stripped_owner}{name}"


def safe_type_hints(function: object) -> dict[str, object]:
    """Resolve annotations, falling back to raw values for unresolved forward refs.

    :param function: Function to inspect.
    :returns: Mapping of parameter name to annotation.
    """
    try:
        return typing.get_type_hints(function)
    except (NameError, TypeError, AttributeError):
        return dict(getattr(function, "__annotations__", {}))


@dataclass(frozen=True)
class CandidateSignature:
    """One callable shape a target member can be invoked with.

    Attributes:
        name: Member name as stored in the declaring class.
        member: Raw class-dictionary entry (function, staticmethod, classmethod).
        declaring_class: Class whose dictionary holds ``member``.
        parameter_types: Accepted classes per positional parameter.
        required_count: Number of positional parameters without defaults.
        variadic_types: Accepted classes of ``*args``, if declared.
        is_static: ``True`` for static and class methods.
    """

    name: str
    member: object
    declaring_class: type
    parameter_types: tuple[AcceptedTypes, ...]
    required_count: int
    variadic_types: AcceptedTypes | None
    is_static: bool

    def accepts(self, count: int) -> bool:
        """Report whether ``count`` positional arguments fit this shape.

        :param count: Number of supplied arguments.
        :returns: ``True`` when the arity is acceptable.
        """
        if count < self.required_count:
            return False
        if count <= len(self.parameter_types):
            return True
        return self.variadic_types is not None

    def parameter_types_for(self, count: int) -> tuple[AcceptedTypes, ...]:
        """Return the declared accepted classes for the first ``count`` arguments.

        :param count: Number of supplied arguments.
        :returns: Accepted classes per argument.
        """
        declared: tuple[AcceptedTypes, ...] = self.parameter_types[:count]
        missing: int = count - len(declared)
        if missing <= 0 or self.variadic_types is None:
            return declared
        return declared + (self.variadic_types,) * missing


def _build_signature(
    shape: object,
    name: str,
    member: object,
    declaring_class: type,
    skip_first: bool,
    is_static: bool,
) -> CandidateSignature | None:
    """Build one candidate from a function-like ``shape``.

    :returns: Candidate, or ``None`` when the shape cannot be called positionally.
    """
    try:
        signature: inspect.Signature = inspect.signature(shape)
    except (TypeError, ValueError):
        return None

    hints: dict[str, object] = safe_type_hints(shape)
    parameters: list[inspect.Parameter] = list(signature.parameters.values())
    if skip_first is True and len(parameters) > 0 and parameters[0].kind in _POSITIONAL_KINDS:
        parameters = parameters[1:]

    parameter_types: list[AcceptedTypes] = []
    required_count: int = 0
    variadic_types: AcceptedTypes | None = None
    for parameter in parameters:
        annotation: object = hints.get(parameter.name, parameter.annotation)
        if parameter.kind in _POSITIONAL_KINDS:
            parameter_types.append(normalize_annotation(annotation))
            if parameter.default is inspect.Parameter.empty:
                required_count += 1
        elif parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic_types = normalize_annotation(annotation)
        elif parameter.kind is inspect.Parameter.KEYWORD_ONLY:
            if parameter.default is inspect.Parameter.empty:
                return None

    return CandidateSignature(
        name=name,
        member=member,
        declaring_class=declaring_class,
        parameter_types=tuple(parameter_types),
        required_count=required_count,
        variadic_types=variadic_types,
        is_static=is_static,
    )


def _signatures_for_member(
    member: object,
    name: str,
    declaring_class: type,
    skip_first: bool,
    is_static: bool,
) -> list[CandidateSignature]:
    function: object = member
    if isinstance(member, (staticmethod, classmethod)) is True:
        function = member.__func__
    if callable(function) is False or inspect.isclass(function) is True:
        return []

    shapes: list[object] = []
    if inspect.isfunction(function) is True:
        shapes = list(typing.get_overloads(function))
    if len(shapes) == 0:
        shapes = [function]

    signatures: list[CandidateSignature] = []
    for shape in shapes:
        built: CandidateSignature | None = _build_signature(
            shape, name, member, declaring_class, skip_first, is_static
        )
        if built is not None:
            signatures.append(built)
    return signatures


def declared_method_signatures(owner: type, name: str) -> list[CandidateSignature]:
    """List method shapes declared directly on ``owner`` under ``name``.

    Overload declarations come first, in declaration order; a member without
    overloads contributes its own signature.

    :param owner: Class to inspect (its ancestors are not consulted).
    :param name: Source-level method name.
    :returns: Candidate signatures.
    """
    stored_name: str = mangle_name(owner, name)
    member: object = vars(owner).get(stored_name)
    if member is None:
        return []
    if isinstance(member, property) is True:
        return []
    is_static: bool = isinstance(member, (staticmethod, classmethod))
    skip_first: bool = isinstance(member, staticmethod) is False
    return _signatures_for_member(member, stored_name, owner, skip_first, is_static)


def declared_constructor_signatures(target_class: type) -> list[CandidateSignature]:
    """List the shapes of the effective constructor of ``target_class``.

    :param target_class: Class to construct.
    :returns: Candidate signatures of ``__init__`` (or ``__new__``).
    """
    for owner in target_class.__mro__:
        if owner is object:
            break
        namespace: dict[str, object] = vars(owner)
        for hook_name in ("__init__", "__new__"):
            member: object = namespace.get(hook_name)
            if member is None:
                continue
            return _signatures_for_member(member, hook_name, owner, True, False)

    return [
        CandidateSignature(
            name="__init__",
            member=object.__init__,
            declaring_class=object,
            parameter_types=(),
            required_count=0,
            variadic_types=None,
            is_static=False,
        )
    ]


@dataclass(frozen=True)
class FieldInfo:
    """A declared field located on a target class.

    Attributes:
        name: Attribute name as stored (after private-name mangling).
        declaring_class: Class declaring the field.
        is_static: ``True`` for class-level fields.
    """

    name: str
    declaring_class: type
    is_static: bool


def _is_class_var(annotation: object) -> bool:
    if isinstance(annotation, str) is True:
        return annotation.startswith("ClassVar") or annotation.startswith("typing.ClassVar")
    if annotation is ClassVar:
        return True
    return typing.get_origin(annotation) is ClassVar


def _declared_slots(owner: type) -> tuple[str, ...]:
    """Return the slot names of ``owner`` as stored, private names mangled."""
    slots: object = vars(owner).get("__slots__", ())
    if isinstance(slots, str) is True:
        slots = (slots,)
    return tuple(mangle_name(owner, slot) for slot in slots)


def find_field(target_class: type, name: str) -> FieldInfo | None:
    """Find the first declaration of field ``name`` along the MRO.

    A field is declared by a class-level annotation, a ``__slots__`` entry, or
    a plain (non-callable) class attribute.

    :param target_class: Class to search.
    :param name: Source-level field name.
    :returns: Field info, or ``None`` when no class declares the field.
    """
    for owner in target_class.__mro__:
        if owner is object:
            break
        stored_name: str = mangle_name(owner, name)
        annotations: dict[str, object] = inspect.get_annotations(owner)
        if stored_name in annotations:
            is_static: bool = _is_class_var(annotations[stored_name])
            return FieldInfo(stored_name, owner, is_static)
        if stored_name in _declared_slots(owner):
            return FieldInfo(stored_name, owner, False)
        namespace: dict[str, object] = vars(owner)
        if stored_name in namespace:
            value: object = namespace[stored_name]
            is_routine: bool = isinstance(value, (staticmethod, classmethod, property)) or inspect.isroutine(value)
            if is_routine is True:
                continue
            # slot members and other data descriptors store per-instance values
            if inspect.isdatadescriptor(value) is True:
                return FieldInfo(stored_name, owner, False)
            return FieldInfo(stored_name, owner, True)
    return None


def _requires_arguments(function: object) -> bool:
    try:
        signature: inspect.Signature = inspect.signature(function)
    except (TypeError, ValueError):
        return True
    for parameter in signature.parameters.values():
        is_variadic: bool = parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        if is_variadic is False and parameter.default is inspect.Parameter.empty:
            return True
    return False


def get_instance(return_type: type, implementation_type: type) -> Any:
    """Obtain an instance of ``implementation_type``.

    Tried in order: a no-argument static or class method ``get_instance``; the
    only member of a single-member enum; a class attribute ``instance`` or
    ``INSTANCE`` holding an instance; a no-argument constructor.

    :param return_type: Type the instance must satisfy.
    :param implementation_type: Implementation class.
    :returns: Instance of ``implementation_type``.
    :raises ShadowConfigurationError: If no rule applies.
    """
    if inspect.isclass(implementation_type) is False:
        raise ShadowConfigurationError(f"{implementation_type!r} is not a class")
    if issubclass(implementation_type, return_type) is False:
        raise ShadowConfigurationError(
            f"{implementation_type.__qualname__} does not implement {return_type.__qualname__}"
        )

    factory: object = vars(implementation_type).get("get_instance")
    if isinstance(factory, (staticmethod, classmethod)) is True:
        bound_factory: object = getattr(implementation_type, "get_instance")
        if _requires_arguments(bound_factory) is False:
            produced: object = bound_factory()  # type: ignore[operator]
            if isinstance(produced, return_type) is True:
                return produced

    if issubclass(implementation_type, enum.Enum) is True:
        members: list[enum.Enum] = list(implementation_type)
        if len(members) == 1:
            return members[0]

    for field_name in _INSTANCE_FIELD_NAMES:
        value: object = vars(implementation_type).get(field_name)
        if value is not None and isinstance(value, return_type) is True:
            return value

    is_constructible: bool = (
        inspect.isabstract(implementation_type) is False
        and issubclass(implementation_type, enum.Enum) is False
        and _requires_arguments(implementation_type) is False
    )
    if is_constructible is True:
        return implementation_type()

    raise ShadowConfigurationError(f"Unable to obtain an instance of {implementation_type.__qualname__}")


def _parse_class_path(class_path: str) -> tuple[str, str] | None:
    """Split ``module.path:ClassName`` targets.

    :param class_path: Raw class path.
    :returns: ``(module_name, class_qualname)`` or ``None`` for dotted paths.
    :raises ShadowConfigurationError: If the colon form is malformed.
    """
    if ":" not in class_path:
        return None
    parts: list[str] = class_path.split(":")
    if len(parts) != 2:
        raise ShadowConfigurationError("Class path must use module.path:ClassName format")
    module_name: str = parts[0].strip()
    class_qualname: str = parts[1].strip()
    if len(module_name) == 0:
        raise ShadowConfigurationError("Module path in class path cannot be empty")
    if len(class_qualname) == 0:
        raise ShadowConfigurationError("Class name in class path cannot be empty")
    return module_name, class_qualname


def _resolve_qualname(module: types.ModuleType, class_qualname: str) -> object:
    resolved: object = module
    for part in class_qualname.split("."):
        resolved = getattr(resolved, part)
    return resolved


def load_class(class_path: str) -> type:
    """Import a class from ``module.path:ClassName`` or ``module.path.ClassName``.

    :param class_path: Importable class path.
    :returns: The class object.
    :raises ShadowConfigurationError: If the class cannot be imported.
    """
    parsed: tuple[str, str] | None = _parse_class_path(class_path)
    attempts: list[tuple[str, str]] = []
    if parsed is not None:
        attempts.append(parsed)
    else:
        parts: list[str] = class_path.split(".")
        for split_index in range(len(parts) - 1, 0, -1):
            attempts.append((".".join(parts[:split_index]), ".".join(parts[split_index:])))

    for module_name, class_qualname in attempts:
        try:
            module: types.ModuleType = importlib.import_module(module_name)
            resolved: object = _resolve_qualname(module, class_qualname)
        except (ImportError, AttributeError):
            continue
        if inspect.isclass(resolved) is True:
            return resolved
        raise ShadowConfigurationError(f"{class_path} does not name a class")

    raise ShadowConfigurationError(f"Class not found: {class_path}")


_SHARED_INSTANCES: LoadingMap[tuple[type, type], Any] = LoadingMap(lambda key: get_instance(key[0], key[1]))


def shared_instance(return_type: type, implementation_type: type) -> Any:
    """Return the memoized :func:`get_instance` result for ``implementation_type``.

    :param return_type: Type the instance must satisfy.
    :param implementation_type: Implementation class.
    :returns: Shared instance.
    """
    return _SHARED_INSTANCES.get((return_type, implementation_type))
