"""Tests for the introspection helpers over target classes."""

import enum
import typing
from typing import ClassVar
from typing import NewType
from typing import Optional

import pytest

from shadowlink.errors import ShadowConfigurationError
from shadowlink.introspection import FieldInfo
from shadowlink.introspection import NoneType
from shadowlink.introspection import find_field
from shadowlink.introspection import get_instance
from shadowlink.introspection import load_class
from shadowlink.introspection import mangle_name
from shadowlink.introspection import normalize_annotation
from tests.fixtures.targets import Greeter
from tests.fixtures.targets import Locker
from tests.fixtures.targets import LoudGreeter
from tests.fixtures.targets import Point
from tests.fixtures.targets import Registry
from tests.fixtures.targets import Vector

UserId = NewType("UserId", int)


class Policy:
    """Base type for instance lookups."""


class FactoryPolicy(Policy):
    """Offers every lookup rule; the factory method must win."""

    INSTANCE: ClassVar["FactoryPolicy"]
    origin: str

    def __init__(self, origin: str = "constructor") -> None:
        self.origin = origin

    @classmethod
    def get_instance(cls) -> "FactoryPolicy":
        return cls("factory")


FactoryPolicy.INSTANCE = FactoryPolicy("field")


class FieldPolicy(Policy):
    """Only reachable through its ``instance`` attribute."""

    instance: ClassVar["FieldPolicy"]
    origin: str

    def __init__(self, origin: str) -> None:
        self.origin = origin


FieldPolicy.instance = FieldPolicy("field")


class ConstructedPolicy(Policy):
    """Only reachable through its no-argument constructor."""


class UnreachablePolicy(Policy):
    """Requires constructor arguments and offers nothing else."""

    def __init__(self, required: str) -> None:
        self.required = required


class SingletonPolicy(Policy, enum.Enum):
    """Single-member enum singleton."""

    ONLY = "only"


def test_normalize_annotation() -> None:
    """Verify annotations reduce to runtime classes."""
    assert normalize_annotation(int) == (int,)
    assert normalize_annotation(None) == (NoneType,)
    assert normalize_annotation(typing.Any) == (object,)
    assert normalize_annotation(Optional[str]) == (str, NoneType)
    assert normalize_annotation(int | str) == (int, str)
    assert normalize_annotation(list[int]) == (list,)
    assert normalize_annotation(ClassVar[int]) == (int,)
    assert normalize_annotation(UserId) == (int,)
    assert normalize_annotation(typing.Literal["a", "b"]) == (str,)
    assert normalize_annotation(typing.TypeVar("T", bound=Greeter)) == (Greeter,)


def test_mangle_name() -> None:
    """Verify private-name mangling."""
    assert mangle_name(Greeter, "__secret") == "_Greeter__secret"
    assert mangle_name(Greeter, "name") == "name"
    assert mangle_name(Greeter, "__init__") == "__init__"


def test_find_field_kinds() -> None:
    """Verify annotated, private, slotted and class-level fields are located."""
    name_field: FieldInfo | None = find_field(LoudGreeter, "name")
    assert name_field == FieldInfo("name", Greeter, False)

    secret_field: FieldInfo | None = find_field(Greeter, "__secret")
    assert secret_field == FieldInfo("_Greeter__secret", Greeter, False)

    slot_field: FieldInfo | None = find_field(Vector, "dx")
    assert slot_field == FieldInfo("dx", Vector, False)

    class_field: FieldInfo | None = find_field(Registry, "total")
    assert class_field == FieldInfo("total", Registry, True)

    label_field: FieldInfo | None = find_field(Point, "ORIGIN_LABEL")
    assert label_field is not None
    assert label_field.is_static is True

    assert find_field(Greeter, "greet") is None
    assert find_field(Greeter, "missing") is None


def test_get_instance_prefers_factory_method() -> None:
    """Verify the lookup order starts with ``get_instance``."""
    produced: FactoryPolicy = get_instance(Policy, FactoryPolicy)
    assert produced.origin == "factory"


def test_get_instance_fallbacks() -> None:
    """Verify enum, field and constructor lookups."""
    assert get_instance(Policy, SingletonPolicy) is SingletonPolicy.ONLY
    assert get_instance(Policy, FieldPolicy) is FieldPolicy.instance
    assert isinstance(get_instance(Policy, ConstructedPolicy), ConstructedPolicy) is True


def test_get_instance_failures() -> None:
    """Verify unusable implementation types are configuration errors."""
    with pytest.raises(ShadowConfigurationError):
        get_instance(Policy, UnreachablePolicy)
    with pytest.raises(ShadowConfigurationError):
        get_instance(Policy, Greeter)


def test_load_class() -> None:
    """Verify both class path forms and their failures."""
    assert load_class("tests.fixtures.targets:Greeter") is Greeter
    assert load_class("tests.fixtures.targets.Point") is Point

    with pytest.raises(ShadowConfigurationError):
        load_class("tests.fixtures.targets:Missing")
    with pytest.raises(ShadowConfigurationError):
        load_class("tests.fixtures.targets:greet:extra")
    with pytest.raises(ShadowConfigurationError):
        load_class("tests.fixtures.targets:Greeter.greet")


def test_find_field_private_slots_are_instance_fields() -> None:
    """Verify private ``__slots__`` entries resolve mangled and non-static."""
    code_field: FieldInfo | None = find_field(Locker, "__code")
    assert code_field == FieldInfo("_Locker__code", Locker, False)

    owner_field: FieldInfo | None = find_field(Locker, "owner")
    assert owner_field == FieldInfo("owner", Locker, False)


def test_find_field_data_descriptors_are_instance_fields() -> None:
    """Verify class-level data descriptors are reported as instance fields."""

    class Stored:
        def __get__(self, instance: object, owner: type | None = None) -> object:
            return vars(instance).get("stored") if instance is not None else self

        def __set__(self, instance: object, value: object) -> None:
            vars(instance)["stored"] = value

    class Holder:
        value = Stored()
        LIMIT = 3

    value_field: FieldInfo | None = find_field(Holder, "value")
    assert value_field == FieldInfo("value", Holder, False)

    limit_field: FieldInfo | None = find_field(Holder, "LIMIT")
    assert limit_field == FieldInfo("LIMIT", Holder, True)
