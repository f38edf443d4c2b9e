"""Public package API for shadowlink."""

from shadowlink.api import construct_shadow
from shadowlink.api import register_target_resolver
from shadowlink.api import shadow
from shadowlink.api import static_shadow
from shadowlink.base import Shadow
from shadowlink.errors import NoSuchMemberError
from shadowlink.errors import ShadowConfigurationError
from shadowlink.errors import ShadowError
from shadowlink.errors import ShadowInvocationError
from shadowlink.errors import StaticMismatchError
from shadowlink.markers import ClassTargetFunction
from shadowlink.markers import FieldTargetFunction
from shadowlink.markers import MethodTargetFunction
from shadowlink.markers import class_target
from shadowlink.markers import dynamic_class_target
from shadowlink.markers import dynamic_field_target
from shadowlink.markers import dynamic_method_target
from shadowlink.markers import field
from shadowlink.markers import shadowing_strategy
from shadowlink.markers import static
from shadowlink.markers import target
from shadowlink.methods import ShadowMethod
from shadowlink.resolvers import MappingTargetResolver
from shadowlink.resolvers import TargetResolver
from shadowlink.runtime import ShadowFactory
from shadowlink.runtime import global_factory
from shadowlink.strategies import ForShadowArrays
from shadowlink.strategies import ForShadows
from shadowlink.strategies import Unwrapper
from shadowlink.strategies import Wrapper

__all__: list[str] = [
    "construct_shadow",
    "register_target_resolver",
    "shadow",
    "static_shadow",
    "global_factory",
    "Shadow",
    "ShadowFactory",
    "ShadowMethod",
    "TargetResolver",
    "MappingTargetResolver",
    "Wrapper",
    "Unwrapper",
    "ForShadows",
    "ForShadowArrays",
    "ClassTargetFunction",
    "MethodTargetFunction",
    "FieldTargetFunction",
    "class_target",
    "target",
    "dynamic_class_target",
    "dynamic_method_target",
    "dynamic_field_target",
    "static",
    "field",
    "shadowing_strategy",
    "ShadowError",
    "ShadowConfigurationError",
    "NoSuchMemberError",
    "StaticMismatchError",
    "ShadowInvocationError",
]
