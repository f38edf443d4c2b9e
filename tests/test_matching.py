"""Tests for argument compatibility matching against target members."""

import collections.abc
import ctypes

from shadowlink.introspection import CandidateSignature
from shadowlink.matching import EXHAUSTED_WALK_PENALTY
from shadowlink.matching import INTERFACE_MATCH_COST
from shadowlink.matching import PRIMITIVE_MATCH_COST
from shadowlink.matching import find_constructor
from shadowlink.matching import find_method
from shadowlink.matching import is_assignment_compatible
from shadowlink.matching import total_transformation_cost
from shadowlink.matching import transformation_cost
from tests.fixtures.targets import Animal
from tests.fixtures.targets import Base
from tests.fixtures.targets import Dog
from tests.fixtures.targets import Duck
from tests.fixtures.targets import Feeder
from tests.fixtures.targets import Formatter
from tests.fixtures.targets import Greeter
from tests.fixtures.targets import Kennel
from tests.fixtures.targets import Label
from tests.fixtures.targets import Leaf
from tests.fixtures.targets import Mallard
from tests.fixtures.targets import Mid
from tests.fixtures.targets import Pond
from tests.fixtures.targets import Puppy
from tests.fixtures.targets import RoboDuck
from tests.fixtures.targets import Robot
from tests.fixtures.targets import Stepper
from tests.fixtures.targets import StrictFeeder
from tests.fixtures.targets import Walker


def test_primitive_parameters_accept_only_their_boxed_type() -> None:
    """Verify primitive/boxed compatibility has no widening."""
    assert is_assignment_compatible(ctypes.c_int, int) is True
    assert is_assignment_compatible(ctypes.c_double, float) is True
    assert is_assignment_compatible(ctypes.c_int, bool) is False
    assert is_assignment_compatible(ctypes.c_int, float) is False
    assert is_assignment_compatible(object, ctypes.c_int) is True
    assert is_assignment_compatible(Animal, Puppy) is True
    assert is_assignment_compatible(Puppy, Animal) is False


def test_transformation_costs_rank_primitive_below_hierarchy_steps() -> None:
    """Verify the ordering 0.25 < 1 < exhausted-walk penalty."""
    primitive_cost: float = transformation_cost(int, ctypes.c_int)
    one_step_cost: float = transformation_cost(Dog, Animal)
    two_step_cost: float = transformation_cost(Puppy, Animal)
    exact_cost: float = transformation_cost(Dog, Dog)
    interface_cost: float = transformation_cost(list, collections.abc.Sequence)
    nominal_interface_cost: float = transformation_cost(Robot, Walker)

    assert primitive_cost == PRIMITIVE_MATCH_COST
    assert interface_cost == INTERFACE_MATCH_COST
    assert exact_cost == 0.0
    assert one_step_cost == 1.0
    assert nominal_interface_cost == 1.0
    assert two_step_cost == 2.0
    assert primitive_cost < one_step_cost < EXHAUSTED_WALK_PENALTY


def test_virtual_interface_match_is_short_circuited() -> None:
    """Verify ABC registration counts as an interface match."""
    cost: float = transformation_cost(list, collections.abc.Sequence)
    assert cost == INTERFACE_MATCH_COST


def test_unreachable_parameter_pays_the_exhausted_walk_penalty() -> None:
    """Verify a walk that never reaches the parameter adds the penalty."""
    cost: float = transformation_cost(str, int)
    assert cost == len(str.__mro__) + EXHAUSTED_WALK_PENALTY


def test_nominal_abc_ancestors_cost_one_per_step() -> None:
    """Verify inheriting from an ABC keeps the hierarchy distance."""
    assert transformation_cost(Leaf, Mid) == 1.0
    assert transformation_cost(Leaf, Base) == 2.0

    match: CandidateSignature | None = find_method(Stepper, "take", (Leaf,))
    assert match is not None
    assert match.parameter_types == ((Mid,),)


def test_structural_match_outside_the_mro_pays_the_penalty() -> None:
    """Verify a ``__subclasscheck__`` match is selectable at the exhausted-walk cost."""
    assert is_assignment_compatible(Duck, Mallard) is True
    cost: float = transformation_cost(Mallard, Duck)
    assert cost == len(Mallard.__mro__) + EXHAUSTED_WALK_PENALTY

    only_duck: CandidateSignature | None = find_method(Pond, "visit", (Mallard,))
    assert only_duck is not None
    assert only_duck.parameter_types == ((Duck,),)

    # the nominal walker overload is cheaper than the structural one declared first
    both: CandidateSignature | None = find_method(Pond, "visit", (RoboDuck,))
    assert both is not None
    assert both.parameter_types == ((Walker,),)


def test_exact_signature_wins_before_cost_scan() -> None:
    """Verify an exact overload is chosen outright."""
    match: CandidateSignature | None = find_method(Formatter, "render", (str,))
    assert match is not None
    assert match.parameter_types == ((str,),)


def test_lowest_cost_overload_wins() -> None:
    """Verify the nearest overload in the hierarchy is selected."""
    bool_match: CandidateSignature | None = find_method(Formatter, "render", (bool,))
    assert bool_match is not None
    assert bool_match.parameter_types == ((int,),)

    puppy_match: CandidateSignature | None = find_method(Kennel, "admit", (Puppy,))
    assert puppy_match is not None
    assert puppy_match.parameter_types == ((Dog,),)


def test_incompatible_candidates_are_never_selected() -> None:
    """Verify no candidate is returned when every parameter is incompatible."""
    match: CandidateSignature | None = find_method(Kennel, "admit", (str,))
    assert match is None

    missing: CandidateSignature | None = find_method(Greeter, "does_not_exist", ())
    assert missing is None


def test_search_continues_along_the_mro() -> None:
    """Verify an ancestor's declaration is used when the subclass has no compatible one."""
    own_match: CandidateSignature | None = find_method(StrictFeeder, "feed", (int,))
    assert own_match is not None
    assert own_match.declaring_class is StrictFeeder

    inherited_match: CandidateSignature | None = find_method(StrictFeeder, "feed", (str,))
    assert inherited_match is not None
    assert inherited_match.declaring_class is Feeder


def test_defaults_and_variadics_extend_accepted_arity() -> None:
    """Verify optional and ``*args`` parameters are honored."""
    short_call: CandidateSignature | None = find_method(Greeter, "greet", (str,))
    long_call: CandidateSignature | None = find_method(Greeter, "greet", (str, str))
    too_long: CandidateSignature | None = find_method(Greeter, "greet", (str, str, str))
    assert short_call is not None
    assert long_call is not None
    assert too_long is None

    variadic: CandidateSignature | None = find_method(Formatter, "join", (str, str, str))
    assert variadic is not None
    assert variadic.variadic_types == (str,)


def test_private_methods_are_found_by_source_name() -> None:
    """Verify private-name mangling is applied per declaring class."""
    match: CandidateSignature | None = find_method(Greeter, "__whisper", (str,))
    assert match is not None
    assert match.name == "_Greeter__whisper"


def test_static_and_class_methods_are_flagged() -> None:
    """Verify static-ness is reported for static and class methods."""
    shout: CandidateSignature | None = find_method(Greeter, "shout", (str,))
    describe: CandidateSignature | None = find_method(Greeter, "describe", ())
    greet: CandidateSignature | None = find_method(Greeter, "greet", (str,))
    assert shout is not None and shout.is_static is True
    assert describe is not None and describe.is_static is True
    assert greet is not None and greet.is_static is False


def test_two_argument_constructor_matches_boxed_integer() -> None:
    """Verify ``(str, int)`` selects the ``(str, c_int)`` constructor at cost 0.25."""
    argument_types: tuple[type, ...] = (str, int)
    match: CandidateSignature | None = find_constructor(Label, argument_types)
    assert match is not None
    assert match.parameter_types == ((str,), (ctypes.c_int,))

    cost: float = total_transformation_cost(argument_types, match.parameter_types)
    assert cost == PRIMITIVE_MATCH_COST

    single: CandidateSignature | None = find_constructor(Label, (str,))
    assert single is not None
    assert single.parameter_types == ((str,),)


def test_object_constructor_accepts_no_arguments() -> None:
    """Verify classes without a constructor accept an empty call only."""
    empty: CandidateSignature | None = find_constructor(Animal, ())
    extra: CandidateSignature | None = find_constructor(Animal, (int,))
    assert empty is not None
    assert extra is None
