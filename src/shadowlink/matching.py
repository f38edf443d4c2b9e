"""Compatibility matching of call arguments against declared target members."""

import math
from collections.abc import Sequence

from shadowlink.introspection import AcceptedTypes
from shadowlink.introspection import CandidateSignature
from shadowlink.introspection import declared_constructor_signatures
from shadowlink.introspection import declared_method_signatures
from shadowlink.introspection import is_interface_type
from shadowlink.introspection import primitive_wrapper

PRIMITIVE_MATCH_COST: float = 0.25
INTERFACE_MATCH_COST: float = 0.25
EXHAUSTED_WALK_PENALTY: float = 1.5


def is_assignment_compatible(parameter_type: type, argument_type: type) -> bool:
    """Decide whether an argument of ``argument_type`` fits ``parameter_type``.

    Subclasses always fit. A primitive-like parameter also accepts exactly its
    boxed counterpart; there is no widening, so ``bool`` does not fit ``c_int``.

    :param parameter_type: Declared parameter class.
    :param argument_type: Runtime class of the argument.
    :returns: ``True`` when compatible.
    """
    try:
        if issubclass(argument_type, parameter_type) is True:
            return True
    except TypeError:
        return False

    wrapper: type | None = primitive_wrapper(parameter_type)
    if wrapper is not None:
        return wrapper is argument_type
    return False


def transformation_cost(argument_type: type, parameter_type: type) -> float:
    """Count the hierarchy steps needed to turn ``argument_type`` into ``parameter_type``.

    Nominal ancestors cost one per MRO step, even when they are ABCs. The
    flat interface cost applies only to ABCs reached without inheritance,
    such as registered virtual subclasses.

    :param argument_type: Runtime class of the argument.
    :param parameter_type: Declared parameter class.
    :returns: Cost; lower is a closer match.
    """
    cost: float = 0.0
    reached: bool = False
    wrapper: type | None = primitive_wrapper(parameter_type)
    is_virtual_interface: bool = (
        is_interface_type(parameter_type) is True and parameter_type not in argument_type.__mro__
    )
    for ancestor in argument_type.__mro__:
        if ancestor is parameter_type:
            reached = True
            break
        if wrapper is not None and wrapper is ancestor:
            cost += PRIMITIVE_MATCH_COST
            reached = True
            break
        if is_virtual_interface is True and is_assignment_compatible(parameter_type, ancestor) is True:
            cost += INTERFACE_MATCH_COST
            reached = True
            break
        cost += 1.0

    if reached is False:
        cost += EXHAUSTED_WALK_PENALTY
    return cost


def _accepts(accepted: AcceptedTypes, argument_type: type) -> bool:
    for parameter_type in accepted:
        if is_assignment_compatible(parameter_type, argument_type) is True:
            return True
    return False


def _parameter_cost(accepted: AcceptedTypes, argument_type: type) -> float:
    costs: list[float] = [
        transformation_cost(argument_type, parameter_type)
        for parameter_type in accepted
        if is_assignment_compatible(parameter_type, argument_type) is True
    ]
    return min(costs)


def total_transformation_cost(
    argument_types: Sequence[type],
    declared_types: Sequence[AcceptedTypes],
) -> float:
    """Sum per-argument transformation costs.

    :param argument_types: Runtime classes of the arguments.
    :param declared_types: Accepted classes per declared parameter.
    :returns: Total cost.
    """
    total: float = 0.0
    for argument_type, accepted in zip(argument_types, declared_types):
        total += _parameter_cost(accepted, argument_type)
    return total


def _is_exact_match(candidate: CandidateSignature, argument_types: Sequence[type]) -> bool:
    if len(candidate.parameter_types) != len(argument_types):
        return False
    for accepted, argument_type in zip(candidate.parameter_types, argument_types):
        if accepted != (argument_type,):
            return False
    return True


def best_candidate(
    candidates: Sequence[CandidateSignature],
    argument_types: Sequence[type],
) -> CandidateSignature | None:
    """Pick the cheapest compatible candidate.

    An exact signature match wins outright. Otherwise every parameter must be
    assignment-compatible and the lowest total cost wins; ties keep the first
    candidate in declaration order.

    :param candidates: Candidate signatures, in declaration order.
    :param argument_types: Runtime classes of the arguments.
    :returns: Best candidate, or ``None``.
    """
    for candidate in candidates:
        if _is_exact_match(candidate, argument_types) is True:
            return candidate

    count: int = len(argument_types)
    best_match: CandidateSignature | None = None
    best_cost: float = math.inf
    for candidate in candidates:
        if candidate.accepts(count) is False:
            continue
        declared_types: tuple[AcceptedTypes, ...] = candidate.parameter_types_for(count)
        compatible: bool = all(
            _accepts(accepted, argument_type)
            for accepted, argument_type in zip(declared_types, argument_types)
        )
        if compatible is False:
            continue

        cost: float = total_transformation_cost(argument_types, declared_types)
        if cost < best_cost:
            best_match = candidate
            best_cost = cost
    return best_match


def find_method(
    target_class: type,
    method_name: str,
    argument_types: Sequence[type],
) -> CandidateSignature | None:
    """Find the method named ``method_name`` that best accepts ``argument_types``.

    Classes are searched along the MRO; the first class declaring a compatible
    candidate decides the match.

    :param target_class: Class to search.
    :param method_name: Source-level method name.
    :param argument_types: Runtime classes of the arguments.
    :returns: Matching candidate, or ``None``.
    """
    for owner in target_class.__mro__:
        candidates: list[CandidateSignature] = declared_method_signatures(owner, method_name)
        if len(candidates) == 0:
            continue
        match: CandidateSignature | None = best_candidate(candidates, argument_types)
        if match is not None:
            return match
    return None


def find_constructor(
    target_class: type,
    argument_types: Sequence[type],
) -> CandidateSignature | None:
    """Find the constructor shape that best accepts ``argument_types``.

    :param target_class: Class to construct.
    :param argument_types: Runtime classes of the arguments.
    :returns: Matching candidate, or ``None``.
    """
    return best_candidate(declared_constructor_signatures(target_class), argument_types)
