"""
Invocation type-checking.

Checks the values a fire thunk produces against a probe's declared
signature, using the host types from the type table. The check is pure:
it only reports violations and never touches the probe library.
"""

from typing import List, Optional, Sequence, Union

from ..model import Probe, SourcePosition
from ..utils.exceptions import ArityMismatch, InvocationError, TypeMismatch
from ..utils.type_mapping import HostType

Supplied = Union[HostType, Sequence[HostType]]


def _int_range(declared: HostType):
    bits = declared.bits
    if declared.signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def is_assignable(supplied: HostType, declared: HostType) -> bool:
    """
    Check if a value of the supplied type can be passed to a declared slot.

    Args:
        supplied: Inferred type of the value
        declared: Host type of the declared argument

    Returns:
        True if the value is accepted without truncation
    """
    if supplied.kind == "any" or supplied == declared:
        return True

    if declared.kind == "str":
        return supplied.kind in ("str", "bytes")

    if not declared.is_sized_int:
        return False

    if supplied.kind == "bool":
        return True
    if supplied.kind != "int":
        return False

    if supplied.value is not None:
        low, high = _int_range(declared)
        return low <= supplied.value <= high
    if supplied.bits is None:
        # Plain ``int`` of unknown magnitude
        return True
    if supplied.signed == declared.signed:
        return supplied.bits <= declared.bits
    # Unsigned fits only a strictly wider signed slot
    return not supplied.signed and declared.signed and supplied.bits < declared.bits


def _supplied_values(supplied: Supplied) -> Optional[List[HostType]]:
    if isinstance(supplied, HostType):
        if supplied.kind == "any":
            # An opaque result may itself be a tuple of any length
            return None
        return [supplied]
    return list(supplied)


def check_invocation(probe: Probe, supplied: Supplied,
                     call_site: Optional[SourcePosition] = None,
                     filename: Optional[str] = None,
                     provider: Optional[str] = None) -> List[InvocationError]:
    """
    Check one fire call site against an annotated probe.

    Args:
        probe: Annotated probe being fired
        supplied: Type of the thunk result, or one type per tuple element
        call_site: Position of the call, used for error attribution
        filename: File containing the call site
        provider: Provider name, used in error messages

    Returns:
        Violations in order: an ArityMismatch alone, or one TypeMismatch per
        offending argument position
    """
    label = f"{provider}:::{probe.name}" if provider else probe.name
    values = _supplied_values(supplied)
    if values is None:
        return []

    if len(values) != probe.arity:
        return [ArityMismatch(label, probe.arity, len(values), call_site, filename)]

    errors: List[InvocationError] = []
    for argument, value in zip(probe.arguments, values):
        declared = argument.host_type
        if not is_assignable(value, declared):
            errors.append(TypeMismatch(
                label, argument.index, argument.type_name, str(value),
                call_site, filename,
            ))
    return errors
