"""
Semantic validation of parsed provider files.

Validation is exhaustive: every independent violation is collected and
reported together, in source order, so a definition file can be fixed in
one pass.
"""

from __future__ import annotations

from typing import List, Optional, Set

from ..model import ProviderFile
from ..utils.config import get_config
from ..utils.exceptions import (
    ArityTooLarge,
    DuplicateName,
    InvalidIdentifier,
    UnknownType,
    UsdtError,
    ValidationError,
)
from ..utils.logging import UsdtLogger
from ..utils.naming import find_symbol_collisions, identifier_problem
from ..utils.type_mapping import TypeMapper, get_type_mapper

_log = UsdtLogger(__name__)


class Validator:
    """Structural and semantic checks over a parsed ProviderFile."""

    def __init__(self, max_probe_arguments: Optional[int] = None,
                 type_mapper: Optional[TypeMapper] = None):
        """
        Initialize the validator.

        Args:
            max_probe_arguments: Arity limit, defaults to the configured value
            type_mapper: Closed type table, defaults to the global one
        """
        if max_probe_arguments is None:
            max_probe_arguments = get_config().generation.max_probe_arguments
        self.max_probe_arguments = max_probe_arguments
        self.type_mapper = type_mapper or get_type_mapper()

    def validate(self, provider_file: ProviderFile) -> List[UsdtError]:
        """
        Collect every violation in a file.

        Returns:
            Violations in source order; empty if the file is valid
        """
        errors: List[UsdtError] = []
        provider_names: Set[str] = set()

        for provider in provider_file.providers:
            self._check_identifier(provider.name, provider.position, errors)
            if provider.name in provider_names:
                errors.append(DuplicateName("provider", provider.name, provider.position))
            provider_names.add(provider.name)

            probe_names: Set[str] = set()
            for probe in provider.probes:
                self._check_identifier(probe.name, probe.position, errors)
                if probe.name in probe_names:
                    errors.append(DuplicateName("probe", probe.name, probe.position))
                probe_names.add(probe.name)

                if probe.arity > self.max_probe_arguments:
                    errors.append(
                        ArityTooLarge(probe.name, probe.arity, self.max_probe_arguments, probe.position)
                    )

                for expected_index, argument in enumerate(probe.arguments):
                    if argument.index != expected_index:
                        raise ValueError(
                            f"probe '{probe.name}' argument {expected_index} has index {argument.index}"
                        )
                    if not self.type_mapper.is_known(argument.type_name):
                        errors.append(UnknownType(argument.type_name, argument.position))

        pairs = [(provider.name, probe.name) for provider, probe in provider_file.iter_probes()]
        for name in find_symbol_collisions(pairs):
            errors.append(DuplicateName("symbol", name))

        return errors

    def _check_identifier(self, name, position, errors: List[UsdtError]) -> None:
        problem = identifier_problem(name)
        if problem:
            errors.append(InvalidIdentifier(name, problem, position))


def validate(provider_file: ProviderFile, max_probe_arguments: Optional[int] = None) -> List[UsdtError]:
    """Return every violation found in a provider file."""
    return Validator(max_probe_arguments).validate(provider_file)


def ensure_valid(provider_file: ProviderFile, max_probe_arguments: Optional[int] = None) -> ProviderFile:
    """
    Validate a provider file, raising on any violation.

    Returns:
        The same file, for chaining

    Raises:
        ValidationError: Carrying every violation found
    """
    errors = validate(provider_file, max_probe_arguments)
    if errors:
        _log.log_validation_failure(provider_file.source_name, len(errors))
        raise ValidationError(errors)
    return provider_file
