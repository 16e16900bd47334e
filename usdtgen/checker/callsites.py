"""
Call-site discovery for fire invocations.

Scans Python source for calls of the form
``<...>.<provider>.<probe>.fire(lambda: <expr>)`` and checks the statically
inferred type of ``<expr>`` against the probe's signature. Expressions whose
type cannot be inferred are treated as ``any`` and accepted.
"""

import ast
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..model import Probe, ProviderFile, SourcePosition
from ..utils.exceptions import InvocationError, UsdtError
from ..utils.logging import get_logger
from ..utils.type_mapping import (
    ANY,
    BOOL,
    BYTES,
    FLOAT,
    INT,
    NONE,
    STR,
    HostType,
    int_literal,
)
from .invocation import Supplied, check_invocation

logger = get_logger(__name__)

_CALL_RESULT_TYPES = {
    "int": INT,
    "len": INT,
    "hash": INT,
    "id": INT,
    "ord": INT,
    "str": STR,
    "repr": STR,
    "format": STR,
    "bytes": BYTES,
    "bool": BOOL,
    "float": FLOAT,
}

_METHOD_RESULT_TYPES = {
    "encode": BYTES,
    "decode": STR,
    "format": STR,
    "join": STR,
}


def infer_type(node: ast.expr) -> HostType:
    """Infer the host type of a single expression."""
    if isinstance(node, ast.Constant):
        value = node.value
        if isinstance(value, bool):
            return BOOL
        if isinstance(value, int):
            return int_literal(value)
        if isinstance(value, float):
            return FLOAT
        if isinstance(value, str):
            return STR
        if isinstance(value, bytes):
            return BYTES
        if value is None:
            return NONE
        return ANY

    if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
        operand = infer_type(node.operand)
        if operand.value is not None:
            return int_literal(-operand.value)
        return operand if operand in (INT, FLOAT) else ANY

    if isinstance(node, ast.JoinedStr):
        return STR

    if isinstance(node, ast.Compare) or (
        isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not)
    ):
        return BOOL

    if isinstance(node, ast.Call):
        func = node.func
        if isinstance(func, ast.Name):
            return _CALL_RESULT_TYPES.get(func.id, ANY)
        if isinstance(func, ast.Attribute):
            return _METHOD_RESULT_TYPES.get(func.attr, ANY)

    return ANY


def infer_result(node: ast.expr) -> Supplied:
    """Infer the result of a thunk body: one type per tuple element, or a single type."""
    if isinstance(node, ast.Tuple):
        return [infer_type(element) for element in node.elts]
    return infer_type(node)


class FireCallFinder(ast.NodeVisitor):
    """Collect fire calls whose receiver names a declared provider and probe."""

    def __init__(self, provider_file: ProviderFile):
        self.provider_file = provider_file
        self.calls: List[Tuple[str, Probe, ast.Call, Optional[ast.Lambda]]] = []

    @staticmethod
    def _receiver_name(node: ast.expr) -> Optional[str]:
        if isinstance(node, ast.Name):
            return node.id
        if isinstance(node, ast.Attribute):
            return node.attr
        return None

    @staticmethod
    def _thunk(node: ast.Call) -> Optional[ast.expr]:
        if len(node.args) == 1 and not node.keywords:
            return node.args[0]
        if not node.args and len(node.keywords) == 1 and node.keywords[0].arg == "thunk":
            return node.keywords[0].value
        return None

    def visit_Call(self, node: ast.Call) -> None:
        func = node.func
        if (
            isinstance(func, ast.Attribute)
            and func.attr == "fire"
            and isinstance(func.value, ast.Attribute)
        ):
            provider = self.provider_file.get_provider(self._receiver_name(func.value.value) or "")
            probe = provider.get_probe(func.value.attr) if provider else None
            if probe is not None:
                thunk = self._thunk(node)
                lam = thunk if isinstance(thunk, ast.Lambda) else None
                if lam is not None and (lam.args.args or lam.args.vararg or lam.args.kwarg):
                    lam = None
                self.calls.append((provider.name, probe, node, lam))
        self.generic_visit(node)


def check_source(provider_file: ProviderFile, source: Union[str, bytes],
                 filename: str = "<string>") -> List[InvocationError]:
    """
    Check every fire call site in a Python source.

    Args:
        provider_file: Annotated provider definitions
        source: Python source text (bytes are decoded per PEP 263)
        filename: Name used when attributing errors

    Returns:
        Violations in source order

    Raises:
        UsdtError: If the source is not valid Python
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise UsdtError(f"{filename}: cannot parse Python source: {e.msg}", {"line": e.lineno})
    except ValueError as e:
        # Undecodable bytes or NUL bytes, depending on the interpreter
        raise UsdtError(f"{filename}: cannot parse Python source: {e}")

    finder = FireCallFinder(provider_file)
    finder.visit(tree)

    errors: List[InvocationError] = []
    for provider, probe, call, lam in finder.calls:
        if lam is None:
            # Thunk is not an inline lambda, nothing to infer
            continue
        call_site = SourcePosition(call.lineno, call.col_offset + 1, 0)
        errors.extend(check_invocation(
            probe, infer_result(lam.body), call_site, filename, provider=provider
        ))

    logger.debug(f"Checked {len(finder.calls)} fire call(s) in {filename}, {len(errors)} error(s)")
    return errors


def check_path(provider_file: ProviderFile, path: Union[str, Path]) -> List[InvocationError]:
    """
    Check every fire call site in a Python file.

    The file is handed to the Python parser as bytes so that its own
    encoding declaration is honored.
    """
    path = Path(path)
    return check_source(provider_file, path.read_bytes(), str(path))
