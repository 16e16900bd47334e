"""
Invocation checking for usdtgen.

Checks probe fire call sites in Python code against the declared probe
signatures, ahead of running the program.
"""

from .invocation import check_invocation, is_assignable
from .callsites import FireCallFinder, check_path, check_source, infer_result, infer_type

__all__ = [
    "check_invocation",
    "is_assignable",
    "FireCallFinder",
    "check_source",
    "check_path",
    "infer_type",
    "infer_result",
]
