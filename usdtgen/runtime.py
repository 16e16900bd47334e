"""
Probe library loading and probe sites.

This module provides the run-time half of the generated Python bindings. A
ProbeLibrary locates and loads the shared library holding the C trampolines;
a ProbeSite wraps one probe's pair of trampolines (``<provider>_<probe>``
and ``<provider>_<probe>_enabled``) behind ``enabled()`` and ``fire()``.

When the library cannot be found the bindings stay importable: every probe
reports disabled and firing is a no-op, so instrumented code runs unchanged
on hosts without the tracing build.
"""

import ctypes
import os
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from .utils.config import get_config
from .utils.exceptions import ArityMismatch, ProbeLibraryError, TypeMismatch
from .utils.logging import get_logger
from .utils.naming import enabled_symbol_name, symbol_name
from .utils.type_mapping import TypeInfo, TypeMapper, get_type_mapper

logger = get_logger(__name__)

LIBRARY_PATTERNS = ("lib{name}.so", "lib{name}.dylib", "{name}.so")


class ProbeLibrary:
    """
    Handle to a shared library exporting probe trampolines.

    The library is searched for in the configured ``runtime.library_path``
    (``USDTGEN_LIBRARY_PATH``), then next to the anchor file (usually the
    generated binding module). There is no system-wide lookup by base name.
    """

    def __init__(self, name: str, anchor: Optional[str] = None, search_path: Optional[str] = None):
        """
        Load a probe library.

        Args:
            name: Library base name (``probes`` for ``libprobes.so``)
            anchor: File whose directory is also searched
            search_path: Directory list overriding the configured path
        """
        self.name = name
        self.path: Optional[str] = None
        self._handle: Any = None

        path = self._locate(name, anchor, search_path)
        if path is None:
            logger.debug(f"Probe library '{name}' not found, probes are inactive")
            return

        try:
            self._handle = ctypes.CDLL(path)
        except OSError as e:
            logger.warning(f"Failed to load probe library {path}: {e}")
            return
        self.path = path
        logger.debug(f"Loaded probe library {path}")

    @classmethod
    def from_handle(cls, name: str, handle: Any) -> "ProbeLibrary":
        """
        Wrap an already loaded library (or any object exposing the symbols).

        Args:
            name: Library base name
            handle: Object with one attribute per exported symbol

        Returns:
            ProbeLibrary using the handle as is
        """
        library = cls.__new__(cls)
        library.name = name
        library.path = None
        library._handle = handle
        return library

    @staticmethod
    def candidate_directories(anchor: Optional[str] = None,
                              search_path: Optional[str] = None) -> List[str]:
        """Directories searched for the library, in order."""
        if search_path is None:
            search_path = get_config().runtime.library_path
        directories = [d for d in (search_path or "").split(os.pathsep) if d]
        if anchor:
            directories.append(os.path.dirname(os.path.abspath(anchor)))
        return directories

    def _locate(self, name: str, anchor: Optional[str], search_path: Optional[str]) -> Optional[str]:
        for directory in self.candidate_directories(anchor, search_path):
            for pattern in LIBRARY_PATTERNS:
                candidate = os.path.join(directory, pattern.format(name=name))
                if os.path.isfile(candidate):
                    return candidate
        return None

    @property
    def is_loaded(self) -> bool:
        return self._handle is not None

    def function(self, symbol: str, argtypes: Sequence[Any] = (), restype: Any = None) -> Optional[Any]:
        """
        Look up an exported function and set its prototype.

        Args:
            symbol: Exported symbol name
            argtypes: ctypes argument types
            restype: ctypes result type

        Returns:
            The callable, or None if the library is not loaded

        Raises:
            ProbeLibraryError: If the library is loaded but lacks the symbol
        """
        if self._handle is None:
            return None
        try:
            func = getattr(self._handle, symbol)
        except AttributeError:
            raise ProbeLibraryError(
                f"Probe library does not export '{symbol}'", self.path or self.name, symbol
            )
        func.argtypes = list(argtypes)
        func.restype = restype
        return func

    def __repr__(self) -> str:
        state = self.path or ("loaded" if self.is_loaded else "inactive")
        return f"ProbeLibrary({self.name!r}, {state})"


class ProbeSite:
    """
    One probe of a provider, as seen from Python.

    Generated bindings subclass this per probe to attach a precisely
    annotated ``fire`` method; the behavior lives here.
    """

    def __init__(self, library: ProbeLibrary, provider: str, probe: str,
                 type_names: Iterable[str], type_mapper: Optional[TypeMapper] = None):
        self.library = library
        self.provider = provider
        self.probe = probe
        self._mapper = type_mapper or get_type_mapper()
        self.types: Tuple[TypeInfo, ...] = tuple(
            self._mapper.get_type_info(name) for name in type_names
        )
        self._fire_fn = library.function(
            symbol_name(provider, probe), [info.ctypes_type for info in self.types], None
        )
        self._enabled_fn = library.function(
            enabled_symbol_name(provider, probe), [], ctypes.c_int
        )

    @property
    def name(self) -> str:
        return f"{self.provider}:::{self.probe}"

    @property
    def arity(self) -> int:
        return len(self.types)

    def enabled(self) -> bool:
        """Return True if a tracer is currently attached to this probe."""
        if self._enabled_fn is None:
            return False
        return bool(self._enabled_fn())

    def _fire(self, thunk: Callable[[], Any]) -> None:
        if not self.enabled():
            return

        values = thunk()
        if not isinstance(values, tuple):
            values = (values,)
        if len(values) != self.arity:
            raise ArityMismatch(self.name, self.arity, len(values))

        converted = []
        for index, (info, value) in enumerate(zip(self.types, values)):
            try:
                converted.append(self._mapper.to_abi(info, value))
            except TypeError:
                raise TypeMismatch(self.name, index, info.dsl_name, type(value).__name__)
        self._fire_fn(*converted)

    def fire(self, thunk: Callable[[], Any]) -> None:
        """
        Fire the probe with the values produced by ``thunk``.

        The thunk is only evaluated when the probe is enabled.

        Raises:
            ArityMismatch: If the thunk produces the wrong number of values
            TypeMismatch: If a value has the wrong host type
            OverflowError: If an integer does not fit its declared type
        """
        self._fire(thunk)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}({', '.join(i.dsl_name for i in self.types)})>"
