"""
End-to-end generation pipeline.

Parse -> validate -> annotate -> generate -> emit. Each stage either returns
a complete result or raises a typed UsdtError; nothing is written to disk
until all three artifacts have been rendered in memory.
"""

import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from .codegen import (
    BaseCodeGenerator,
    BindingGenerator,
    CodeFragment,
    DeclarationGenerator,
    GenerationContext,
    TrampolineGenerator,
)
from .frontend import decode_source, ensure_valid, parse
from .model import ProviderFile
from .utils.exceptions import ArtifactWriteError
from .utils.logging import UsdtLogger
from .utils.naming import binding_file_name, declaration_file_name, trampoline_file_name
from .utils.type_mapping import annotate

_log = UsdtLogger(__name__)


class ArtifactKind(Enum):
    """The three generated artifacts, named as on the command line."""

    PYTHON = "python"
    DECL = "decl"
    DEFN = "defn"


_GENERATORS = {
    ArtifactKind.PYTHON: BindingGenerator,
    ArtifactKind.DECL: DeclarationGenerator,
    ArtifactKind.DEFN: TrampolineGenerator,
}

_FILE_NAMES = {
    ArtifactKind.PYTHON: binding_file_name,
    ArtifactKind.DECL: declaration_file_name,
    ArtifactKind.DEFN: trampoline_file_name,
}


@dataclass(frozen=True)
class Artifacts:
    """All three artifacts rendered from one source."""

    source_name: str
    binding: CodeFragment
    declaration: CodeFragment
    trampolines: CodeFragment

    def by_kind(self) -> Dict[ArtifactKind, CodeFragment]:
        return {
            ArtifactKind.PYTHON: self.binding,
            ArtifactKind.DECL: self.declaration,
            ArtifactKind.DEFN: self.trampolines,
        }

    def file_names(self) -> Dict[ArtifactKind, str]:
        """Output file name of each artifact."""
        return {kind: _FILE_NAMES[kind](self.source_name) for kind in ArtifactKind}


def load_source(path: Union[str, Path]) -> str:
    """Read a provider definition file."""
    return decode_source(Path(path).read_bytes())


def compile_source(text: str, source_name: str = "<string>",
                   max_probe_arguments: Optional[int] = None) -> ProviderFile:
    """
    Parse, validate and annotate provider source text.

    Args:
        text: Provider definition source
        source_name: Name used for messages and artifact names
        max_probe_arguments: Arity limit, defaults to the configured one

    Returns:
        Annotated ProviderFile ready for the generators

    Raises:
        ProbeSyntaxError: On the first syntax error
        ValidationError: Carrying every validation violation
    """
    provider_file = ensure_valid(parse(text, source_name), max_probe_arguments)
    return annotate(provider_file)


def compile_file(path: Union[str, Path], max_probe_arguments: Optional[int] = None) -> ProviderFile:
    """Parse, validate and annotate a provider definition file."""
    return compile_source(load_source(path), str(path), max_probe_arguments)


def get_generator(kind: Union[ArtifactKind, str]) -> BaseCodeGenerator:
    """Create the generator for an artifact kind."""
    return _GENERATORS[ArtifactKind(kind)]()


def generate_artifact(provider_file: ProviderFile, kind: Union[ArtifactKind, str]) -> CodeFragment:
    """Render a single artifact from an annotated file."""
    return get_generator(kind).generate(GenerationContext(provider_file))


def generate_artifacts(provider_file: ProviderFile) -> Artifacts:
    """Render all three artifacts from the same annotated file."""
    context = GenerationContext(provider_file)
    return Artifacts(
        source_name=provider_file.source_name,
        binding=BindingGenerator().generate(context),
        declaration=DeclarationGenerator().generate(context),
        trampolines=TrampolineGenerator().generate(context),
    )


def write_artifacts(artifacts: Artifacts, out_dir: Union[str, Path]) -> List[Path]:
    """
    Write all artifacts, or none of them.

    Every artifact is first written to a temporary file in ``out_dir``;
    the temporaries are renamed into place only once all of them exist.

    Args:
        artifacts: Rendered artifacts
        out_dir: Destination directory, created if missing

    Returns:
        Paths of the written artifacts

    Raises:
        ArtifactWriteError: If any artifact cannot be written
    """
    out_dir = Path(out_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArtifactWriteError(f"Cannot create output directory: {e}", str(out_dir))

    names = artifacts.file_names()
    staged: List[tuple] = []
    try:
        for kind, fragment in artifacts.by_kind().items():
            fd, temp_path = tempfile.mkstemp(prefix=f".{names[kind]}.", dir=str(out_dir))
            staged.append((temp_path, out_dir / names[kind]))
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(fragment.content)
    except OSError as e:
        _discard(staged)
        raise ArtifactWriteError(f"Failed to write artifacts: {e}", str(out_dir))

    written: List[Path] = []
    try:
        for temp_path, final_path in staged:
            os.replace(temp_path, final_path)
            written.append(final_path)
    except OSError as e:
        _discard(staged)
        for path in written:
            path.unlink()
        raise ArtifactWriteError(f"Failed to move artifacts into place: {e}", str(out_dir))

    _log.log_artifacts_written(written)
    return written


def _discard(staged) -> None:
    for temp_path, _ in staged:
        if os.path.exists(temp_path):
            os.unlink(temp_path)


def emit(source_path: Union[str, Path], out_dir: Union[str, Path],
         max_probe_arguments: Optional[int] = None) -> List[Path]:
    """Compile a provider file and write its three artifacts."""
    provider_file = compile_file(source_path, max_probe_arguments)
    return write_artifacts(generate_artifacts(provider_file), out_dir)
