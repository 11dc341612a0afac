"""Write the LaTeX source, compile it and crop the resulting PDF.

Each external tool runs with the output directory as its own working
directory (``subprocess.run(cwd=...)``); the process-wide cwd is never
touched, so concurrent calls writing to different directories are isolated.
"""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import ConfigurationError, CropError, ExternalToolError, FilesystemError
from .logparse import parse_latex_log, read_log
from .tools import DEFAULT_COMPILER, DEFAULT_CROPPER, require_tools

logger = logging.getLogger(__name__)

CROPPED_SUFFIX = "_cropped"


class CompileState(str, Enum):
    PREPARED = "prepared"
    COMPILING = "compiling"
    COMPILED = "compiled"
    COMPILE_FAILED = "compile_failed"
    CROPPING = "cropping"
    CROPPED = "cropped"
    CROP_FAILED = "crop_failed"


@dataclass
class CompileResult:
    """Paths and final state of one compile/crop run.

    ``cropped_path`` is ``None`` unless cropping succeeded; it never equals
    ``pdf_path``.
    """

    tex_path: Path
    pdf_path: Optional[Path] = None
    cropped_path: Optional[Path] = None
    state: CompileState = CompileState.PREPARED
    log: str = ""
    cached: bool = False
    converted_path: Optional[Path] = None
    history: List[CompileState] = field(default_factory=lambda: [CompileState.PREPARED])

    @property
    def success(self) -> bool:
        return self.state in (CompileState.COMPILED, CompileState.CROPPED)

    @property
    def cropped(self) -> bool:
        return self.state == CompileState.CROPPED and self.cropped_path is not None

    @property
    def artifact(self) -> Optional[Path]:
        """The path a host document should include: cropped when available."""
        return self.cropped_path if self.cropped else self.pdf_path

    def transition(self, state: CompileState) -> None:
        logger.debug("%s: %s -> %s", self.tex_path.name, self.state.value, state.value)
        self.state = state
        self.history.append(state)


def cropped_name(pdf_path: Path) -> Path:
    return pdf_path.with_name(pdf_path.stem + CROPPED_SUFFIX + pdf_path.suffix)


def prepare_output_directory(path: os.PathLike | str) -> Path:
    """Create ``path`` if needed and make sure it is a writable directory."""
    out = Path(path)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Cannot create output directory '{out}': {e}") from e
    if not out.is_dir():
        raise FilesystemError(f"Output path '{out}' is not a directory")
    if not os.access(out, os.W_OK | os.X_OK):
        raise FilesystemError(f"Output directory '{out}' is not writable")
    return out.resolve()


def write_source(directory: Path, name: str, document: str) -> Path:
    tex_path = directory / f"{name}.tex"
    try:
        tex_path.write_text(document, encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"Cannot write '{tex_path}': {e}") from e
    logger.info("Wrote LaTeX source to %s", tex_path)
    return tex_path


def run_tool(cmd: Sequence[str], cwd: Path, timeout: Optional[float]) -> subprocess.CompletedProcess:
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=str(cwd),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise ExternalToolError(f"External tool '{cmd[0]}' not found", tool=cmd[0]) from e
    except subprocess.TimeoutExpired as e:
        raise ExternalToolError(
            f"External tool '{cmd[0]}' timed out after {timeout} s", tool=cmd[0]
        ) from e


def compile_latex(tex_path: Path, compiler: str = DEFAULT_COMPILER, timeout: Optional[float] = None) -> Path:
    """Run ``compiler`` on ``tex_path`` and return the produced PDF.

    On a nonzero exit the compiler log is parsed and the extracted block is
    attached to the raised :class:`ExternalToolError`.
    """
    workdir = tex_path.parent
    proc = run_tool([compiler, "-interaction=nonstopmode", "-halt-on-error", tex_path.name], workdir, timeout)
    pdf_path = tex_path.with_suffix(".pdf")
    if proc.returncode != 0:
        log_text = read_log(tex_path.with_suffix(".log")) or proc.stdout or proc.stderr or ""
        detail = parse_latex_log(log_text)
        raise ExternalToolError(
            f"{compiler} failed on {tex_path.name} (exit status {proc.returncode}):\n{detail}",
            tool=compiler,
            returncode=proc.returncode,
            log_detail=detail,
        )
    if not pdf_path.exists():
        detail = parse_latex_log(read_log(tex_path.with_suffix(".log")) or proc.stdout or "")
        raise ExternalToolError(
            f"{compiler} exited successfully but produced no {pdf_path.name}",
            tool=compiler,
            returncode=proc.returncode,
            log_detail=detail,
        )
    return pdf_path


def crop_pdf(
    pdf_path: Path,
    cropped_path: Optional[Path] = None,
    margin: float = 10,
    cropper: str = DEFAULT_CROPPER,
    timeout: Optional[float] = None,
) -> Path:
    """Trim ``pdf_path`` into a separate file; the input is never overwritten."""
    target = cropped_path or cropped_name(pdf_path)
    if target.resolve() == pdf_path.resolve():
        raise ConfigurationError("Cropped output must differ from the full PDF")
    proc = run_tool([cropper, "--margins", f"{margin:g}", pdf_path.name, str(target)], pdf_path.parent, timeout)
    if proc.returncode != 0 or not target.exists():
        detail = "\n".join((proc.stderr or proc.stdout or "").splitlines()[-20:]).strip()
        raise CropError(
            f"{cropper} failed on {pdf_path.name} (exit status {proc.returncode})"
            + (f":\n{detail}" if detail else ""),
            tool=cropper,
            returncode=proc.returncode,
            log_detail=detail,
        )
    return target


class CompileCropOrchestrator:
    """Drive one document through ``PREPARED -> COMPILED -> CROPPED``.

    Compile failures raise :class:`ExternalToolError`. A crop failure is
    reported through the returned result (state ``CROP_FAILED``, full PDF
    kept, ``cropped_path`` unset) so the caller decides how to surface it.
    """

    def __init__(
        self,
        compiler: str = DEFAULT_COMPILER,
        cropper: str = DEFAULT_CROPPER,
        crop: bool = True,
        crop_margin: float = 10,
        timeout: Optional[float] = None,
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        self.compiler = compiler
        self.cropper = cropper
        self.crop = crop
        self.crop_margin = crop_margin
        self.timeout = timeout

    def required_tools(self) -> List[str]:
        return [self.compiler, self.cropper] if self.crop else [self.compiler]

    def run(self, document: str, output_directory: os.PathLike | str, name: str) -> CompileResult:
        require_tools(self.required_tools())
        directory = prepare_output_directory(output_directory)
        tex_path = write_source(directory, name, document)
        result = CompileResult(tex_path=tex_path)
        # stale artifacts from an earlier run must not pass as this run's output
        for stale in (tex_path.with_suffix(".pdf"), cropped_name(tex_path.with_suffix(".pdf"))):
            stale.unlink(missing_ok=True)

        result.transition(CompileState.COMPILING)
        try:
            result.pdf_path = compile_latex(tex_path, self.compiler, self.timeout)
        except ExternalToolError as e:
            result.transition(CompileState.COMPILE_FAILED)
            result.log = e.log_detail
            logger.error("Compilation of %s failed", tex_path.name)
            raise
        result.transition(CompileState.COMPILED)
        logger.info("Compiled %s", result.pdf_path)

        if not self.crop:
            return result

        result.transition(CompileState.CROPPING)
        try:
            result.cropped_path = crop_pdf(
                result.pdf_path, margin=self.crop_margin, cropper=self.cropper, timeout=self.timeout
            )
        except ExternalToolError as e:
            result.transition(CompileState.CROP_FAILED)
            result.log = e.log_detail or str(e)
            logger.warning("Cropping failed; full PDF kept at %s: %s", result.pdf_path, e)
            return result
        result.transition(CompileState.CROPPED)
        logger.info("Cropped PDF written to %s", result.cropped_path)
        return result
