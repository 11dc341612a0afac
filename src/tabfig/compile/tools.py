"""Pre-flight checks for the external compiler and cropper."""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Dict, Iterator, Optional, Sequence

from ..errors import ExternalToolError

logger = logging.getLogger(__name__)

DEFAULT_COMPILER = "pdflatex"
DEFAULT_CROPPER = "pdfcrop"

_CWD_LOCK = threading.RLock()


def tool_available(cmd: str) -> bool:
    """True when ``cmd`` resolves to an executable on ``PATH`` (or is one)."""
    if not cmd:
        return False
    return shutil.which(cmd) is not None


def check_latex_deps(compiler: str = DEFAULT_COMPILER, cropper: Optional[str] = DEFAULT_CROPPER) -> Dict[str, bool]:
    """Report which of the external tools can be found; never raises."""
    status = {compiler: tool_available(compiler)}
    if cropper:
        status[cropper] = tool_available(cropper)
    for name, ok in status.items():
        if not ok:
            logger.info("External tool '%s' not found on PATH", name)
    return status


def require_tools(tools: Sequence[str]) -> None:
    missing = [t for t in tools if t and not tool_available(t)]
    if missing:
        raise ExternalToolError(
            f"Required external tool(s) not found: {', '.join(missing)}. "
            "Install a TeX distribution providing them or pass an explicit path.",
            tool=missing[0],
        )


@contextlib.contextmanager
def scoped_directory(path: os.PathLike | str) -> Iterator[Path]:
    """Temporarily change the process working directory.

    Public helper for callers that run their own tools against an output
    directory; the compile pipeline itself passes ``cwd=`` to each process
    and never changes the process directory. Threads are serialized through
    a reentrant module lock, so nesting in one thread is allowed. The
    previous directory is restored on every exit path.
    """
    target = Path(path)
    with _CWD_LOCK:
        previous = Path.cwd()
        os.chdir(target)
        try:
            yield target
        finally:
            os.chdir(previous)
