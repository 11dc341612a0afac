"""Content-addressed cache of compiled artifacts.

An entry is keyed by the SHA1 of the canonical JSON of the generated
document plus the options that affect the produced files, so a hit is
byte-for-byte what a fresh compile would write.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

from .compile.orchestrator import CompileResult, CompileState, cropped_name, write_source
from .errors import FilesystemError

logger = logging.getLogger(__name__)

_FULL = "full.pdf"
_CROPPED = "cropped.pdf"
_META = "meta.json"


def cache_dir() -> Path:
    env = os.environ.get("TABFIG_CACHE_DIR")
    if env:
        return Path(env).expanduser()
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache")) / "tabfig"


def compute_cache_hash(document: str, options: Optional[Dict[str, Any]] = None) -> str:
    payload = {"document": document, "options": options or {}}
    j = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha1(j.encode("utf-8")).hexdigest()


def _entry(key: str) -> Path:
    return cache_dir() / key


def check_cache(key: str, output_directory: Path, name: str, document: str, crop: bool = True) -> Optional[CompileResult]:
    """Restore a cached entry into ``output_directory``; ``None`` on a miss.

    The source file is always rewritten so the three artifacts stay
    consistent with each other.
    """
    entry = _entry(key)
    full = entry / _FULL
    cropped = entry / _CROPPED
    if not full.exists() or (crop and not cropped.exists()):
        return None
    tex_path = write_source(output_directory, name, document)
    pdf_path = tex_path.with_suffix(".pdf")
    try:
        shutil.copy2(full, pdf_path)
        result = CompileResult(tex_path=tex_path, pdf_path=pdf_path, cached=True)
        result.transition(CompileState.COMPILED)
        if crop:
            result.cropped_path = cropped_name(pdf_path)
            shutil.copy2(cropped, result.cropped_path)
            result.transition(CompileState.CROPPED)
    except OSError as e:
        raise FilesystemError(f"Cannot restore cached artifacts for {name}: {e}") from e
    logger.info("Cache hit for %s (%s)", name, key[:8])
    return result


def store_cache(key: str, result: CompileResult) -> Optional[Path]:
    """Copy the artifacts of a successful run into the cache."""
    if not result.success or result.pdf_path is None:
        return None
    entry = _entry(key)
    try:
        entry.mkdir(parents=True, exist_ok=True)
        shutil.copy2(result.pdf_path, entry / _FULL)
        if result.cropped and result.cropped_path is not None:
            shutil.copy2(result.cropped_path, entry / _CROPPED)
        (entry / _META).write_text(
            json.dumps({"name": result.tex_path.stem, "state": result.state.value}, indent=2),
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning("Could not store cache entry %s: %s", key[:8], e)
        return None
    return entry


def clear_cache() -> int:
    """Delete every cache entry; returns how many were removed."""
    root = cache_dir()
    if not root.exists():
        return 0
    n = 0
    for entry in root.iterdir():
        if entry.is_dir():
            shutil.rmtree(entry)
            n += 1
    logger.info("Removed %d cache entr%s", n, "y" if n == 1 else "ies")
    return n
