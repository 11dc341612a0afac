"""Loading of ``tabfig.yaml`` defaults with ``TABFIG_*`` environment overrides.

Keys in the YAML file are the keyword arguments of :func:`tabfig.t2f`
(``theme``, ``crop_margin``, ``output_directory``, ...). An environment
variable ``TABFIG_<KEY>`` overrides the file, e.g. ``TABFIG_CROP_MARGIN=4``.
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml
from pydantic import ValidationError

from ..core.config import ProjectConfig
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path("tabfig.yaml")
ENV_PREFIX = "TABFIG_"


def load_config(path: str | Path = DEFAULT_PATH) -> Dict[str, Any]:
    """Load YAML config from ``path`` and return a dict.

    A missing file yields an empty dict; a malformed one raises
    :class:`ConfigurationError`.
    """
    p = Path(path)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse config file '{p}': {e}") from e
    if not isinstance(cfg, dict):
        raise ConfigurationError(f"Config file '{p}' must contain a mapping at the top level")
    return cfg


def _sanitize_key(k: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in k).upper()


def _parse_env_value(v: str) -> Any:
    s = v.strip()
    if (s.startswith("[") and s.endswith("]")) or (s.startswith("{") and s.endswith("}")):
        try:
            return json.loads(s)
        except json.JSONDecodeError:
            pass
    low = s.lower()
    if low in {"true", "yes", "y"}:
        return True
    if low in {"false", "no", "n"}:
        return False
    if low in {"none", "null", ""}:
        return None
    try:
        if "." in s:
            return float(s)
        return int(s)
    except ValueError:
        pass
    return s


def override_config_from_env(cfg: dict, prefix: str = ENV_PREFIX, keys: Optional[Iterable[str]] = None) -> dict:
    """Apply ``<prefix><KEY>`` environment variables on top of ``cfg``.

    Only keys already present in ``cfg`` or listed in ``keys`` are touched,
    so unrelated ``TABFIG_*`` variables (e.g. ``TABFIG_CACHE_DIR``) pass
    through.
    """
    known = {_sanitize_key(k): k for k in (*cfg.keys(), *(keys or ())) if isinstance(k, str)}
    pat = re.compile(rf"^{re.escape(prefix)}(?P<rest>.+)$")
    for k, v in os.environ.items():
        m = pat.match(k)
        if not m:
            continue
        key = known.get(m.group("rest").upper())
        if key is None:
            continue
        cfg[key] = _parse_env_value(v)
        logger.debug("Config key '%s' overridden from %s", key, k)
    return cfg


def load_defaults(path: str | Path = DEFAULT_PATH, prefix: str = ENV_PREFIX) -> ProjectConfig:
    """File defaults, then environment overrides, validated as :class:`ProjectConfig`."""
    cfg = load_config(path)
    unknown = sorted(set(cfg) - set(ProjectConfig.model_fields))
    if unknown:
        raise ConfigurationError(f"Unknown option(s) in {path}: {', '.join(unknown)}")
    cfg = override_config_from_env(cfg, prefix=prefix, keys=ProjectConfig.model_fields)
    try:
        return ProjectConfig(**cfg)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
