from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional, Sequence, Union

from tqdm import tqdm

from .compile import CompileResult
from .errors import InputValidationError, TabfigError
from .pipeline import t2f
from .themes import Theme

logger = logging.getLogger(__name__)


@dataclass
class BatchSpec:
    """One table of a batch with its own filename and per-table ``t2f`` options."""

    x: Any
    filename: str
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.filename, str) or not self.filename:
            raise InputValidationError("`filename` must be a non-empty string")
        if "filename" in self.options:
            raise InputValidationError("Pass the filename as BatchSpec.filename, not as an option")


def batch_spec(x: Any, filename: str, **options: Any) -> BatchSpec:
    return BatchSpec(x=x, filename=filename, options=options)


@dataclass
class BatchResult:
    """Per-name outcome of a batch: a result, or ``None`` plus the error."""

    results: Dict[str, Optional[CompileResult]] = field(default_factory=dict)
    errors: Dict[str, TabfigError] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Optional[CompileResult]:
        return self.results[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> Dict[str, CompileResult]:
        return {k: v for k, v in self.results.items() if v is not None}

    @property
    def failed(self) -> Dict[str, TabfigError]:
        return dict(self.errors)


def _as_specs(tables: Union[Mapping[str, Any], Sequence[Any]]) -> Sequence[BatchSpec]:
    if isinstance(tables, Mapping):
        return [t if isinstance(t, BatchSpec) else BatchSpec(x=t, filename=str(k)) for k, t in tables.items()]
    if isinstance(tables, (list, tuple)):
        return [
            t if isinstance(t, BatchSpec) else BatchSpec(x=t, filename=f"table_{i}")
            for i, t in enumerate(tables, start=1)
        ]
    raise InputValidationError("`tables` must be a mapping of name -> table or a list of tables/BatchSpecs")


def t2f_batch(
    tables: Union[Mapping[str, Any], Sequence[Any]],
    output_directory: Union[str, os.PathLike] = "figures",
    theme: Union[Theme, str, None] = None,
    verbose: bool = False,
    **kwargs: Any,
) -> BatchResult:
    """Run :func:`tabfig.t2f` over many tables with shared options.

    Per-table :class:`BatchSpec` options override ``kwargs``. A failing table
    is logged and recorded in ``errors`` with result ``None``; the rest of the
    batch still runs.
    """
    specs = _as_specs(tables)
    if not specs:
        raise InputValidationError("`tables` must not be empty")
    if "filename" in kwargs:
        raise InputValidationError("Filenames come from the batch keys, not from `filename`")
    names = [s.filename for s in specs]
    if len(set(names)) != len(names):
        raise InputValidationError("Batch filenames must be unique")

    out = BatchResult()
    for spec in tqdm(specs, desc="t2f_batch", unit="table", disable=not verbose, leave=False):
        if verbose:
            logger.info("Processing: %s", spec.filename)
        options = {"output_directory": output_directory, "theme": theme, "verbose": verbose, **kwargs, **spec.options}
        try:
            out.results[spec.filename] = t2f(spec.x, filename=spec.filename, **options)
        except TabfigError as e:
            logger.warning("Failed to process '%s': %s", spec.filename, e)
            out.results[spec.filename] = None
            out.errors[spec.filename] = e
    logger.info("Completed: %d/%d tables processed successfully", len(out.succeeded), len(out))
    return out
