"""The ``t2f`` entry point: table in, ``.tex``/``.pdf``/``_cropped.pdf`` out.

Validation, theming, rendering and document assembly all happen in memory
first; nothing touches the filesystem or spawns a process until the full
document text exists.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Iterable, Optional, Sequence, Union

from pandas.api.types import is_bool_dtype, is_numeric_dtype
from pydantic import ValidationError

from .adapters import adapt, default_name
from .cache import check_cache, compute_cache_hash, store_cache
from .columns import build_column_spec
from .compile import (
    CompileCropOrchestrator,
    CompileResult,
    CompileState,
    convert_artifact,
    prepare_output_directory,
    resolve_converter,
)
from .core.config import TableConfig
from .errors import CropError, InputValidationError
from .markup.document import PackageLike, build_document
from .markup.features import CollapseRows, Footnote, HeaderGroups
from .markup.formatting import Formats
from .markup.table import assemble_table, table_summary
from .sanitize import escape_latex, sanitize_filename, sanitize_frame
from .themes import Theme, ThemeRegistry, default_registry
from .utils.logging_utils import enable_verbose

logger = logging.getLogger(__name__)


def _numeric_columns(df) -> Sequence[bool]:
    return [is_numeric_dtype(t) and not is_bool_dtype(t) for t in df.dtypes]


def _validate_options(**options: Any) -> TableConfig:
    try:
        return TableConfig(**options)
    except ValidationError as e:
        raise InputValidationError(f"Invalid t2f option(s): {e}") from e


def t2f(
    x: Any,
    filename: Optional[str] = None,
    output_directory: Union[str, os.PathLike] = "figures",
    shading_color: Optional[str] = None,
    document_class: str = "article",
    extra_packages: Optional[Iterable[PackageLike]] = None,
    alignment: Any = None,
    longtable: bool = False,
    caption: Optional[str] = None,
    caption_short: Optional[str] = None,
    label: Optional[str] = None,
    crop: bool = True,
    crop_margin: float = 10,
    theme: Union[Theme, str, None] = None,
    footnote: Union[Footnote, str, None] = None,
    header_above: HeaderGroups = None,
    collapse_rows: Optional[CollapseRows] = None,
    verbose: bool = False,
    timeout: Optional[float] = None,
    font_size: Optional[str] = None,
    header_bold: Optional[bool] = None,
    striped: Optional[bool] = None,
    use_cache: bool = False,
    compiler: str = "pdflatex",
    cropper: str = "pdfcrop",
    output_format: str = "pdf",
    dpi: int = 300,
    converter: Optional[str] = None,
    formatting: Formats = None,
    float_format: Optional[str] = None,
    registry: Optional[ThemeRegistry] = None,
) -> CompileResult:
    """Typeset ``x`` as a table and compile it to a cropped PDF.

    ``x`` is a DataFrame or anything a registered adapter can reduce to one.
    Writes ``<name>.tex``, ``<name>.pdf`` and (unless ``crop=False``)
    ``<name>_cropped.pdf`` into ``output_directory``.
    ``output_format="png"`` or ``"svg"`` also converts that artifact and
    records the file in ``converted_path``. ``formatting`` takes
    :class:`CellFormat` objects (see :func:`t2f_format`).

    Style precedence: explicit ``shading_color``/``header_bold``/
    ``font_size``/``striped`` > ``theme`` > current theme > ``minimal``.

    Raises:
        InputValidationError: non-tabular or empty input, bad option values.
        ConfigurationError: unknown theme, alignment or header spans that do
            not match the column count.
        FilesystemError: output directory not creatable or not writable.
        ExternalToolError: compiler missing, failing or timing out.
        CropError: compile succeeded but cropping failed; ``.result`` holds
            the partial :class:`CompileResult` with the full PDF.
    """
    if verbose:
        enable_verbose()

    tag, df = adapt(x)
    if isinstance(footnote, str):
        footnote = Footnote(general=footnote)
    elif footnote is not None and not isinstance(footnote, Footnote):
        raise InputValidationError("`footnote` must be a Footnote or a string")
    if collapse_rows is not None and not isinstance(collapse_rows, CollapseRows):
        raise InputValidationError("`collapse_rows` must be a CollapseRows object")
    cfg = _validate_options(
        filename=filename,
        output_directory=os.fspath(output_directory),
        shading_color=shading_color,
        document_class=document_class,
        longtable=longtable,
        caption=caption,
        caption_short=caption_short,
        label=label,
        crop=crop,
        crop_margin=crop_margin,
        verbose=verbose,
        timeout=timeout,
        font_size=font_size,
        header_bold=header_bold,
        striped=striped,
        use_cache=use_cache,
        compiler=compiler,
        cropper=cropper,
        output_format=output_format,
        dpi=dpi,
        converter=converter,
    )
    name = sanitize_filename(cfg.filename or default_name(x, tag))

    effective = (registry or default_registry()).resolve(
        theme,
        shading_color=cfg.shading_color,
        header_bold=cfg.header_bold,
        font_size=cfg.font_size,
        striped=cfg.striped,
    )
    spec = build_column_spec(alignment, df.shape[1], _numeric_columns(df))
    table = sanitize_frame(df, float_format=float_format)
    logger.info("Generating LaTeX table '%s' (%s, theme '%s')", name, tag, effective.name)
    logger.debug("Table layout: %s", table_summary(table, spec))

    assembled = assemble_table(
        table,
        spec,
        effective,
        caption=escape_latex(cfg.caption) if cfg.caption else None,
        caption_short=escape_latex(cfg.caption_short) if cfg.caption_short else None,
        label=cfg.label,
        longtable=cfg.longtable,
        footnote=footnote,
        header_above=header_above,
        collapse=collapse_rows,
        formatting=formatting,
        values=df,
    )
    document = build_document(assembled.markup, cfg.document_class, assembled.packages, extra_packages)

    orchestrator = CompileCropOrchestrator(
        compiler=cfg.compiler,
        cropper=cfg.cropper,
        crop=cfg.crop,
        crop_margin=cfg.crop_margin,
        timeout=cfg.timeout,
    )

    converter_tool = resolve_converter(cfg.output_format, cfg.converter)

    result = None
    key = None
    if cfg.use_cache:
        key = compute_cache_hash(
            document,
            {"compiler": cfg.compiler, "cropper": cfg.cropper, "crop": cfg.crop, "crop_margin": cfg.crop_margin},
        )
        directory = prepare_output_directory(cfg.output_directory)
        result = check_cache(key, directory, name, document, crop=cfg.crop)

    if result is None:
        logger.info("Compiling LaTeX to PDF in %s", cfg.output_directory)
        result = orchestrator.run(document, cfg.output_directory, name)
        if result.state == CompileState.CROP_FAILED:
            raise CropError(
                f"Cropping failed; the full PDF is available at {result.pdf_path}"
                + (f":\n{result.log}" if result.log else ""),
                result=result,
                tool=cfg.cropper,
                log_detail=result.log,
            )
        if key is not None:
            store_cache(key, result)
        logger.info("PDF generated at: %s", result.artifact)

    if converter_tool is not None:
        result.converted_path = convert_artifact(
            result.artifact, cfg.output_format, dpi=cfg.dpi, converter=converter_tool, timeout=cfg.timeout
        )
    return result
