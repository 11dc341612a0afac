"""tabfig public API: tables to typeset, cropped PDF figures."""

from .errors import (
    ConfigurationError,
    CropError,
    ExternalToolError,
    FilesystemError,
    InputValidationError,
    TabfigError,
)
from .sanitize import sanitize_column_names, sanitize_filename, sanitize_table_cells
from .themes import (
    Theme,
    ThemeRegistry,
    clear_themes,
    get_current_theme,
    get_theme,
    list_themes,
    register_theme,
    set_current_theme,
    unregister_theme,
)
from .columns import DecimalColumn, build_column_spec, decimal, detect_decimal_columns
from .markup import (
    CellFormat,
    CollapseRows,
    Footnote,
    HeaderGroup,
    Package,
    apply_formatting,
    babel,
    build_document,
    fontspec,
    geometry,
    t2f_bold_col,
    t2f_color_row,
    t2f_format,
    t2f_highlight,
    t2f_italic_col,
)
from .compile import (
    CompileResult,
    CompileState,
    check_latex_deps,
    convert_pdf_to_png,
    convert_pdf_to_svg,
    output_formats,
    scoped_directory,
    tool_available,
)
from .adapters import register_adapter, to_frame
from .coefs import ModelSummary, build_coef_table, build_model_stats, format_pvalue, format_with_stars
from .pipeline import t2f
from .regression import regression_table, summarize_linear_model, t2f_regression
from .batch import BatchResult, BatchSpec, batch_spec, t2f_batch
from .cache import clear_cache, compute_cache_hash
from .include import (
    resolve_pdf_path,
    t2f_include,
    t2f_include_inline,
    t2f_include_sidebyside,
    t2f_include_wrap,
    t2f_ref,
)

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "BatchSpec",
    "CellFormat",
    "CollapseRows",
    "CompileResult",
    "CompileState",
    "ConfigurationError",
    "CropError",
    "DecimalColumn",
    "ExternalToolError",
    "FilesystemError",
    "Footnote",
    "HeaderGroup",
    "InputValidationError",
    "ModelSummary",
    "Package",
    "TabfigError",
    "Theme",
    "ThemeRegistry",
    "apply_formatting",
    "babel",
    "batch_spec",
    "build_coef_table",
    "build_column_spec",
    "build_document",
    "build_model_stats",
    "check_latex_deps",
    "clear_cache",
    "clear_themes",
    "compute_cache_hash",
    "convert_pdf_to_png",
    "convert_pdf_to_svg",
    "decimal",
    "detect_decimal_columns",
    "fontspec",
    "format_pvalue",
    "format_with_stars",
    "geometry",
    "get_current_theme",
    "get_theme",
    "list_themes",
    "output_formats",
    "register_adapter",
    "register_theme",
    "regression_table",
    "resolve_pdf_path",
    "sanitize_column_names",
    "sanitize_filename",
    "sanitize_table_cells",
    "scoped_directory",
    "set_current_theme",
    "summarize_linear_model",
    "t2f",
    "t2f_batch",
    "t2f_bold_col",
    "t2f_color_row",
    "t2f_format",
    "t2f_highlight",
    "t2f_include",
    "t2f_include_inline",
    "t2f_include_sidebyside",
    "t2f_include_wrap",
    "t2f_italic_col",
    "t2f_ref",
    "t2f_regression",
    "to_frame",
    "tool_available",
    "unregister_theme",
]
