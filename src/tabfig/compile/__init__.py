from .convert import (
    OUTPUT_FORMATS,
    convert_artifact,
    convert_pdf_to_png,
    convert_pdf_to_svg,
    output_formats,
    resolve_converter,
)
from .logparse import parse_latex_log
from .orchestrator import (
    CompileCropOrchestrator,
    CompileResult,
    CompileState,
    compile_latex,
    crop_pdf,
    cropped_name,
    prepare_output_directory,
    run_tool,
    write_source,
)
from .tools import check_latex_deps, require_tools, scoped_directory, tool_available

__all__ = [
    "OUTPUT_FORMATS",
    "CompileCropOrchestrator",
    "CompileResult",
    "CompileState",
    "check_latex_deps",
    "compile_latex",
    "convert_artifact",
    "convert_pdf_to_png",
    "convert_pdf_to_svg",
    "crop_pdf",
    "cropped_name",
    "output_formats",
    "parse_latex_log",
    "prepare_output_directory",
    "require_tools",
    "resolve_converter",
    "run_tool",
    "scoped_directory",
    "tool_available",
    "write_source",
]
