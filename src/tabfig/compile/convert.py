"""Raster and vector exports of a compiled table.

PNG goes through ImageMagick (``convert``); SVG through ``pdf2svg`` or,
when that is missing, Inkscape. Tools run with ``cwd=`` set to the PDF's
directory, like the compiler and cropper.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from ..errors import ConfigurationError, ExternalToolError, FilesystemError
from .orchestrator import run_tool
from .tools import require_tools, tool_available

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("pdf", "png", "svg")
PNG_CONVERTER = "convert"
SVG_CONVERTERS = ("pdf2svg", "inkscape")


def output_formats() -> Dict[str, bool]:
    """Which output formats the installed tools can produce."""
    formats = {
        "pdf": True,
        "png": tool_available(PNG_CONVERTER),
        "svg": any(tool_available(t) for t in SVG_CONVERTERS),
    }
    if not formats["png"]:
        logger.info("PNG output needs ImageMagick ('%s')", PNG_CONVERTER)
    if not formats["svg"]:
        logger.info("SVG output needs one of: %s", ", ".join(SVG_CONVERTERS))
    return formats


def resolve_converter(output_format: str, converter: Optional[str] = None) -> Optional[str]:
    """Pick the tool for ``output_format``; ``None`` for plain PDF output.

    Raises :class:`ExternalToolError` when no usable tool is installed, so
    callers can check before compiling anything.
    """
    fmt = output_format.lower()
    if fmt not in OUTPUT_FORMATS:
        raise ConfigurationError(f"Unknown output format '{output_format}'; expected one of {', '.join(OUTPUT_FORMATS)}")
    if fmt == "pdf":
        return None
    if converter:
        require_tools([converter])
        return converter
    if fmt == "png":
        require_tools([PNG_CONVERTER])
        return PNG_CONVERTER
    for tool in SVG_CONVERTERS:
        if tool_available(tool):
            return tool
    raise ExternalToolError(
        f"SVG output needs one of: {', '.join(SVG_CONVERTERS)}", tool=SVG_CONVERTERS[0]
    )


def _check_source(pdf_path: Path) -> Path:
    pdf_path = Path(pdf_path)
    if not pdf_path.is_file():
        raise FilesystemError(f"PDF file not found: {pdf_path}")
    return pdf_path


def _finish(proc, tool: str, source: Path, target: Path) -> Path:
    if proc.returncode != 0 or not target.exists():
        detail = "\n".join((proc.stderr or proc.stdout or "").splitlines()[-20:]).strip()
        raise ExternalToolError(
            f"{tool} could not convert {source.name} to {target.suffix[1:].upper()}"
            f" (exit status {proc.returncode})" + (f":\n{detail}" if detail else ""),
            tool=tool,
            returncode=proc.returncode,
            log_detail=detail,
        )
    logger.info("Converted %s to %s", source.name, target)
    return target


def convert_pdf_to_png(
    pdf_path: Path,
    png_path: Optional[Path] = None,
    dpi: int = 300,
    background: str = "white",
    converter: str = PNG_CONVERTER,
    timeout: Optional[float] = None,
) -> Path:
    source = _check_source(pdf_path)
    if dpi <= 0:
        raise ConfigurationError("dpi must be positive")
    target = Path(png_path) if png_path is not None else source.with_suffix(".png")
    target.unlink(missing_ok=True)
    cmd = [converter, "-density", str(dpi), "-background", background, "-flatten", source.name, str(target.resolve())]
    return _finish(run_tool(cmd, source.parent, timeout), converter, source, target)


def convert_pdf_to_svg(
    pdf_path: Path,
    svg_path: Optional[Path] = None,
    converter: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Path:
    source = _check_source(pdf_path)
    tool = converter or resolve_converter("svg")
    target = Path(svg_path) if svg_path is not None else source.with_suffix(".svg")
    target.unlink(missing_ok=True)
    if "inkscape" in Path(tool).name.lower():
        cmd = [tool, "--export-filename", str(target.resolve()), source.name]
    else:
        cmd = [tool, source.name, str(target.resolve())]
    return _finish(run_tool(cmd, source.parent, timeout), tool, source, target)


def convert_artifact(
    pdf_path: Path,
    output_format: str,
    dpi: int = 300,
    converter: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Optional[Path]:
    """Convert ``pdf_path`` to ``output_format``; ``None`` when the format is PDF."""
    fmt = output_format.lower()
    tool = resolve_converter(fmt, converter)
    if tool is None:
        return None
    if fmt == "png":
        return convert_pdf_to_png(pdf_path, dpi=dpi, converter=tool, timeout=timeout)
    return convert_pdf_to_svg(pdf_path, converter=tool, timeout=timeout)
