from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

from .compile import check_latex_deps, output_formats
from .errors import CropError, TabfigError
from .pipeline import t2f
from .themes import default_registry
from .utils.config import DEFAULT_PATH, load_defaults


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="tabfig",
        description="Turn tabular data into LaTeX tables compiled to cropped PDFs.",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_PATH,
        help="Path to tabfig.yaml with default options (default: ./tabfig.yaml)",
    )
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="Render a CSV or Excel file to .tex/.pdf/_cropped.pdf")
    r.add_argument("input", type=Path, help="CSV or .xlsx file with a header row")
    r.add_argument("--sheet", default=None, help="Worksheet name for Excel input (default: first sheet)")
    r.add_argument("--filename", default=None, help="Output name stem (default: input file stem)")
    r.add_argument("--output-directory", default=None, help="Output directory (default: figures)")
    r.add_argument("--theme", default=None, help="Built-in or registered theme name")
    r.add_argument("--alignment", default=None, help="Alignment tokens, e.g. 'lrr' or 'c'")
    r.add_argument("--caption", default=None, help="Table caption")
    r.add_argument("--label", default=None, help="LaTeX label for cross-references")
    r.add_argument("--shading-color", default=None, help="Row shading color, e.g. 'gray!10'")
    r.add_argument("--document-class", default=None, help="LaTeX document class (default: article)")
    r.add_argument("--longtable", action="store_true", default=None, help="Use a multi-page longtable")
    r.add_argument("--no-crop", dest="crop", action="store_false", default=None, help="Skip pdfcrop")
    r.add_argument("--crop-margin", type=float, default=None, help="pdfcrop margin in pt (default: 10)")
    r.add_argument("--timeout", type=float, default=None, help="Seconds allowed per external tool run")
    r.add_argument("--output-format", default=None, choices=["pdf", "png", "svg"], help="Also export PNG or SVG")
    r.add_argument("--dpi", type=int, default=None, help="Resolution for PNG output (default: 300)")
    r.add_argument("--use-cache", action="store_true", default=None, help="Reuse previously compiled artifacts")
    r.add_argument("-v", "--verbose", action="store_true", default=None, help="Log progress messages")

    sub.add_parser("check", help="Report whether pdflatex and pdfcrop are available")
    sub.add_parser("themes", help="List available themes")
    return p.parse_args(argv)


_RENDER_OPTIONS = (
    "filename", "output_directory", "theme", "alignment", "caption", "label", "shading_color",
    "document_class", "longtable", "crop", "crop_margin", "timeout", "use_cache", "verbose",
    "output_format", "dpi",
)


def _read_table(path: Path, sheet=None) -> pd.DataFrame:
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        return pd.read_excel(path, sheet_name=sheet or 0, engine="openpyxl")
    return pd.read_csv(path)


def _render(args) -> int:
    defaults = load_defaults(args.config)
    options = defaults.model_dump(exclude_none=True)
    for key in _RENDER_OPTIONS:
        value = getattr(args, key)
        if value is not None:
            options[key] = value
    options.setdefault("filename", args.input.stem)
    df = _read_table(args.input, args.sheet)
    df.attrs["name"] = args.input.stem
    result = t2f(df, **options)
    print(result.converted_path or result.artifact)
    return 0


def _check() -> int:
    status = check_latex_deps()
    for tool, ok in status.items():
        print(f"{tool}: {'found' if ok else 'missing'}")
    for fmt, ok in output_formats().items():
        if fmt != "pdf":
            print(f"{fmt} output: {'available' if ok else 'unavailable'}")
    return 0 if all(status.values()) else 1


def _themes() -> int:
    registry = default_registry()
    for name in registry.list_themes():
        print(registry.lookup(name).describe())
    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        if args.command == "render":
            return _render(args)
        if args.command == "check":
            return _check()
        return _themes()
    except CropError as e:
        print(f"warning: {e}", file=sys.stderr)
        return 3
    except TabfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except FileNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
