"""Standalone LaTeX document around a rendered table."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError

BASE_PACKAGES: Tuple[str, ...] = ("\\usepackage[table]{xcolor}", "\\usepackage{booktabs}")

_PACKAGE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")
_DOCUMENT_CLASS = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")


def _format_option(key: str, value: Any) -> Optional[str]:
    if value is None or value is False:
        return None
    if value is True:
        return key
    return f"{key}={value}"


@dataclass(frozen=True)
class Package:
    """Structured ``\\usepackage`` line.

    ``options`` is an ordered sequence of plain option strings or a mapping
    where ``True`` emits the bare key and ``None``/``False`` drop it.
    ``setup`` holds follow-up preamble lines (e.g. ``\\setmainfont``).
    """

    name: str
    options: Union[Sequence[str], Mapping[str, Any]] = ()
    setup: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not _PACKAGE_NAME.match(self.name):
            raise ConfigurationError(f"Invalid LaTeX package name: {self.name!r}")

    def option_string(self) -> str:
        if isinstance(self.options, Mapping):
            parts = [_format_option(str(k), v) for k, v in self.options.items()]
        else:
            parts = [str(o) for o in self.options]
        return ",".join(p for p in parts if p)

    def lines(self) -> List[str]:
        opts = self.option_string()
        head = f"\\usepackage[{opts}]{{{self.name}}}" if opts else f"\\usepackage{{{self.name}}}"
        return [head, *self.setup]

    def __str__(self) -> str:
        return "\n".join(self.lines())


def geometry(margin: Optional[str] = None, paper: Optional[str] = None, landscape: bool = False,
             **options: Any) -> Package:
    opts = {"margin": margin, "paper": paper, **options}
    if landscape:
        opts["landscape"] = True
    return Package("geometry", {k: v for k, v in opts.items() if v is not None})


def babel(language: str) -> Package:
    if not isinstance(language, str) or not language.strip():
        raise ConfigurationError("`language` must be a single non-empty string")
    return Package("babel", [language.strip()])


def fontspec(main_font: Optional[str] = None, sans_font: Optional[str] = None,
             mono_font: Optional[str] = None) -> Package:
    """Custom fonts; the document then needs XeLaTeX or LuaLaTeX as compiler."""
    setup = []
    if main_font:
        setup.append(f"\\setmainfont{{{main_font}}}")
    if sans_font:
        setup.append(f"\\setsansfont{{{sans_font}}}")
    if mono_font:
        setup.append(f"\\setmonofont{{{mono_font}}}")
    return Package("fontspec", setup=tuple(setup))


PackageLike = Union[str, Package, Sequence[Union[str, Package]]]


def package_lines(packages: Optional[Iterable[PackageLike]]) -> List[str]:
    """Flatten package descriptors into preamble lines; raw strings pass through."""
    out: List[str] = []
    for pkg in packages or ():
        if isinstance(pkg, Package):
            out.extend(pkg.lines())
        elif isinstance(pkg, str):
            out.extend(line for line in pkg.splitlines() if line.strip())
        elif isinstance(pkg, (list, tuple)):
            out.extend(package_lines(pkg))
        else:
            raise ConfigurationError(f"Unsupported package descriptor: {pkg!r}")
    return out


def build_preamble(document_class: str = "article", packages: Optional[Iterable[PackageLike]] = None,
                   extra_packages: Optional[Iterable[PackageLike]] = None) -> List[str]:
    if not isinstance(document_class, str) or not _DOCUMENT_CLASS.match(document_class):
        raise ConfigurationError(f"Invalid document class: {document_class!r}")
    lines = [*BASE_PACKAGES, *package_lines(packages), *package_lines(extra_packages)]
    return [f"\\documentclass{{{document_class}}}", *dict.fromkeys(lines)]


def build_document(body: str, document_class: str = "article",
                   packages: Optional[Iterable[PackageLike]] = None,
                   extra_packages: Optional[Iterable[PackageLike]] = None) -> str:
    """Wrap ``body`` in a complete document with a deduplicated preamble.

    ``packages`` are the lines the table features need (siunitx, multirow,
    ...); ``extra_packages`` are user descriptors and come last.
    """
    parts = [
        *build_preamble(document_class, packages, extra_packages),
        "\\begin{document}",
        "\\thispagestyle{empty}",
        "",
        body,
        "",
        "\\end{document}",
    ]
    return "\n".join(parts) + "\n"
