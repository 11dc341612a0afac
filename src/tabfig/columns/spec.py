"""Column alignment directives, including siunitx decimal-aligned columns."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError, InputValidationError

DECIMAL_PATTERN = re.compile(r"^S(\[.*\])?$")
_TABLE_FORMAT = re.compile(r"^\d+\.\d+$")
_PLAIN_TOKENS = re.compile(r"^[lcr]+$")
ROUND_MODES = ("none", "places", "figures")

SIUNITX_PACKAGES: Tuple[str, ...] = ("\\usepackage{siunitx}", "\\sisetup{detect-all}")


@dataclass(frozen=True)
class DecimalColumn:
    """A siunitx ``S`` column aligning values on the decimal point.

    ``table_format`` follows the ``integer-digits.decimal-digits`` convention,
    e.g. ``"3.2"`` fits values up to 999.99.
    """

    table_format: str = "3.2"
    round_mode: str = "none"
    round_precision: Optional[int] = None
    detect_weight: bool = True
    group_separator: Optional[str] = None

    def __post_init__(self) -> None:
        if not _TABLE_FORMAT.match(self.table_format):
            raise InputValidationError(
                f"table_format must look like '3.2', got {self.table_format!r}"
            )
        if self.round_mode not in ROUND_MODES:
            raise InputValidationError(f"round_mode must be one of {ROUND_MODES}")

    @property
    def options(self) -> List[str]:
        opts = [f"table-format={self.table_format}"]
        if self.round_mode != "none" and self.round_precision is not None:
            opts.append(f"round-mode={self.round_mode}")
            opts.append(f"round-precision={self.round_precision}")
        if self.detect_weight:
            opts.extend(["detect-weight=true", "mode=text"])
        if self.group_separator is not None:
            opts.append(f"group-separator={{{self.group_separator}}}")
        return opts

    @property
    def directive(self) -> str:
        return "S[" + ",".join(self.options) + "]"

    @property
    def packages(self) -> Tuple[str, ...]:
        return SIUNITX_PACKAGES

    def __str__(self) -> str:
        return self.directive


def decimal(integers: int = 3, decimals: int = 2) -> DecimalColumn:
    """Shorthand for ``DecimalColumn(table_format="<integers>.<decimals>")``."""
    return DecimalColumn(table_format=f"{int(integers)}.{int(decimals)}")


ColumnToken = Union[str, DecimalColumn]


@dataclass(frozen=True)
class ColumnSpec:
    directives: Tuple[str, ...]
    decimal_positions: Tuple[int, ...]
    packages: Tuple[str, ...]

    @property
    def column_format(self) -> str:
        return "".join(self.directives)

    def __len__(self) -> int:
        return len(self.directives)


def _is_decimal(token: Any) -> bool:
    if isinstance(token, DecimalColumn):
        return True
    return isinstance(token, str) and bool(DECIMAL_PATTERN.match(token.strip()))


def detect_decimal_columns(spec: Union[ColumnToken, Sequence[ColumnToken], None]) -> List[int]:
    """Return 1-indexed positions of decimal-aligned columns in ``spec``."""
    if spec is None:
        return []
    if isinstance(spec, (str, DecimalColumn)):
        spec = [spec]
    return [i for i, token in enumerate(spec, start=1) if _is_decimal(token)]


def _expand(align: Union[ColumnToken, Sequence[ColumnToken]], n_columns: int) -> List[ColumnToken]:
    if isinstance(align, DecimalColumn):
        return [align] * n_columns
    if isinstance(align, str):
        token = align.strip()
        if not token:
            raise ConfigurationError("Alignment string must not be empty")
        if len(token) > 1 and _PLAIN_TOKENS.match(token):
            tokens: List[ColumnToken] = list(token)
        else:
            return [token] * n_columns
    else:
        tokens = list(align)
    if len(tokens) != n_columns:
        raise ConfigurationError(
            f"Alignment specifies {len(tokens)} column(s) but the table has {n_columns}"
        )
    return tokens


def build_column_spec(
    align: Union[ColumnToken, Sequence[ColumnToken], None],
    n_columns: int,
    numeric: Optional[Sequence[bool]] = None,
) -> ColumnSpec:
    """Resolve ``align`` into renderer directives for ``n_columns`` columns.

    ``None`` picks ``r`` for numeric columns and ``l`` otherwise. A single
    token applies to every column; a string of ``l``/``c``/``r`` letters or a
    list is taken per column and must match the column count.
    """
    if n_columns < 1:
        raise InputValidationError("Table must have at least one column")
    if align is None:
        flags = list(numeric) if numeric is not None else [False] * n_columns
        tokens: List[ColumnToken] = ["r" if f else "l" for f in flags]
    else:
        tokens = _expand(align, n_columns)

    directives: List[str] = []
    packages: List[str] = []
    for token in tokens:
        if isinstance(token, DecimalColumn):
            directives.append(token.directive)
            packages.extend(token.packages)
        elif isinstance(token, str) and token.strip():
            directives.append(token.strip())
            if _is_decimal(token):
                packages.extend(SIUNITX_PACKAGES)
        else:
            raise ConfigurationError(f"Invalid column alignment token: {token!r}")

    return ColumnSpec(
        directives=tuple(directives),
        decimal_positions=tuple(detect_decimal_columns(tokens)),
        packages=tuple(dict.fromkeys(packages)),
    )
