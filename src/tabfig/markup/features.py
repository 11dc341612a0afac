"""Specifications for footnotes, spanning headers and collapsed rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError, InputValidationError

SYMBOLS = ("*", "\\dag", "\\ddag", "\\S", "\\P")
VALIGN = {"top": "t", "middle": "c", "bottom": "b"}
HLINE_STYLES = ("none", "major", "full")


def _as_list(value: Union[str, Sequence[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def number_marker(index: int) -> str:
    return str(index + 1)


def alphabet_marker(index: int) -> str:
    letters = ""
    n = index
    while True:
        letters = chr(ord("a") + n % 26) + letters
        n = n // 26 - 1
        if n < 0:
            return letters


def symbol_marker(index: int) -> str:
    return SYMBOLS[index % len(SYMBOLS)] * (index // len(SYMBOLS) + 1)


@dataclass
class Footnote:
    """Notes printed under the table.

    ``general`` notes are unlabeled; ``number``, ``alphabet`` and ``symbol``
    notes get ``1, 2, ...``, ``a, b, ...`` and ``*, \\dag, ...`` markers.
    With ``threeparttable`` the tabular is wrapped so notes match its width.
    """

    general: Union[str, Sequence[str], None] = None
    number: Sequence[str] = ()
    alphabet: Sequence[str] = ()
    symbol: Sequence[str] = ()
    general_title: Optional[str] = "Note:"
    number_title: Optional[str] = None
    alphabet_title: Optional[str] = None
    symbol_title: Optional[str] = None
    threeparttable: bool = True

    def sections(self) -> List[Tuple[Optional[str], List[Tuple[Optional[str], str]]]]:
        """Return ``(title, [(marker, text), ...])`` blocks in print order."""
        out = []
        general = _as_list(self.general)
        if general:
            out.append((self.general_title, [(None, g) for g in general]))
        for title, notes, marker in (
            (self.number_title, _as_list(self.number), number_marker),
            (self.alphabet_title, _as_list(self.alphabet), alphabet_marker),
            (self.symbol_title, _as_list(self.symbol), symbol_marker),
        ):
            if notes:
                out.append((title, [(marker(i), text) for i, text in enumerate(notes)]))
        return out

    def is_empty(self) -> bool:
        return not self.sections()


@dataclass
class HeaderGroup:
    """One spanning header row: ordered ``(label, span)`` pairs.

    Blank labels (``""`` or ``" "``) leave the spanned columns without a
    group heading or rule.
    """

    groups: Sequence[Tuple[str, int]]
    bold: bool = True
    italic: bool = False
    align: str = "c"
    line: bool = True

    def __post_init__(self) -> None:
        groups = [(str(label), span) for label, span in self.groups]
        if not groups:
            raise InputValidationError("HeaderGroup needs at least one (label, span) pair")
        for label, span in groups:
            if not isinstance(span, int) or isinstance(span, bool) or span < 1:
                raise InputValidationError(f"Span for header '{label}' must be a positive integer")
        if self.align not in ("l", "c", "r"):
            raise InputValidationError("HeaderGroup align must be 'l', 'c' or 'r'")
        self.groups = groups

    @classmethod
    def from_dict(cls, spans: Mapping[str, int], **kwargs) -> "HeaderGroup":
        return cls(groups=list(spans.items()), **kwargs)

    @property
    def total_span(self) -> int:
        return sum(span for _, span in self.groups)

    def validate(self, n_columns: int) -> None:
        if self.total_span != n_columns:
            raise ConfigurationError(
                f"Header group spans sum to {self.total_span} but the table has {n_columns} column(s)"
            )


def resolve_columns(
    columns: Sequence[Union[int, str]],
    names: Sequence[str],
    aliases: Optional[Mapping[str, str]] = None,
    what: str = "target",
) -> List[int]:
    """Resolve column references to sorted 1-indexed positions.

    String entries may be original or sanitized column names; ``aliases``
    maps original names to sanitized ones.
    """
    aliases = aliases or {}
    out = []
    for col in columns:
        if isinstance(col, bool):
            raise ConfigurationError(f"Invalid {what} column {col!r}")
        if isinstance(col, int):
            if not 1 <= col <= len(names):
                raise ConfigurationError(
                    f"{what.capitalize()} column {col} is out of range for {len(names)} column(s)"
                )
            out.append(col)
            continue
        key = aliases.get(col, col)
        if key not in names:
            raise ConfigurationError(f"Unknown {what} column '{col}'")
        out.append(list(names).index(key) + 1)
    return sorted(set(out))


HeaderGroups = Union[HeaderGroup, Mapping[str, int], Sequence[HeaderGroup], None]


def as_header_groups(header_above: HeaderGroups) -> List[HeaderGroup]:
    if header_above is None:
        return []
    if isinstance(header_above, HeaderGroup):
        return [header_above]
    if isinstance(header_above, Mapping):
        return [HeaderGroup.from_dict(header_above)]
    groups = list(header_above)
    for g in groups:
        if not isinstance(g, HeaderGroup):
            raise InputValidationError("header_above must contain HeaderGroup objects")
    return groups


def validate_header_groups(header_above: HeaderGroups, n_columns: int) -> List[HeaderGroup]:
    groups = as_header_groups(header_above)
    for g in groups:
        g.validate(n_columns)
    return groups


@dataclass
class CollapseRows:
    """Merge runs of identical values in ``columns`` into ``\\multirow`` cells."""

    columns: Sequence[Union[int, str]] = field(default_factory=lambda: [1])
    valign: str = "middle"
    hline: str = "none"

    def __post_init__(self) -> None:
        if self.valign not in VALIGN:
            raise InputValidationError(f"valign must be one of {', '.join(VALIGN)}")
        if self.hline not in HLINE_STYLES:
            raise InputValidationError(f"hline must be one of {', '.join(HLINE_STYLES)}")
        if isinstance(self.columns, (int, str)):
            self.columns = [self.columns]

    def positions(self, names: Sequence[str], aliases: Optional[Mapping[str, str]] = None) -> List[int]:
        return resolve_columns(self.columns, names, aliases, what="collapse")
