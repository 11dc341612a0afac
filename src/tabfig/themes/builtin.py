from __future__ import annotations

from types import MappingProxyType

from .theme import Theme


# Journal-flavoured presets. `minimal` doubles as the fallback when neither a
# call-time theme nor a current theme is set.
MINIMAL = Theme(name="minimal", shading_color="blue!10", header_bold=True, font_size=None, striped=True)

APA = Theme(name="apa", shading_color="white", header_bold=False, font_size="normalsize", striped=False)

NATURE = Theme(name="nature", shading_color="gray!10", header_bold=True, font_size="small", striped=True)

NEJM = Theme(
    name="nejm",
    shading_color="yellow!10",
    header_bold=True,
    font_size="footnotesize",
    striped=True,
    extras={"packages": ["\\usepackage{helvet}", "\\renewcommand{\\familydefault}{\\sfdefault}"]},
)

BUILTIN_THEMES = MappingProxyType({t.name: t for t in (MINIMAL, APA, NATURE, NEJM)})
