from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional

TAIL_LINES = 20

_LINE_MARKER = re.compile(r"^l\.\d+")


def parse_latex_log(text: str, tail: int = TAIL_LINES) -> str:
    """Extract the most useful failure detail from a TeX log.

    Returns the first ``! ...`` error block (the error line through the
    ``l.<n>`` context line), or the last ``tail`` lines when the log holds no
    recognizable error.
    """
    lines = text.splitlines()
    start: Optional[int] = None
    for i, line in enumerate(lines):
        if line.startswith("!"):
            start = i
            break
    if start is None:
        return "\n".join(lines[-tail:]).strip()
    block: List[str] = []
    for line in lines[start:]:
        block.append(line)
        if _LINE_MARKER.match(line):
            break
        if len(block) >= tail:
            break
    return "\n".join(block).strip()


def read_log(path: Path) -> str:
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8", errors="replace")
