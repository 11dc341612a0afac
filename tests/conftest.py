import os
import stat
import sys
from pathlib import Path

import pandas as pd
import pytest

from tabfig.themes import default_registry


COMPILER_OK = """
import sys
from pathlib import Path

tex = Path(sys.argv[-1])
Path(tex.stem + ".log").write_text("This is a stand-in compiler\\nOutput written.\\n")
Path(tex.stem + ".pdf").write_bytes(b"%PDF-1.4\\n% full page\\n" + tex.read_bytes())
"""

COMPILER_FAIL = """
import sys
from pathlib import Path

tex = Path(sys.argv[-1])
Path(tex.stem + ".log").write_text(
    "This is a stand-in compiler\\n"
    "(./table.tex\\n"
    "! Undefined control sequence.\\n"
    "l.12 \\\\badmacro\\n"
    "                \\n"
    "No pages of output.\\n"
)
sys.exit(1)
"""

CROPPER_OK = """
import sys
from pathlib import Path

margin = sys.argv[sys.argv.index("--margins") + 1]
src, dst = Path(sys.argv[-2]), Path(sys.argv[-1])
dst.write_bytes(b"%PDF-1.4\\n% cropped margins=" + margin.encode() + b"\\n" + src.read_bytes()[:16])
"""

CROPPER_FAIL = """
import sys

sys.stderr.write("pdfcrop: bounding box could not be determined\\n")
sys.exit(2)
"""

CONVERTER_OK = """
import sys
from pathlib import Path

src = Path(sys.argv[-2])
Path(sys.argv[-1]).write_bytes(b"converted " + " ".join(sys.argv[1:-2]).encode() + b"\\n" + src.read_bytes()[:16])
"""

CONVERTER_FAIL = """
import sys

sys.stderr.write("convert: no images defined\\n")
sys.exit(1)
"""


def _write_tool(directory: Path, name: str, body: str) -> str:
    path = directory / name
    path.write_text(f"#!{sys.executable}\n{body}", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def tools_dir(tmp_path):
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture
def fake_compiler(tools_dir):
    return _write_tool(tools_dir, "fake-pdflatex", COMPILER_OK)


@pytest.fixture
def failing_compiler(tools_dir):
    return _write_tool(tools_dir, "failing-pdflatex", COMPILER_FAIL)


@pytest.fixture
def fake_cropper(tools_dir):
    return _write_tool(tools_dir, "fake-pdfcrop", CROPPER_OK)


@pytest.fixture
def failing_cropper(tools_dir):
    return _write_tool(tools_dir, "failing-pdfcrop", CROPPER_FAIL)


@pytest.fixture
def small_df():
    return pd.DataFrame({"name": ["alpha", "beta"], "value": [1.5, 2.25]})


@pytest.fixture(autouse=True)
def _isolate_state(tmp_path, monkeypatch):
    monkeypatch.setenv("TABFIG_CACHE_DIR", str(tmp_path / "cache"))
    for key in list(os.environ):
        if key.startswith("TABFIG_") and key != "TABFIG_CACHE_DIR":
            monkeypatch.delenv(key)
    yield
    registry = default_registry()
    registry.set_current(None)
    registry.clear()


@pytest.fixture
def fake_converter(tools_dir):
    return _write_tool(tools_dir, "fake-convert", CONVERTER_OK)


@pytest.fixture
def failing_converter(tools_dir):
    return _write_tool(tools_dir, "failing-convert", CONVERTER_FAIL)
