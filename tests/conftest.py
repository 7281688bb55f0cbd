from __future__ import annotations

import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


SAMPLE_SOURCE = "void f(); char *p;  int32 n;\n"


@dataclass(slots=True)
class SampleProject:
    """Fixture payload: a source file plus a place to put diagnostics."""

    root: Path
    source_path: Path

    def write_diagnostics(self, body: str, name: str = "diagnostics.yaml") -> Path:
        """Write a dedented diagnostics document next to the source file."""
        path = self.root / name
        path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")
        return path


@pytest.fixture()
def sample_source() -> str:
    return SAMPLE_SOURCE


@pytest.fixture()
def sample_project(tmp_path: Path) -> SampleProject:
    """Create a tiny C source file for CLI and output tests."""

    root = tmp_path / "project"
    root.mkdir()
    source_path = root / "foo.c"
    source_path.write_text(SAMPLE_SOURCE, encoding="utf-8")
    return SampleProject(root=root, source_path=source_path)
