"""Shared helpers for the test-suite; makes ``src`` importable without installing."""

from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from jsrecover import syntax  # noqa: E402


def compact(code: str) -> str:
    """Whitespace-free, double-quoted form of ``code`` for stable comparisons."""
    return re.sub(r"\s+", "", code).replace("'", '"')


@pytest.fixture
def transform():
    """Parse ``code``, run one matcher over it and return (compact output, count)."""

    def run(matcher, code):
        tree = syntax.parse(code)
        count = matcher(tree)
        return compact(syntax.generate(tree)), count

    return run


@pytest.fixture
def parsed():
    return syntax.parse
