from pathlib import Path

import pytest

FIXTURES = Path(__file__).resolve().parent / "fixtures"


def flatten_molfile(text: str) -> str:
    """Same record with a 2D program line and every Z column zeroed."""
    lines = text.split("\n")
    lines[1] = "     RDKit          2D"
    out = []
    for i, line in enumerate(lines):
        if 4 <= i < 4 + 30 and len(line) >= 30 and line[30:].strip()[:1].isalpha():
            line = line[:20] + "    0.0000" + line[30:]
        out.append(line)
    return "\n".join(out)


@pytest.fixture
def caffeine_sdf() -> str:
    return (FIXTURES / "caffeine.sdf").read_text(encoding="utf-8")


@pytest.fixture
def ethanol_sdf() -> str:
    return (FIXTURES / "ethanol.sdf").read_text(encoding="utf-8")


@pytest.fixture
def flat_ethanol_sdf(ethanol_sdf: str) -> str:
    return flatten_molfile(ethanol_sdf)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep a developer's MOLENS_* environment out of the tests."""
    for name in (
        "MOLENS_PATTERN_LIBRARY",
        "MOLENS_PRIORITY_TABLE",
        "MOLENS_MAX_INVALID_BOND_FRACTION",
        "MOLENS_CACHE_TTL_SECONDS",
        "MOLENS_CACHE_MAX_ENTRIES",
    ):
        monkeypatch.delenv(name, raising=False)
