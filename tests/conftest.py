from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterator, List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from monkey.utils import DEBUG_PY_TRACE_ENV, RECURSION_LIMIT_ENV


@pytest.fixture(autouse=True)
def _isolated_interpreter(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run each test without inherited debug toggles and restore the recursion limit main() raises."""
    monkeypatch.delenv(DEBUG_PY_TRACE_ENV, raising=False)
    monkeypatch.delenv(RECURSION_LIMIT_ENV, raising=False)

    limit = sys.getrecursionlimit()
    yield
    sys.setrecursionlimit(limit)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if pytest ever generates duplicate node IDs."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        nodeid = item.nodeid
        if nodeid in seen:
            duplicates.append(nodeid)
            continue
        seen[nodeid] = 1

    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
    raise pytest.UsageError(
        "Duplicate pytest nodeids detected during collection:\n" f"{lines}"
    )
