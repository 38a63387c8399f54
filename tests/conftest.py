import sys
import pathlib

import pytest

# Ensure project root is importable in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _fresh_server_singletons(monkeypatch):
    """Rebuild the process registry/dispatcher per test so env config applies."""
    import server
    monkeypatch.setattr(server, "_registry_singleton", None)
    monkeypatch.setattr(server, "_dispatcher_singleton", None)
    monkeypatch.delenv("TEXT_ONLY_CONTENT", raising=False)
    monkeypatch.delenv("TOOL_TIMEOUT_SECONDS", raising=False)
