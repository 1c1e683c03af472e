import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from reconciler.repository.memory import InMemoryContactStore  # noqa: E402
from reconciler.services.identify import IdentifyService  # noqa: E402


@pytest.fixture
def store():
    contact_store = InMemoryContactStore()
    contact_store.open()
    yield contact_store
    contact_store.close()


@pytest.fixture
def service(store):
    return IdentifyService(store, sleep=lambda _delay: None)
