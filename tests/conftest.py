import os
import sys
import pytest

# Ensure the app modules are importable without installing the project
CURRENT_DIR = os.path.dirname(__file__)
APP_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..', 'app'))
if APP_ROOT not in sys.path:
    sys.path.insert(0, APP_ROOT)

from fastapi.testclient import TestClient

import web
from store import MatchStore


@pytest.fixture()
def store():
    return MatchStore(["Volley", "Basket"])


@pytest.fixture()
def client(store, monkeypatch):
    monkeypatch.setattr(web, "store", store)
    return TestClient(web.app, raise_server_exceptions=False)
