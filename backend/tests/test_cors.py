import importlib
import sys

import pytest


@pytest.fixture(autouse=True)
def main_import_isolation():
    original = sys.modules.pop("padel_tracker.main", None)
    try:
        yield
    finally:
        sys.modules.pop("padel_tracker.main", None)
        if original is not None:
            sys.modules["padel_tracker.main"] = original


def test_rejects_wildcard_origin(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "*")
    with pytest.raises(ValueError):
        importlib.import_module("padel_tracker.main")


def test_requires_allowed_origins(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
    with pytest.raises(ValueError):
        importlib.import_module("padel_tracker.main")


def test_rejects_blank_origin_list(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", " , ")
    with pytest.raises(ValueError):
        importlib.import_module("padel_tracker.main")


def test_allows_listed_origins(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://padel.example, http://localhost:3000")
    module = importlib.import_module("padel_tracker.main")
    assert module.ALLOWED_ORIGINS == ["https://padel.example", "http://localhost:3000"]
