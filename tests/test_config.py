"""Settings validation tests."""

from typing import get_args

import pytest
from pydantic import ValidationError

from src.audit.presets import CRAWL_PRESETS
from src.config import Settings


def test_unknown_crawl_preset_rejected():
    with pytest.raises(ValidationError):
        Settings(api_key="test", crawl_preset="huge")  # type: ignore[arg-type]


def test_unknown_crawl_preset_from_env_rejected(monkeypatch):
    monkeypatch.setenv("API_KEY", "test")
    monkeypatch.setenv("CRAWL_PRESET", "Standrad")
    with pytest.raises(ValidationError):
        Settings()  # type: ignore[call-arg]


def test_crawl_preset_choices_match_presets():
    allowed = get_args(Settings.model_fields["crawl_preset"].annotation)
    assert set(allowed) == set(CRAWL_PRESETS)


def test_crawl_preset_default():
    assert Settings(api_key="test", crawl_preset="deep").crawl_preset == "deep"
    assert Settings.model_fields["crawl_preset"].default == "standard"
