"""Common test fixtures for Sapphire Notes."""

import logging
import tempfile
from pathlib import Path

import pytest

from sapphire_notes.config import config
from sapphire_notes.observability import ROOT_LOGGER_NAME, metrics
from sapphire_notes.services.notes_service import NotesService
from sapphire_notes.services.preferences_service import Preferences
from sapphire_notes.storage.metadata_store import MetadataStore


@pytest.fixture
def temp_dirs():
    """Create temporary directories for notes and application data."""
    with tempfile.TemporaryDirectory() as notes_dir:
        with tempfile.TemporaryDirectory() as data_dir:
            yield Path(notes_dir), Path(data_dir)


@pytest.fixture
def test_config(temp_dirs, monkeypatch):
    """Configure with test paths (auto-restored even on crash)."""
    notes_dir, data_dir = temp_dirs
    monkeypatch.delenv("SAPPHIRE_NOTES_DIR", raising=False)
    monkeypatch.setattr(config, "data_dir", data_dir)
    monkeypatch.setattr(config, "notes_dir", notes_dir)
    monkeypatch.setattr(config, "default_font_family", "Arial")
    monkeypatch.setattr(config, "default_font_size", 15)
    monkeypatch.setattr(config, "log_level", "INFO")
    yield config


@pytest.fixture
def metadata_store(test_config):
    """Create a metadata store in the temporary data directory."""
    return MetadataStore(test_config.get_metadata_path())


@pytest.fixture
def preferences(test_config):
    return Preferences(notes_directory=str(test_config.notes_dir))


@pytest.fixture
def notes_service(metadata_store, preferences):
    """Create a NotesService with a loaded, empty metadata store."""
    metadata_store.load_or_create()
    yield NotesService(metadata_store, preferences)


@pytest.fixture
def notes_dir(test_config) -> Path:
    return test_config.notes_dir


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def _restore_log_handlers():
    """Detach and close handlers that a test added to the package logger."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    before = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in list(root_logger.handlers):
        if handler not in before:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)

