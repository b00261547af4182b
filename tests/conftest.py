"""Shared fixtures: a small FormID database and a sample Buffout 4 crash log."""
import sys
from pathlib import Path

import pytest

# Project root, for classic_scanner and classic_cli without an install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sample_data import SAMPLE_CRASH_LOG, create_formid_database


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point the application data directory at an empty temp folder."""
    data_dir = tmp_path / "classic-data"
    monkeypatch.setenv("CLASSIC_DATA_PATH", str(data_dir))
    monkeypatch.delenv("CLASSIC_GAME", raising=False)
    monkeypatch.delenv("CLASSIC_VERBOSE", raising=False)
    return data_dir


@pytest.fixture
def formid_db_path(tmp_path):
    return create_formid_database(tmp_path / "test-formids.db")


@pytest.fixture
def crash_log_path(tmp_path):
    log_file = tmp_path / "crash-2024-01-01-12-00-00.log"
    log_file.write_text(SAMPLE_CRASH_LOG, encoding='utf-8')
    return log_file
