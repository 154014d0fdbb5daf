"""Shared fixtures for reqprep tests."""

import os

import pytest
from click.testing import CliRunner

from reqprep import core
from reqprep.scope import GLOBAL_VARIABLES


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_project(tmp_path):
    """Create a temporary project directory and cd into it."""
    original = os.getcwd()
    os.chdir(tmp_path)
    yield tmp_path
    os.chdir(original)


@pytest.fixture
def global_reqprep_dir(tmp_path, monkeypatch):
    """Override the global ~/.reqprep directory to a temp location."""
    fake_global = tmp_path / "fake_home" / ".reqprep"
    fake_global.mkdir(parents=True)
    monkeypatch.setattr(core, "GLOBAL_DIR", fake_global)
    monkeypatch.setattr(core, "GLOBAL_CONFIG", fake_global / "config.yaml")
    return fake_global


@pytest.fixture(autouse=True)
def isolate_globals():
    """Keep the process-wide global variables from leaking between tests."""
    GLOBAL_VARIABLES.clear()
    yield
    GLOBAL_VARIABLES.clear()
