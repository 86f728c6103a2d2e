"""Functional test bootstrap.

Each test runs from an empty working directory with no INTERROGATIVE_*
environment overrides, so configuration files and variables from the
developer's shell never leak into assertions. The cached configuration is
dropped before and after every test.
"""

from __future__ import annotations

import os

import pytest

from interrogative.config import reset_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("INTERROGATIVE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield tmp_path
    reset_config()
