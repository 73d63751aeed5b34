"""Shared fixtures and call helpers for testing."""

from __future__ import annotations

import os

import pytest

from sluice.core.config import SluiceConfig
from sluice.core.procedure import CallOptions, ProcedureType


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Prevent .env file and shell env from leaking into tests."""
    monkeypatch.setitem(SluiceConfig.model_config, "env_file", None)
    for key in list(os.environ):
        if key.startswith("SLUICE_"):
            monkeypatch.delenv(key, raising=False)


def make_call(
    raw_input=None,
    *,
    ctx=None,
    path: str = "post.byId",
    type: ProcedureType = ProcedureType.QUERY,
) -> CallOptions:
    return CallOptions(ctx=ctx, raw_input=raw_input, path=path, type=type)


@pytest.fixture
def call_opts():
    return make_call
