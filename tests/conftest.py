# tests/conftest.py

import pytest

import citenet.web.security as security


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    security._RATE_LIMIT_STATE.clear()
    yield
    security._RATE_LIMIT_STATE.clear()
