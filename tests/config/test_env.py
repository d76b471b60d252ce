from __future__ import annotations

import os

import pytest

from apigw_timeout.config import (
    ConfigurationError,
    optional_env_int,
    parse_int,
)


def test_optional_env_int_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APIGW_TIMEOUT_MILLIS", "   ")

    assert optional_env_int("APIGW_TIMEOUT_MILLIS") is None


def test_optional_env_int_parses_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APIGW_TIMEOUT_MILLIS", " 45000 ")

    assert optional_env_int("APIGW_TIMEOUT_MILLIS") == 45_000
    assert os.getenv("APIGW_TIMEOUT_MILLIS") == " 45000 "


def test_optional_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APIGW_TIMEOUT_MILLIS", "thirty seconds")

    with pytest.raises(ConfigurationError, match="APIGW_TIMEOUT_MILLIS"):
        optional_env_int("APIGW_TIMEOUT_MILLIS")


@pytest.mark.parametrize("value", [True, 1.5, "1.5", None, [1]])
def test_parse_int_rejects_non_integers(value: object) -> None:
    with pytest.raises(ConfigurationError):
        parse_int(value, name="example")


def test_parse_int_accepts_integral_float() -> None:
    assert parse_int(30.0, name="example") == 30
