import logging

import pytest

from gotid_cloud.core import config, security
from gotid_cloud.core.pagination import clamp_limit, get_max_limit
from gotid_cloud.core.errors import log_exception


def test_clamp_limit(monkeypatch):
    monkeypatch.delenv("API_MAX_PAGE_SIZE", raising=False)
    assert clamp_limit(None) == 10
    assert clamp_limit("abc") == 10
    assert clamp_limit("0") == 10
    assert clamp_limit(-5) == 10
    assert clamp_limit("25") == 25
    assert clamp_limit(1000) == 100
    monkeypatch.setenv("API_MAX_PAGE_SIZE", "20")
    assert get_max_limit() == 20
    assert clamp_limit(50) == 20


def test_token_round_trip_and_tamper_detection():
    token = security.create_access_token(officer_id="PC-1", role="officer")
    claims = security.decode_access_token(token)
    assert claims["officer_id"] == "PC-1"
    assert claims["scanner_id"] is None
    assert claims["exp"] > claims["iat"]

    header, payload, signature = token.split(".")
    with pytest.raises(ValueError):
        security.decode_access_token(f"{header}.{payload}x.{signature}")
    with pytest.raises(ValueError):
        security.decode_access_token("only.two")


def test_expired_token_is_rejected(monkeypatch):
    monkeypatch.setattr(config.settings, "jwt_exp_minutes", 1)
    token = security.create_access_token(scanner_id="SCN-1", role="scanner")
    real_now = security.datetime.now(security.timezone.utc)

    class _Later:
        @staticmethod
        def now(tz=None):
            return real_now + security.timedelta(minutes=5)

    monkeypatch.setattr(security, "datetime", _Later)
    with pytest.raises(ValueError):
        security.decode_access_token(token)


def test_minting_needs_a_secret(monkeypatch):
    monkeypatch.setattr(config.settings, "jwt_secret", "")
    with pytest.raises(RuntimeError):
        security.create_access_token(scanner_id="SCN-1", role="scanner")


def test_prod_rejects_weak_settings(monkeypatch):
    monkeypatch.setenv("GOTID_ENV", "prod")
    weak = config.settings.model_copy(update={"api_token": "demo-token", "dev_allow_no_token": False})
    with pytest.raises(RuntimeError):
        config.validate_runtime_settings(weak)

    bypass = config.settings.model_copy(update={"dev_allow_no_token": True})
    with pytest.raises(RuntimeError):
        config.validate_runtime_settings(bypass)

    strong = config.settings.model_copy(
        update={
            "api_token": "a-very-long-and-random-api-token-1",
            "jwt_secret": "a-very-long-and-random-jwt-secret-1",
            "dev_allow_no_token": False,
            "auto_create_db": False,
        }
    )
    config.validate_runtime_settings(strong)


def test_unknown_env_falls_back_to_dev(monkeypatch, caplog):
    monkeypatch.setenv("GOTID_ENV", "staging")
    caplog.set_level(logging.WARNING, logger="config")
    assert config.get_app_env() == "dev"
    assert any("Unknown GOTID_ENV" in rec.getMessage() for rec in caplog.records)


def test_log_exception_includes_context(caplog):
    logger = logging.getLogger("test_core")
    caplog.set_level(logging.ERROR)
    log_exception(logger, "Scan insert failed", extra={"plate": "BT55WMO", "skip": None}, exc=RuntimeError("boom"))
    messages = [rec.getMessage() for rec in caplog.records]
    assert "Scan insert failed plate=BT55WMO: boom" in messages
