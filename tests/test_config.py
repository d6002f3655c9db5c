import logging

from portal.config import Settings, setup_logging


def test_defaults() -> None:
    s = Settings(_env_file=None)
    assert s.facebook_graph_url == "https://graph.facebook.com"
    assert s.facebook_timeout_seconds == 10.0
    assert s.port == 3001


def test_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("FACEBOOK_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("FRONTEND_URLS", '["https://portal.example.com"]')
    s = Settings(_env_file=None)
    assert s.facebook_timeout_seconds == 2.5
    assert s.frontend_urls == ["https://portal.example.com"]


def test_httpx_request_lines_are_suppressed() -> None:
    setup_logging()
    assert logging.getLogger("httpx").level == logging.WARNING
