import pytest
import requests

from app.scrape import DEFAULT_FETCH_TIMEOUT, FetchError, PageFetcher


class _FakeResponse:
    def __init__(self, text="<html></html>", status_code=200, content_type="text/html; charset=utf-8"):
        self.text = text
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type else {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc:
            raise self.exc
        return self.response


def test_fetch_returns_body_with_bounded_timeout():
    session = _FakeSession(_FakeResponse(text="<p>ok</p>"))
    fetcher = PageFetcher(session=session, timeout=12)

    assert fetcher.fetch("https://example.com") == "<p>ok</p>"
    url, kwargs = session.calls[0]
    assert url == "https://example.com"
    assert kwargs["timeout"] == 12
    assert kwargs["allow_redirects"] is True
    assert "User-Agent" in kwargs["headers"]


def test_fetch_wraps_network_errors():
    session = _FakeSession(exc=requests.ConnectionError("DNS failure"))
    fetcher = PageFetcher(session=session)

    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch("https://bad.example")
    assert "bad.example" in str(excinfo.value)


def test_fetch_rejects_error_status():
    fetcher = PageFetcher(session=_FakeSession(_FakeResponse(status_code=404)))

    with pytest.raises(FetchError):
        fetcher.fetch("https://example.com/missing")


def test_fetch_rejects_non_html_content():
    fetcher = PageFetcher(session=_FakeSession(_FakeResponse(content_type="application/pdf")))

    with pytest.raises(FetchError):
        fetcher.fetch("https://example.com/file.pdf")


def test_fetch_accepts_missing_content_type():
    fetcher = PageFetcher(session=_FakeSession(_FakeResponse(content_type=None)))

    assert fetcher.fetch("https://example.com") == "<html></html>"


def test_fetch_timeout_from_environment(monkeypatch):
    monkeypatch.setenv("SCRAPE_FETCH_TIMEOUT", "7.5")
    assert PageFetcher(session=_FakeSession()).timeout == 7.5

    monkeypatch.setenv("SCRAPE_FETCH_TIMEOUT", "soon")
    assert PageFetcher(session=_FakeSession()).timeout == DEFAULT_FETCH_TIMEOUT
