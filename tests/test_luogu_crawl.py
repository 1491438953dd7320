"""
Tests for luogu_crawl.py - fetching prizes over HTTP.
"""

import pytest
import requests

from finder import ConfigError
from finder.luogu_crawl import BASE_HEADER, format_prizes, get_prize_list


class FakeResponse:

    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:

    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, headers, timeout))
        return self.response


def test_get_prize_list():
    session = FakeSession(FakeResponse({'prizes': [
        {'prize': {'year': 2023, 'contest': 'CSP-S 提高级', 'prize': '一等奖'}},
        {'prize': None},
    ]}))
    prizes = get_prize_list(10703, session=session)
    assert prizes == [{'year': 2023, 'contest': 'CSP-S 提高级', 'prize': '一等奖'}]
    url, headers, timeout = session.calls[0]
    assert url.endswith('/10703')
    assert headers == BASE_HEADER
    assert timeout


def test_http_error():
    with pytest.raises(ConfigError):
        get_prize_list(1, session=FakeSession(FakeResponse({}, status_code=404)))


def test_invalid_json():
    with pytest.raises(ConfigError):
        get_prize_list(1, session=FakeSession(FakeResponse(ValueError('bad json'))))


def test_uses_requests_by_default(monkeypatch):
    session = FakeSession(FakeResponse({'prizes': []}))
    monkeypatch.setattr(requests, 'get', session.get)
    assert get_prize_list(5) == []
    assert len(session.calls) == 1


def test_format_prizes():
    text = format_prizes([
        {'year': 2023, 'contest': 'NOI', 'prize': '金牌'},
        {'year': 2022, 'contest': 'APIO'},
    ])
    assert text == "[2023] NOI\n金牌"
