# tests/test_resolver.py
import socket
import threading

import pytest

from hoptrace.models import NO_RESPONSE
from hoptrace.resolver import PTRResolver


@pytest.fixture
def resolver():
    with PTRResolver(timeout=0.5) as r:
        yield r


def test_joins_names(monkeypatch, resolver):
    monkeypatch.setattr(
        socket, 'gethostbyaddr',
        lambda ip: ('gw.example', ['gw-alias.example', 'gw.example'], [ip])
    )

    assert resolver.lookup('10.0.0.1') == 'gw.example, gw-alias.example'


def test_lookup_failure_is_empty(monkeypatch, resolver):
    def fail(ip):
        raise socket.herror(1, 'Unknown host')
    monkeypatch.setattr(socket, 'gethostbyaddr', fail)

    assert resolver.lookup('10.0.0.1') == ''


def test_no_response_is_not_looked_up(monkeypatch, resolver):
    calls = []
    monkeypatch.setattr(socket, 'gethostbyaddr', lambda ip: calls.append(ip))

    assert resolver.lookup(NO_RESPONSE) == ''
    assert resolver.lookup('') == ''
    assert calls == []


def test_slow_lookup_is_cut_off(monkeypatch):
    release = threading.Event()

    def slow(ip):
        release.wait(5)
        return ('late.example', [], [ip])
    monkeypatch.setattr(socket, 'gethostbyaddr', slow)

    with PTRResolver(timeout=0.05) as resolver:
        assert resolver.lookup('10.0.0.1') == ''
        release.set()
