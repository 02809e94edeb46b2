# tests/test_cli.py
import functools
import json

import pytest
from click.testing import CliRunner

from hoptrace import cli
from hoptrace.exceptions import SendError
from hoptrace.probe import Tracer
from tests.fakes import FakeNetwork, TARGET, expired, unreachable


@pytest.fixture
def network(monkeypatch):
    network = FakeNetwork(script={1: expired(1), 2: unreachable()})
    monkeypatch.setattr(cli, 'Tracer', functools.partial(
        Tracer,
        transmitter_factory=network.transmitter,
        listener_factory=network.listener
    ))
    return network


def test_prints_hops_and_summary(network):
    result = CliRunner().invoke(cli.main, [TARGET, '--no-dns', '-w', '0.5'])

    assert result.exit_code == 0, result.output
    assert '10.0.0.1' in result.output
    assert TARGET in result.output
    assert 'Destination Reached' in result.output
    assert network.sent == [1, 2]


def test_json_export(network, tmp_path):
    path = tmp_path / 'trace.json'

    result = CliRunner().invoke(cli.main, [TARGET, '--no-dns', '--json', str(path)])

    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text(encoding='utf-8'))
    assert data['target'] == TARGET
    assert data['port'] == 33434
    assert data['stop_reason'] == 'unreachable'
    assert data['reached_destination'] is True
    assert [hop['ttl'] for hop in data['hops']] == [1, 2]
    assert data['hops'][0]['reachable'] is True
    assert data['hops'][0]['host'] == ''
    assert data['hops'][0]['address'] == '10.0.0.1'


def test_first_ttl_above_max_is_usage_error(network):
    result = CliRunner().invoke(cli.main, [TARGET, '-f', '5', '-m', '3'])

    assert result.exit_code == 2
    assert network.sent == []


def test_hard_error_exits_nonzero(network):
    network.send_errors[1] = SendError("Cannot send probe with TTL 1")

    result = CliRunner().invoke(cli.main, [TARGET, '--no-dns', '-w', '0.1'])

    assert result.exit_code == 1
    assert 'Cannot send probe' in result.output
