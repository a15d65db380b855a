"""Unit tests for the netfetch CLI."""

import json
from collections.abc import Iterator

import pytest
import structlog
from click.testing import CliRunner

import src.cli.netfetch as netfetch
from src.net.client import NetClient
from src.net.config import NetConfig
from src.net.metrics import NetMetrics
from tests.helpers.transport import Recorder, ScriptedTransport, json_response


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start each test with fresh metrics."""
    NetMetrics.reset()


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner."""
    return CliRunner()


def install_transport(
    monkeypatch: pytest.MonkeyPatch,
    transport: ScriptedTransport,
    seen: list[NetConfig] | None = None,
) -> None:
    """Route CLI requests through a scripted transport."""

    def factory(config: NetConfig) -> NetClient:
        if seen is not None:
            seen.append(config)
        return NetClient(config, notify=Recorder(), transport=transport)

    monkeypatch.setattr(netfetch, "make_client", factory)


class TestGetCommand:
    """Tests for the get command."""

    def test_prints_data(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that data is printed as JSON."""
        transport = ScriptedTransport(json_response({"data": [1, 2, 3]}))
        install_transport(monkeypatch, transport)

        result = runner.invoke(
            netfetch.cli, ["get", "https://api.example.com/items", "--console-logs"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == [1, 2, 3]
        assert transport.calls[0][1].method == "GET"

    def test_raw_envelope(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that --raw prints the envelope without the response object."""
        transport = ScriptedTransport(json_response({"data": 1, "count": 1}))
        install_transport(monkeypatch, transport)

        result = runner.invoke(
            netfetch.cli, ["get", "https://api.example.com/x", "--raw"]
        )

        assert result.exit_code == 0, result.output
        envelope = json.loads(result.output)
        assert envelope["data"] == 1
        assert envelope["count"] == 1
        assert "response" not in envelope

    def test_error_exits_non_zero(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a failed request exits with status 1."""
        transport = ScriptedTransport(json_response({}, status=500))
        install_transport(monkeypatch, transport)

        result = runner.invoke(netfetch.cli, ["get", "https://api.example.com/x"])

        assert result.exit_code == 1
        assert "Could Not Communicate With Server" in result.output

    def test_options_reach_config(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that --timeout and --prefix override settings."""
        seen: list[NetConfig] = []
        transport = ScriptedTransport(json_response({"data": "ok"}))
        install_transport(monkeypatch, transport, seen)

        result = runner.invoke(
            netfetch.cli,
            ["get", "items", "--timeout", "3", "--prefix", "https://p.example.com"],
        )

        assert result.exit_code == 0, result.output
        assert seen[0].timeout_seconds == 3.0
        assert transport.calls[0][0] == "https://p.example.com/items"


class TestPostCommand:
    """Tests for the post command."""

    def test_sends_json_body(
        self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that --body is parsed and sent."""
        transport = ScriptedTransport(json_response({"data": {"ok": True}}))
        install_transport(monkeypatch, transport)

        result = runner.invoke(
            netfetch.cli,
            ["post", "https://api.example.com/jobs", "--body", '{"n": 1}'],
        )

        assert result.exit_code == 0, result.output
        assert transport.calls[0][1].body == {"n": 1}
        assert transport.calls[0][1].method == "POST"

    def test_invalid_body(self, runner: CliRunner) -> None:
        """Test that a malformed --body exits with status 2."""
        result = runner.invoke(
            netfetch.cli, ["post", "https://api.example.com/jobs", "--body", "{"]
        )

        assert result.exit_code == 2
