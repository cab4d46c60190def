"""Tests for the truckq command line."""
import json

import pytest
from click.testing import CliRunner

from truckq.cli.main import cli
from truckq.offline.store import QueueStore


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def queue_path(tmp_path):
    return str(tmp_path / "offline_queue.jsonl")


class TestClassifyCommand:
    """truckq classify."""

    def test_offline_queueable(self, runner):
        result = runner.invoke(cli, ["classify", "orders/createOrder", "--offline"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["route"] == "queue"
        assert data["queued"] is True
        assert data["priority"] == "high"

    def test_online_forwarded(self, runner):
        result = runner.invoke(cli, ["classify", "user/updateUser", "--online"])

        data = json.loads(result.output)
        assert data["route"] == "online"
        assert data["queued"] is False
        assert data["priority"] == "medium"


class TestQueueCommands:
    """truckq queue ..."""

    def test_add_then_show(self, runner, queue_path):
        added = runner.invoke(cli, ["queue", "--path", queue_path, "add", "cart/submitOrder",
                                    "--payload", '{"cartId": "c1"}'])
        runner.invoke(cli, ["queue", "--path", queue_path, "add", "orders/createOrder",
                            "--payload", '{"orderId": "o1"}', "--user-id", "u1"])

        assert added.exit_code == 0
        assert "Queued intent_1_" in added.output

        shown = runner.invoke(cli, ["queue", "--path", queue_path, "show"])
        assert shown.exit_code == 0
        assert "Showing 2 of 2 pending intents" in shown.output
        assert shown.output.index("orders/createOrder") < shown.output.index("cart/submitOrder")

        stored = QueueStore(queue_path).load().peek()
        assert stored.metadata == {"order_id": "o1", "user_id": "u1"}

    def test_add_non_queueable_fails(self, runner, queue_path):
        result = runner.invoke(cli, ["queue", "--path", queue_path, "add", "menu/fetchMenu"])

        assert result.exit_code == 1
        assert "not queued offline" in result.output

    def test_add_bad_payload_fails(self, runner, queue_path):
        result = runner.invoke(cli, ["queue", "--path", queue_path, "add",
                                     "orders/createOrder", "--payload", "{nope"])

        assert result.exit_code == 1
        assert "Invalid payload JSON" in result.output

    def test_status(self, runner, queue_path):
        runner.invoke(cli, ["queue", "--path", queue_path, "add", "user/updateUser"])

        result = runner.invoke(cli, ["queue", "--path", queue_path, "status"])

        assert result.exit_code == 0
        assert '"pending_count": 1' in result.output
        assert '"medium": 1' in result.output

    def test_show_empty(self, runner, queue_path):
        result = runner.invoke(cli, ["queue", "--path", queue_path, "show"])
        assert "Queue is empty" in result.output

    def test_clear(self, runner, queue_path):
        runner.invoke(cli, ["queue", "--path", queue_path, "add", "user/updateUser"])

        result = runner.invoke(cli, ["queue", "--path", queue_path, "clear", "--yes"])

        assert "Queue cleared" in result.output
        assert len(QueueStore(queue_path).load()) == 0

    def test_clear_empty(self, runner, queue_path):
        result = runner.invoke(cli, ["queue", "--path", queue_path, "clear", "--yes"])
        assert "Queue already empty" in result.output


class TestConnectedCommand:
    """truckq connected."""

    def test_unreachable_host(self, runner, monkeypatch):
        import truckq.cli.classify_cmd as classify_cmd
        monkeypatch.setattr(classify_cmd, "probe", lambda host, port, timeout: False)

        result = runner.invoke(cli, ["connected", "--port", "1"])

        data = json.loads(result.output)
        assert data["connected"] is False
        assert data["status"] == "offline"
