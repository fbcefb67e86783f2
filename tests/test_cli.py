"""Tests for CLI module."""

import json

import pytest

from nexus_ledger.cli import (
    cmd_balances,
    cmd_post,
    cmd_tax_categories,
    cmd_version,
    create_container,
    main,
)
from nexus_ledger.repositories.sqlite import SQLiteLedgerStore

SALE = {
    "kind": "sale",
    "amount": "100000",
    "date": "2025-03-01",
    "description": "Consulting invoice",
    "payment_status": "unpaid",
    "party_name": "Acme",
    "due_date": "2025-03-31",
    "idempotency_key": "cli-sale-1",
}

PURCHASE = {
    "kind": "purchase",
    "amount": "40000",
    "date": "2025-03-02",
    "description": "Office chairs",
    "payment_status": "unpaid",
    "party_name": "Supplier X",
    "due_date": "2025-04-02",
    "idempotency_key": "cli-purchase-1",
}


@pytest.fixture
def request_file(tmp_path):
    def _write(data, name="request.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write


class TestCreateContainer:
    def test_creates_sqlite_store(self, tmp_path):
        db_path = tmp_path / "nested" / "ledger.db"

        with create_container(db_path) as container:
            assert isinstance(container.store, SQLiteLedgerStore)

        assert db_path.exists()


class TestCmdPost:
    def test_posts_single_request(self, tmp_path, request_file, capsys):
        path = request_file(SALE)

        result = main(["--database", str(tmp_path / "ledger.db"), "post", str(path)])

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert output["success"] is True
        assert output["idempotency_key"] == "cli-sale-1"
        assert len(output["entries"]) == 2

    def test_invalid_request_exits_with_error(self, tmp_path, request_file, capsys):
        path = request_file({**SALE, "due_date": None})

        result = main(["--database", str(tmp_path / "ledger.db"), "post", str(path)])

        assert result == 1
        output = json.loads(capsys.readouterr().out)
        assert output["errors"][0]["field"] == "due_date"

    def test_missing_file(self, tmp_path, capsys):
        class Args:
            database = str(tmp_path / "ledger.db")
            file = str(tmp_path / "missing.json")

        assert cmd_post(Args()) == 1
        assert "File not found" in capsys.readouterr().out

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        class Args:
            database = str(tmp_path / "ledger.db")
            file = str(path)

        assert cmd_post(Args()) == 1
        assert "Invalid JSON" in capsys.readouterr().out


class TestQueries:
    def test_balances_without_database(self, tmp_path, capsys):
        class Args:
            database = str(tmp_path / "missing.db")

        assert cmd_balances(Args()) == 1
        assert "Database not found" in capsys.readouterr().out

    def test_balances_and_open_items(self, tmp_path, request_file, capsys):
        db = str(tmp_path / "ledger.db")
        path = request_file([SALE, PURCHASE])

        assert main(["--database", db, "post", str(path)]) == 0
        capsys.readouterr()

        assert main(["--database", db, "balances"]) == 0
        balances = capsys.readouterr().out
        assert "Accounts Receivable" in balances
        assert "Total" in balances
        assert "140,000.00" in balances

        assert main(["--database", db, "receivables"]) == 0
        assert "Acme" in capsys.readouterr().out

        assert main(["--database", db, "payables"]) == 0
        payables = capsys.readouterr().out
        assert "Supplier X" in payables
        assert "40,000.00" in payables

    def test_history(self, tmp_path, request_file, capsys):
        db = str(tmp_path / "ledger.db")
        assert main(["--database", db, "post", str(request_file([SALE, PURCHASE]))]) == 0
        capsys.readouterr()

        assert main(["--database", db, "history"]) == 0
        output = capsys.readouterr().out
        rows = [line.split()[:2] for line in output.splitlines() if line.startswith("2025-")]
        assert rows == [["2025-03-02", "purchase"], ["2025-03-01", "sale"]]
        assert "Total: 2 transactions" in output

        assert main(["--database", db, "history", "--kind", "sale", "--min", "50000"]) == 0
        output = capsys.readouterr().out
        assert "Consulting invoice" in output
        assert "Office chairs" not in output

        assert main(["--database", db, "history", "--from", "2025-04-01"]) == 0
        assert "No transactions found" in capsys.readouterr().out

    def test_history_summary(self, tmp_path, request_file, capsys):
        db = str(tmp_path / "ledger.db")
        main(["--database", db, "post", str(request_file([SALE, PURCHASE]))])
        capsys.readouterr()

        assert main(["--database", db, "history", "--summary"]) == 0
        output = capsys.readouterr().out
        assert "140,000.00" in output
        assert "purchase" in output
        assert "bank" in output

    def test_reposting_same_file_replays(self, tmp_path, request_file, capsys):
        db = str(tmp_path / "ledger.db")
        path = request_file(SALE)

        main(["--database", db, "post", str(path)])
        capsys.readouterr()
        assert main(["--database", db, "post", str(path)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["replayed"] is True


class TestInfoCommands:
    def test_tax_categories(self, capsys):
        class Args:
            localized = True

        assert cmd_tax_categories(Args()) == 0
        output = capsys.readouterr().out
        assert "transport_services" in output
        assert "Ubwikorezi bwose" in output
        assert "Total: 25 categories" in output

    def test_version(self, capsys):
        assert cmd_version(None) == 0
        assert "Nexus Ledger v0.1.0" in capsys.readouterr().out

    def test_main_without_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out
