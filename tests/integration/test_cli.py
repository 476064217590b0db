"""
Tests for the rack-tracker command line.

Commands run through main() against a JSON store in a temporary
directory selected with RACK_TRACKER_STORE / RACK_TRACKER_DATA_DIR.
"""

import json
import logging
from unittest.mock import patch

import pytest

from rack_tracker.main import main

ADD_BOLTS = [
    "add", "--actor", "pasu", "--name", "Hex bolt", "--make", "Bossard",
    "--model", "ISO 4017", "--specification", "M6x20", "--rack", "A",
    "--bin", "3", "--quantity", "40",
]


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("RACK_TRACKER_STORE", "json")
    monkeypatch.setenv("RACK_TRACKER_DATA_DIR", str(tmp_path))
    return tmp_path


def run_json(capsys, argv):
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


class TestCli:
    """Command line round trips."""

    def test_no_command_prints_help(self, data_dir, capsys):
        assert main([]) == 1
        assert "usage: rack-tracker" in capsys.readouterr().out

    def test_init_creates_collections(self, data_dir, capsys):
        assert main(["init"]) == 0
        assert (data_dir / "inventory.json").exists()
        assert (data_dir / "transactions.json").exists()

    def test_add_and_list(self, data_dir, capsys):
        created = run_json(capsys, ADD_BOLTS)
        assert created["id"] == 1
        assert created["updatedBy"] == "pasu"

        listed = run_json(capsys, ["list"])
        assert [(i["name"], i["status"]) for i in listed] == [("Hex bolt", "In Stock")]

    def test_take_and_restock(self, data_dir, capsys):
        run_json(capsys, ADD_BOLTS)
        assert run_json(capsys, ["take", "1", "38", "--actor", "kim"])["quantity"] == 2
        assert run_json(capsys, ["restock", "1", "3", "--actor", "kim"])["quantity"] == 5
        assert run_json(capsys, ["search", "bossard"])[0]["status"] == "Low Stock"

    def test_take_too_many_fails(self, data_dir, capsys):
        run_json(capsys, ADD_BOLTS)
        assert main(["take", "1", "41", "--actor", "kim"]) == 1
        assert "ERROR (validation)" in capsys.readouterr().err

    def test_non_positive_amount_rejected(self, data_dir, capsys):
        assert main(["take", "1", "0", "--actor", "kim"]) == 1
        assert "greater than zero" in capsys.readouterr().err

    def test_update_and_history(self, data_dir, capsys):
        run_json(capsys, ADD_BOLTS)
        run_json(capsys, ["update", "1", "--actor", "lee", "--rack", "B", "--quantity", "30"])

        history = run_json(capsys, ["history", "--item", "1"])
        assert [(t["type"], t["quantity"]) for t in history] == [("taken", 10), ("added", 40)]

        assert len(run_json(capsys, ["history", "--limit", "1"])) == 1

    def test_delete_missing_item(self, data_dir, capsys):
        assert main(["delete", "9", "--actor", "kim"]) == 1
        assert "ERROR (not_found): Item with ID 9 not found" in capsys.readouterr().err

    def test_delete(self, data_dir, capsys):
        run_json(capsys, ADD_BOLTS)
        assert run_json(capsys, ["delete", "1", "--actor", "kim"])["id"] == 1
        assert run_json(capsys, ["list"]) == []

    def test_reconcile_clean(self, data_dir, capsys):
        run_json(capsys, ADD_BOLTS)
        assert run_json(capsys, ["reconcile"]) == []

    def test_summary(self, data_dir, capsys):
        run_json(capsys, ADD_BOLTS)
        summary = run_json(capsys, ["summary"])
        assert summary["totalItems"] == 1
        assert summary["itemsAdded"] == 40

    def test_summary_needs_year_and_month(self, data_dir, capsys):
        assert main(["summary", "--year", "2025"]) == 1
        assert "year and month must be given together" in capsys.readouterr().err

    def test_corrupt_store_reports_storage_error(self, data_dir, capsys):
        (data_dir / "inventory.json").write_text("[{", encoding="utf-8")
        assert main(["list"]) == 1
        assert "ERROR (storage)" in capsys.readouterr().err

    def test_unknown_backend_reported(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv("RACK_TRACKER_STORE", "redis")
        assert main(["list"]) == 1
        assert "Unknown store backend" in capsys.readouterr().err

    def test_development_environment_logs_at_debug(self, data_dir, monkeypatch, capsys):
        monkeypatch.setenv("RACK_TRACKER_ENV", "development")
        with patch("rack_tracker.main.configure_logging") as configure:
            run_json(capsys, ["list"])
        configure.assert_called_once_with(logging.DEBUG)
