import json

import pandas as pd
import pytest
import requests

from replenishment import data_handler, settings
from replenishment.data_handler import SnapshotLoadError
from replenishment.engine import build_inventory_report
from replenishment.pipeline import InventoryHealthPipeline


@pytest.fixture
def input_files(tmp_path, snapshot_json):
    snapshot_path = tmp_path / "snapshot.json"
    snapshot_path.write_text(json.dumps(snapshot_json))
    settings_path = tmp_path / "lead_times.json"
    settings_path.write_text(
        json.dumps({"skuSettings": {"SKU-A": {"alertEnabled": True, "reorderPoint": 450}}})
    )
    return snapshot_path, settings_path


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    out = tmp_path / "output"
    monkeypatch.setattr(settings, "OUTPUT_DIR", out)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    monkeypatch.setattr(settings, "WEBHOOK_URL", None)
    return out


class _FakeResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


def test_pipeline_writes_csv_and_json(input_files, output_dir, now):
    snapshot_path, settings_path = input_files
    report = InventoryHealthPipeline(
        now=now, snapshot_path=snapshot_path, settings_path=settings_path, test_mode=True
    ).run()

    assert report is not None
    assert [i.sku for i in report.items] == ["SKU-A", "ABCShop"]
    assert report.summary.alert_count == 1

    csv_path = output_dir / "inventory_health_2026-03-15.csv"
    df = pd.read_csv(csv_path)
    assert list(df.columns) == list(settings.EXPORT_COLUMNS.values())
    assert df.loc[df["SKU"] == "SKU-A", "Total Units"].item() == 430
    assert df.loc[df["SKU"] == "SKU-A", "Status"].item() == "critical"

    payload = json.loads((output_dir / "inventory_health_2026-03-15.json").read_text())
    assert payload["daysElapsed"] == 7
    assert payload["summary"]["skuCount"] == 2
    assert payload["items"][0]["leadTime"]["leadTimeDays"] == 14


def test_missing_settings_file_uses_defaults(input_files, output_dir, now, tmp_path):
    snapshot_path, _ = input_files
    report = InventoryHealthPipeline(
        now=now,
        snapshot_path=snapshot_path,
        settings_path=tmp_path / "missing.json",
        test_mode=True,
    ).run()
    assert report is not None
    assert report.summary.alert_count == 0


def test_missing_snapshot_aborts(output_dir, now, tmp_path):
    result = InventoryHealthPipeline(
        now=now, snapshot_path=tmp_path / "nope.json", test_mode=True
    ).run()
    assert result is None
    assert not output_dir.exists()


def test_invalid_snapshot_aborts(output_dir, now, tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"items": [{"sku": "A", "amazonQty": "lots"}]}))
    assert InventoryHealthPipeline(now=now, snapshot_path=bad, test_mode=True).run() is None


def test_load_snapshot_rejects_broken_json(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(SnapshotLoadError):
        data_handler.load_snapshot(broken)


def test_items_to_frame_handles_empty_view():
    df = data_handler.items_to_frame([])
    assert df.empty
    assert list(df.columns) == list(settings.EXPORT_COLUMNS.values())


def test_webhook_skipped_without_url(input_files, output_dir, now, monkeypatch):
    def _fail(*args, **kwargs):
        raise AssertionError("webhook should not be called")

    monkeypatch.setattr(data_handler.requests, "post", _fail)
    snapshot_path, settings_path = input_files
    report = InventoryHealthPipeline(
        now=now, snapshot_path=snapshot_path, settings_path=settings_path
    ).run()
    assert report is not None


def test_webhook_receives_items_and_summary(input_files, output_dir, now, monkeypatch):
    calls = []

    def _post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        return _FakeResponse()

    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://example.test/hook")
    monkeypatch.setattr(data_handler.requests, "post", _post)

    snapshot_path, settings_path = input_files
    InventoryHealthPipeline(now=now, snapshot_path=snapshot_path, settings_path=settings_path).run()

    [(url, payload, timeout)] = calls
    assert url == "https://example.test/hook"
    assert timeout == 15
    assert len(payload["reportData"]) == 2
    assert payload["summary"]["critical"] >= 1


def test_webhook_errors_are_logged_not_raised(now, monkeypatch, make_item, make_snapshot, default_settings):
    monkeypatch.setattr(settings, "WEBHOOK_URL", "https://example.test/hook")
    monkeypatch.setattr(data_handler.requests, "post", lambda *a, **k: _FakeResponse(500))

    report = build_inventory_report(make_snapshot([make_item("A", total_qty=1)]), default_settings, now)
    assert data_handler.post_to_webhook(report) is False
