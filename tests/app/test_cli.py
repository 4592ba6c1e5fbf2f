from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from catalogsync.domain.export import ExportRunResult, TypeExportResult
from catalogsync.domain.model import AssetType, EntityKey
from catalogsync.ui import cli as cli_module

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def quiet_export_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXPORT_BATCH_SIZE", raising=False)
    monkeypatch.delenv("EXPORT_CONCURRENCY", raising=False)


def _failed_result() -> ExportRunResult:
    return ExportRunResult(
        types=[
            TypeExportResult(
                asset_type=AssetType.PROJECT,
                relations_skipped=True,
                message="project: identity phase stopped",
            )
        ],
        message="project: identity phase stopped",
    )


def test_export_uses_cli_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_export(**kwargs: object) -> ExportRunResult:
        captured.update(kwargs)
        return ExportRunResult()

    monkeypatch.setattr(cli_module, "export_pending", fake_export)

    cli_module.main(
        ["export", "--batch-size", "25", "--concurrency", "3", "--asset-type", "workbook"]
    )

    config = captured["config"]
    assert getattr(config, "batch_size") == 25
    assert getattr(config, "concurrency") == 3
    assert captured["asset_types"] == {AssetType.WORKBOOK}


def test_export_defaults_to_all_types(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_export(**kwargs: object) -> ExportRunResult:
        captured.update(kwargs)
        return ExportRunResult()

    monkeypatch.setattr(cli_module, "export_pending", fake_export)

    cli_module.main(["export"])

    assert captured["asset_types"] is None
    assert getattr(captured["config"], "batch_size") == 500


def test_failed_export_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "export_pending", lambda **_: _failed_result())

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["export"])

    assert excinfo.value.code == 1


def test_invalid_batch_size_is_rejected() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["export", "--batch-size", "0"])

    assert excinfo.value.code == 2


def test_sync_reconciles_then_exports(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps({"listings": []}), encoding="utf-8")
    calls: list[str] = []

    def fake_reconcile(**kwargs: object) -> list[object]:
        calls.append("reconcile")
        return []

    def fake_export(**kwargs: object) -> ExportRunResult:
        calls.append("export")
        return ExportRunResult()

    monkeypatch.setattr(cli_module, "reconcile_source", fake_reconcile)
    monkeypatch.setattr(cli_module, "export_pending", fake_export)

    cli_module.main(["sync", "--snapshot", str(snapshot)])

    assert calls == ["reconcile", "export"]


def test_missing_snapshot_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["reconcile", "--snapshot", str(tmp_path / "missing.json")])

    assert excinfo.value.code == 1


def test_cascade_builds_entity_key(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[EntityKey] = []

    def fake_cascade(key: EntityKey) -> list[EntityKey]:
        captured.append(key)
        return [key]

    monkeypatch.setattr(cli_module, "cascade_entity", fake_cascade)

    cli_module.main(["cascade", "--asset-type", "project", "--id", " p1 ", "--scope", "site-1"])

    assert captured == [EntityKey(AssetType.PROJECT, "p1", "site-1")]


def test_blank_entity_id_is_a_validation_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "revive_entity", lambda key: pytest.fail("must not run"))

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["revive", "--asset-type", "project", "--id", "  ", "--scope", "site-1"])

    assert excinfo.value.code == 2
