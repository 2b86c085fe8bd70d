# ABOUTME: Verifies the player report CLI exposes its commands and runs end to end.
# ABOUTME: Drives profile and recommend through Typer's test runner with JSON fixtures in a temp dir.

import json

from rich.console import Console
from typer.testing import CliRunner

from scripts import player_report

runner = CliRunner()


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_has_catalog_profile_and_recommend_commands():
    app = player_report.app
    command_names = {cmd.name or cmd.callback.__name__ for cmd in app.registered_commands}
    assert {"catalog", "profile", "recommend"} <= command_names


def test_profile_then_recommend_with_pin(tmp_path, monkeypatch):
    monkeypatch.setattr(player_report, "console", Console(width=200))
    records = _write(
        tmp_path / "records.json",
        [
            {
                "player_id": "p1",
                "test_name": "5-10-5 Agility",
                "test_date": "2025-02-01",
                "scores": {"agility_1": 20, "agility_2": 20, "agility_3": 20},
            }
        ],
    )
    snapshot_path = tmp_path / "snapshot.json"
    result = runner.invoke(
        player_report.app,
        ["profile", "--records", str(records), "--output", str(snapshot_path)],
    )
    assert result.exit_code == 0, result.output
    snapshot = json.loads(snapshot_path.read_text())
    assert snapshot["player_id"] == "p1"
    assert snapshot["name"] == "Recompute stats"
    assert snapshot["data"]["skills"]["Agility"]["value"] == 0.0

    videos = _write(
        tmp_path / "videos.json",
        [
            {"id": "v1", "title": "Cone weaves", "video_url": "https://example.com/1", "category": "dribbling"},
            {"id": "v2", "title": "Ladder feet", "video_url": "https://example.com/2", "category": "speed_agility"},
            {"id": "v3", "title": "Hidden", "video_url": "https://example.com/3", "published": False},
        ],
    )
    pins = _write(tmp_path / "pins.json", [{"player_id": "p1", "video_id": "v1", "priority": 2, "note": "Before Saturday"}])
    ranked_path = tmp_path / "ranked.json"
    result = runner.invoke(
        player_report.app,
        [
            "recommend",
            "--videos",
            str(videos),
            "--profile",
            str(snapshot_path),
            "--pins",
            str(pins),
            "--output",
            str(ranked_path),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Cone weaves *" in result.output
    ranked = json.loads(ranked_path.read_text())
    assert [row["video_id"] for row in ranked] == ["v1", "v2"]
    assert ranked[0]["reason"] == "Before Saturday"
    assert ranked[0]["pinned"] is True
    assert ranked[1]["score"] == 1.0
    assert ranked[1]["reason"] == "Targets your weakest skill: Agility"


def test_recommend_rejects_missing_file(tmp_path):
    result = runner.invoke(player_report.app, ["recommend", "--videos", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_recommend_rejects_bad_weights(tmp_path):
    videos = _write(tmp_path / "videos.json", [{"id": "v1", "title": "Cone weaves", "video_url": "https://example.com/1"}])
    config = tmp_path / "engine.yaml"
    config.write_text("recommendations:\n  test_weight: 0.9\n  engagement_weight: 0.9\n")
    result = runner.invoke(player_report.app, ["recommend", "--videos", str(videos), "--config", str(config)])
    assert result.exit_code != 0
