# ABOUTME: Provides a CLI that computes player profiles and ranked video recommendations from JSON exports.
# ABOUTME: Mirrors the portal's "recompute stats" and recommendations page so coaches can inspect results offline.

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.common.config import load_engine_config
from src.common.fixtures import (
    load_engagements,
    load_json,
    load_pins,
    load_records,
    load_snapshot,
    load_videos,
    ranked_to_frame,
    snapshot_to_dict,
)
from src.common.test_catalog import TEST_DEFINITIONS
from src.player_profile import compute_profile, new_snapshot
from src.video_rank import apply_pins, compute_recommendations

console = Console()
app = typer.Typer(help="Compute player profiles and video recommendations from exported portal data.")


def _require(path: Optional[Path], label: str) -> None:
    if path is not None and not path.exists():
        console.print(f"[red]Missing {label} at {path}[/red]")
        raise typer.Exit(code=1)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _trend_text(score) -> str:
    if score.trend is None:
        return "-"
    return f"{score.trend.delta:+.2f} ({score.trend.direction})"


@app.command()
def catalog() -> None:
    """List every skill test the engine understands."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Test")
    table.add_column("Skill")
    table.add_column("Layout")
    table.add_column("Fields")
    table.add_column("Categories")
    for definition in TEST_DEFINITIONS:
        table.add_row(
            definition.name,
            definition.skill,
            definition.layout,
            str(len(definition.fields)),
            ", ".join(definition.categories),
        )
    console.print(table)


@app.command()
def profile(
    records: Path = typer.Option(..., "--records", help="JSON list of test records for one player."),
    previous: Optional[Path] = typer.Option(None, "--previous", help="JSON of the player's latest stored snapshot."),
    population: Optional[Path] = typer.Option(None, "--population", help="JSON mapping metric key -> raw values of other players."),
    player_id: str = typer.Option("", "--player-id", help="Player identifier stamped on the new snapshot."),
    name: str = typer.Option("Recompute stats", "--name", help="Snapshot label."),
    config: Optional[Path] = typer.Option(None, "--config", help="Engine config YAML."),
    output: Optional[Path] = typer.Option(None, "--output", help="Write the new snapshot JSON here."),
    verbose: bool = typer.Option(False, "--verbose", help="Log unavailable metrics."),
) -> None:
    """
    Recompute a player's profile from every test on file.
    """
    _configure_logging(verbose)
    for path, label in ((records, "test records"), (previous, "previous snapshot"), (population, "population"), (config, "config")):
        _require(path, label)

    try:
        engine_config = load_engine_config(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    test_records = load_records(records)
    prior = load_snapshot(previous)
    pop = load_json(population) if population else None
    typer.echo(f"[profile] Computing from {len(test_records)} test record(s)")

    data = compute_profile(test_records, prior, datetime.now(timezone.utc), population=pop, settings=engine_config.profile)
    snapshot = new_snapshot(player_id or (test_records[0].player_id if test_records else ""), data, name=name)

    skills_table = Table(show_header=True, header_style="bold magenta")
    skills_table.add_column("Skill")
    skills_table.add_column("Score")
    skills_table.add_column("Trend")
    for skill, score in data.skills.items():
        skills_table.add_row(skill, f"{score.value:.1f}", _trend_text(score))
    console.print(skills_table)

    metrics_table = Table(show_header=True, header_style="bold magenta")
    metrics_table.add_column("Metric")
    metrics_table.add_column("Raw")
    metrics_table.add_column("Score")
    metrics_table.add_column("Percentile")
    metrics_table.add_column("Trend")
    for key, score in data.metrics.items():
        metrics_table.add_row(
            key,
            f"{score.raw} {score.unit}",
            f"{score.value:.1f}",
            "-" if score.percentile is None else f"{score.percentile:.0f}",
            _trend_text(score),
        )
    console.print(metrics_table)

    composite = "n/a" if data.composite is None else f"{data.composite:.1f}"
    console.print(f"[bold]Composite:[/] {composite}")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps(snapshot_to_dict(snapshot), indent=2), encoding="utf-8")
        typer.echo(f"[profile] Wrote snapshot {snapshot.id} to {output}")


@app.command()
def recommend(
    videos: Path = typer.Option(..., "--videos", help="JSON list of videos in catalog order."),
    profile_path: Optional[Path] = typer.Option(None, "--profile", help="JSON of the player's latest snapshot."),
    engagements: Optional[Path] = typer.Option(None, "--engagements", help="JSON list of engagement records."),
    pins: Optional[Path] = typer.Option(None, "--pins", help="JSON list of coach pins."),
    config: Optional[Path] = typer.Option(None, "--config", help="Engine config YAML."),
    max_results: Optional[int] = typer.Option(None, "--max-results", help="Override the configured result cap."),
    output: Optional[Path] = typer.Option(None, "--output", help="Write the ranked list as JSON here."),
    verbose: bool = typer.Option(False, "--verbose", help="Log skipped pins and ranking details."),
) -> None:
    """
    Rank the video catalog for a player and overlay coach pins.
    """
    _configure_logging(verbose)
    for path, label in ((videos, "videos"), (profile_path, "profile"), (engagements, "engagements"), (pins, "pins"), (config, "config")):
        _require(path, label)

    try:
        engine_config = load_engine_config(config)
        options = engine_config.recommendations
        if max_results is not None:
            options = replace(options, max_results=max_results).validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    catalog_videos = load_videos(videos)
    snapshot = load_snapshot(profile_path)
    ranked = compute_recommendations(
        catalog_videos,
        snapshot.data if snapshot else None,
        load_engagements(engagements),
        options,
        engine_config.engagement,
    )
    final = apply_pins(ranked, load_pins(pins))
    typer.echo(f"[recommend] Ranked {len(final)} of {len(catalog_videos)} video(s)")

    frame = ranked_to_frame(final)
    table = Table(show_header=True, header_style="bold magenta")
    for column in ("Rank", "Video", "Category", "Score", "Reason"):
        table.add_column(column)
    for row in frame.itertuples(index=False):
        marker = " *" if row.pinned else ""
        table.add_row(str(row.rank), f"{row.title}{marker}", str(row.category or "-"), f"{row.score:.3f}", row.reason)
    console.print(table)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(frame.to_json(orient="records", indent=2), encoding="utf-8")
        typer.echo(f"[recommend] Wrote {len(frame)} entries to {output}")


if __name__ == "__main__":
    app()
