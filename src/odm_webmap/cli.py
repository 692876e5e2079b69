# FILE: src/odm_webmap/cli.py
# =================================================================================================
# ODM WebMap — Typer CLI
#
# Subcommands
# -----------
#   odm-webmap convert -i <odm-output> -o <site-dir> [-s 0.2] [-q 90]
#   odm-webmap height-to-px-res -H <meters> -x <px> -y <px>
#   odm-webmap effective-config [-c config.yaml] [--override JSON]
#   odm-webmap version
#
# Notes
# -----
# - Parameters resolve as: built-in defaults <- YAML config (-c) <- JSON --override <- explicit flags.
# - Any pipeline failure prints the failing stage (and file) and exits with code 1.
# =================================================================================================
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import get_version
from .config import resolve_config, settings_from_config
from .errors import OdmWebmapError
from .utils.logging_utils import get_logger, init_logging

app = typer.Typer(add_completion=False, help="OpenDroneMap post-processing for MapLibre web-map packages")
console = Console()


def _auto_run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _load_config(config: Optional[Path], overrides: Optional[str]) -> Dict[str, Any]:
    try:
        return resolve_config(config, overrides_json=overrides)
    except FileNotFoundError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"invalid JSON: {e}", param_hint="--override") from e


def _apply_flags(cfg: Dict[str, Any], **flags: Any) -> Dict[str, Any]:
    """Explicit CLI flags win over config values; None means 'not given'."""
    convert = dict(cfg.get("convert", {}) or {})
    for k, v in flags.items():
        if v is not None:
            convert[k] = v
    return {**cfg, "convert": convert}


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """
    ODM WebMap CLI. Run with a subcommand (see --help).
    """
    if ctx.invoked_subcommand is not None:
        return
    console.print(
        Panel.fit(
            f"[bold cyan]ODM WebMap[/bold cyan]\n"
            f"[white]OpenDroneMap output → MapLibre site package[/white]\n"
            f"[dim]version {get_version()}[/dim]",
            border_style="cyan",
        )
    )
    console.print("Use [bold]odm-webmap --help[/bold] or a subcommand, e.g., [bold]odm-webmap convert[/bold].")


@app.command("convert")
def convert(
    input_dir: Path = typer.Option(..., "--input-dir", "-i", help="ODM output directory"),
    output_dir: Path = typer.Option(..., "--output-dir", "-o", help="Web-map package directory (created if absent)"),
    size_factor: Optional[float] = typer.Option(
        None, "--size-factor", "-s", help="Scale down from the original orthophoto [0.0-1.0] (default 0.2)"
    ),
    quality: Optional[float] = typer.Option(
        None, "--webp-quality", "-q", help="Quality of the WebP compression [0-100] (default 90.0)"
    ),
    max_pixels: Optional[int] = typer.Option(
        None, "--max-pixels", help="Refuse orthophotos above this pixel count (default: no limit)"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: Optional[str] = typer.Option(None, "--override", help="JSON string of config overrides"),
    run_id: str = typer.Option("auto", "--run-id", help='Run identifier for log files ("auto" => timestamp)'),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override logging level (e.g. INFO, DEBUG)"),
) -> None:
    """
    Convert an ODM post-process package to an upload-able package for a MapLibre site.
    """
    cfg = _apply_flags(
        _load_config(config, overrides),
        size_factor=size_factor,
        quality=quality,
        max_pixels=max_pixels,
    )
    if log_level:
        cfg["logging"] = {**cfg.get("logging", {}), "level": log_level}
    rid = _auto_run_id() if run_id == "auto" else run_id
    init_logging(cfg, run_id=rid)
    log = get_logger("cli")

    try:
        settings = settings_from_config(cfg)
    except (TypeError, ValueError) as e:
        raise typer.BadParameter(f"invalid convert setting: {e}", param_hint="--config/--override") from e
    from .pipeline import convert_package  # lazy import (Pillow)

    console.print(Panel.fit(f"Converting {escape(str(input_dir))} → [bold]{escape(str(output_dir))}[/bold]", border_style="green"))
    try:
        manifest = convert_package(input_dir, output_dir, settings)
    except OdmWebmapError as e:
        log.error("%s stage failed: %s", e.stage, e)
        console.print(
            Panel.fit(
                f"[bold red]{e.stage} failed[/bold red]\n{escape(e.message)}"
                + (f"\n[dim]file:[/dim] {escape(str(e.path))}" if e.path else ""),
                border_style="red",
            )
        )
        raise typer.Exit(code=1)

    table = Table(title="Package", show_lines=False)
    table.add_column("Artifact", justify="right", style="bold")
    table.add_column("Path")
    table.add_column("Size")
    table.add_row("summary", manifest["summary"], "")
    table.add_row("full-res", manifest["lossless"], "x".join(map(str, manifest["lossless_size"])))
    table.add_row("webp", manifest["lossy"], "x".join(map(str, manifest["lossy_size"])))
    console.print(table)


@app.command("height-to-px-res")
@app.command("height_to_px_res", hidden=True)
def height_to_px_res(
    height: float = typer.Option(..., "--height", "-H", help="Height of the drone in meters"),
    x_res: int = typer.Option(..., "--x_res", "-x", help="Resolution of a photo in pixels along the x-axis (horizontal)"),
    y_res: int = typer.Option(..., "--y_res", "-y", help="Resolution of a photo in pixels along the y-axis (vertical)"),
) -> None:
    """
    Using the drone's height in meters, calculate the appropriate pixel resolution for NodeODM.
    """
    # TODO: derive the ground sampling distance once camera sensor width and focal length are accepted.
    typer.echo(f"{height!r},{x_res},{y_res}")


@app.command("effective-config")
def effective_config(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    overrides: Optional[str] = typer.Option(None, "--override", help="JSON string of config overrides"),
) -> None:
    """
    Print the fully-resolved config (defaults, YAML, overrides) as JSON.
    """
    typer.echo(json.dumps(_load_config(config, overrides), indent=2))


@app.command("version")
def version() -> None:
    """Print the odm-webmap version."""
    typer.echo(get_version())
