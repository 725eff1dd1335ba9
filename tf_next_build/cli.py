"""Thin CLI wrapper for tf_next_build.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from tf_next_build import __version__
from tf_next_build.config import get_settings, print_settings_json

app = typer.Typer(
    name="tf-next-build",
    help="Terraform Next.js build - package build output into deployable artifacts",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"tf-next-build version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Terraform Next.js build - package build output into deployable artifacts."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
    else:
        tmp_dir_display = (
            str(settings.tmp_dir) if settings.tmp_dir else "(system default)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Paths:[/bold]")
        console.print(f"  Working directory:   {settings.cwd}")
        console.print(f"  Output directory:    {settings.output_dir}")
        console.print(f"  Temp directory:      {tmp_dir_display}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Skip download:       {settings.skip_download}")
        console.print(f"  Delete build cache:  {settings.delete_build_cache}")
        console.print(f"  Log level:           {settings.log_level}")
        console.print(f"  Builder:             {settings.builder or '(not set)'}")


@app.command()
def build(
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Project directory (default: current directory)"),
    ] = None,
    skip_download: Annotated[
        bool | None,
        typer.Option(
            "--skip-download",
            help="Build in the project directory instead of a temporary workspace",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level: verbose or none"),
    ] = None,
    delete_build_cache: Annotated[
        bool | None,
        typer.Option(
            "--delete-build-cache/--keep-build-cache",
            help="Erase the temporary workspace after the build",
        ),
    ] = None,
    builder: Annotated[
        str | None,
        typer.Option("--builder", "-b", help="Build callable as 'module:attribute'"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the written config as JSON"),
    ] = False,
) -> None:
    """Build the project and write the deployment artifacts."""
    from tf_next_build.build.runner import BuilderLoadError, load_builder
    from tf_next_build.build.service import BuildFailure, run_build_command
    from tf_next_build.output.manifest import config_as_dict

    if log_level is not None and log_level not in ("verbose", "none"):
        console.print(f"[red]Invalid log level: {log_level}[/red]")
        console.print("Valid values: verbose, none")
        raise typer.Exit(code=1)

    overrides = {
        "cwd": cwd,
        "skip_download": skip_download,
        "log_level": log_level,
        "delete_build_cache": delete_build_cache,
        "builder": builder,
    }
    settings = get_settings(**{k: v for k, v in overrides.items() if v is not None})

    configure_logging(verbose=settings.log_level == "verbose")

    if not settings.builder:
        console.print("[red]Error: No builder configured[/red]")
        console.print("Use --builder or set TF_NEXT_BUILDER")
        raise typer.Exit(code=1)

    try:
        build_fn = load_builder(settings.builder)
    except BuilderLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from None

    result = run_build_command(settings=settings, builder=build_fn)

    if isinstance(result, BuildFailure):
        console.print(f"[red]Build failed ({result.code}): {result.message}[/red]")
        raise typer.Exit(code=result.exit_code)

    if json_output:
        typer.echo(json.dumps(config_as_dict(result.config), indent=2))
    else:
        console.print(f"[green]Build {result.config.build_id} written[/green]")
        console.print(f"  Output directory: {result.output_dir}")
        console.print(f"  Lambdas:          {len(result.config.lambdas)}")
        console.print(f"  Static routes:    {len(result.config.static_routes)}")
        console.print(f"  Routes:           {len(result.config.routes)}")


if __name__ == "__main__":
    app()
