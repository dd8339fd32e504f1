"""CLI entry point: prebuild.

Subcommands:
    prebuild run                # Full stage: metadata + native build, directives on stdout
    prebuild metadata           # Write the identity fragment only
    prebuild probe [ROOT]       # Report native manifest + rebuild triggers, no subprocesses

Intended to be invoked from a Cargo build script, which supplies OUT_DIR,
CARGO_MANIFEST_DIR, CARGO_PKG_NAME and CARGO_PKG_VERSION.
"""

from __future__ import annotations

import sys

import click

from prebuild.config import PrebuildConfig
from prebuild.directives import DirectiveSink
from prebuild.exceptions import PrebuildError
from prebuild.logging import setup_logging
from prebuild.native.detector import NativeProjectDetector, rebuild_triggers


def _load_config() -> PrebuildConfig:
    try:
        return PrebuildConfig.from_env()
    except PrebuildError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Prebuild: build metadata and native library orchestration."""
    setup_logging(verbose=verbose)


@main.command("run")
@click.option("--summary", is_flag=True, help="Print the phase summary on stderr")
def run(summary: bool) -> None:
    """Write build metadata, build the native project, print directives."""
    from prebuild.runner import run_prebuild

    config = _load_config()
    sink = DirectiveSink()
    try:
        result = run_prebuild(config, sink=sink)
    except PrebuildError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    sink.emit_to(sys.stdout)

    if summary:
        s = result.progress_summary
        click.echo(f"Prebuild summary (total: {s['total_duration']}s):", err=True)
        for p in s["phases"]:
            status_icon = {
                "completed": "+",
                "failed": "!",
                "skipped": "-",
                "running": "~",
                "pending": ".",
            }.get(p["status"], "?")
            duration = f" ({p['duration']}s)" if p["duration"] else ""
            detail = f" - {p['detail']}" if p["detail"] else ""
            click.echo(f"  [{status_icon}] {p['phase']}{duration}{detail}", err=True)


@main.command("metadata")
def metadata() -> None:
    """Write the build identity fragment into OUT_DIR."""
    from prebuild.metadata import MetadataEmitter

    config = _load_config()
    try:
        path = MetadataEmitter(config).emit()
    except PrebuildError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(str(path))


@main.command("probe")
@click.argument("project_root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--manifest", default="CMakeLists.txt", help="Native manifest file name")
def probe(project_root: str, manifest: str) -> None:
    """Report whether a native project is present and what triggers a rebuild."""
    project = NativeProjectDetector().detect(project_root, manifest=manifest)
    if project:
        click.echo(f"Native project: {project.manifest_path} ({project.build_system})")
    else:
        click.echo(f"Native project: none (no {manifest})")

    click.echo("Rebuild triggers:")
    for trigger in rebuild_triggers(manifest):
        click.echo(f"  {trigger}")


if __name__ == "__main__":
    main()
