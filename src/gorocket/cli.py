"""The `gorocket` command-line interface."""

import importlib.metadata
from pathlib import Path

import click

from .config import create_default_config
from .exceptions import GoRocketError
from .github import TOKEN_ENV_VAR, GitHubClient
from .models import DEFAULT_OUTPUT_DIR
from .packaging.orchestrator import BuildOrchestrator
from .process import SubprocessRunner

try:
    __version__ = importlib.metadata.version("gorocket")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"


def _paths(ctx: click.Context) -> tuple[Path, Path]:
    project_dir = Path(ctx.obj["project_dir"])
    dist = ctx.obj.get("dist")
    output_dir = Path(dist) if dist else project_dir / DEFAULT_OUTPUT_DIR
    return project_dir, output_dir


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="gorocket",
    message="%(prog)s version %(version)s",
)
@click.option(
    "--project-dir",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Directory containing go.mod and .gorocket.yaml.",
)
@click.option(
    "--dist",
    default=None,
    type=click.Path(file_okay=False, resolve_path=True),
    help="Output directory for archives and the formula (default: <project-dir>/dist).",
)
@click.pass_context
def cli(ctx: click.Context, project_dir: str, dist: str | None) -> None:
    """Cross-platform Go binary builder and releaser."""
    ctx.ensure_object(dict)
    ctx.obj["project_dir"] = project_dir
    ctx.obj["dist"] = dist


@cli.command("init")
@click.pass_context
def init_command(ctx: click.Context) -> None:
    """Creates a default .gorocket.yaml configuration file."""
    project_dir, _ = _paths(ctx)
    try:
        path = create_default_config(project_dir)
    except GoRocketError as e:
        click.secho(f"❌ Init failed: {e}", fg="red", err=True)
        raise click.Abort() from e
    click.secho(f"✅ Created {path.name}", fg="green")


@cli.command("build")
@click.option("--clean", is_flag=True, help="Remove the output directory before building.")
@click.pass_context
def build_command(ctx: click.Context, clean: bool) -> None:
    """Builds archives for every configured target."""
    project_dir, output_dir = _paths(ctx)
    orchestrator = BuildOrchestrator(
        project_dir=project_dir, output_dir=output_dir, runner=SubprocessRunner()
    )
    try:
        outcome = orchestrator.build(clean=clean)
    except GoRocketError as e:
        click.secho(f"❌ Build failed:\n{e}", fg="red", err=True)
        raise click.Abort() from e

    for archive in outcome.archives:
        click.echo(f"Created {Path(archive.archive_path).name}")
    if outcome.formula_path:
        click.echo(f"Created {outcome.formula_path.name}")
    click.secho(
        f"✅ Built {outcome.info.module_name} {outcome.info.version}", fg="green"
    )


@cli.command("release")
@click.option("--clean", is_flag=True, help="Remove the output directory before building.")
@click.option("--draft", is_flag=True, help="Create the release as a draft.")
@click.option(
    "--github-token",
    envvar=TOKEN_ENV_VAR,
    default=None,
    help=f"GitHub token (defaults to the {TOKEN_ENV_VAR} environment variable).",
)
@click.pass_context
def release_command(
    ctx: click.Context, clean: bool, draft: bool, github_token: str | None
) -> None:
    """Builds, then publishes a GitHub release with the archives."""
    if not github_token:
        click.secho(
            f"❌ A GitHub token is required (use --github-token or {TOKEN_ENV_VAR}).",
            fg="red",
            err=True,
        )
        raise click.Abort()

    project_dir, output_dir = _paths(ctx)
    click.echo("🚀 Running build and release...")
    with GitHubClient(github_token) as host:
        orchestrator = BuildOrchestrator(
            project_dir=project_dir,
            output_dir=output_dir,
            runner=SubprocessRunner(),
            host=host,
        )
        try:
            _, release = orchestrator.release(clean=clean, draft=draft)
        except GoRocketError as e:
            click.secho(f"❌ Release failed:\n{e}", fg="red", err=True)
            raise click.Abort() from e

    if release.created:
        click.secho(f"✅ Release {release.tag} created successfully!", fg="green")
    else:
        click.secho(f"ℹ️ Release {release.tag} already exists", fg="yellow")
    click.echo(f"Release URL: {release.release_url}")
    if release.assets:
        click.echo("\nUploaded assets:")
        for asset in release.assets:
            click.echo(f"  - {asset.name}")
    if release.tap_updated:
        click.echo("Updated Homebrew tap repository")


@cli.command("version")
def version_command() -> None:
    """Displays the gorocket version."""
    click.echo(__version__)


main = cli
