"""sudohop CLI.

Usage:
    sudohop path <file> [--user USER]   # Print the elevated address of a file
    sudohop hop <file>                  # Print the hop fragment for a remote file
    sudohop methods                     # List transport methods
"""

from __future__ import annotations

import json
from pathlib import Path

import click

from sudohop import __version__
from sudohop.classifier import needs_downgrade
from sudohop.composer import PathComposer
from sudohop.config import SudoHopConfig, load_config
from sudohop.exceptions import SudoHopError
from sudohop.hops import build_hop
from sudohop.parser import available_syntaxes


# =============================================================================
# CLI Context
# =============================================================================


class CLIContext:
    """Context object for CLI commands."""

    def __init__(
        self,
        config_path: str | None = None,
        verbose: bool = False,
        syntax: str | None = None,
    ):
        """Initialize CLI context.

        Args:
            config_path: Path to config file.
            verbose: Enable verbose output.
            syntax: Address syntax overriding the configured one.
        """
        self.verbose = verbose
        self.config: SudoHopConfig = load_config(
            Path(config_path) if config_path else None
        )
        if syntax:
            self.config.syntax.name = syntax

        self._composer: PathComposer | None = None

    @property
    def composer(self) -> PathComposer:
        """Get or create the path composer."""
        if self._composer is None:
            self._composer = self.config.build_composer()
        return self._composer

    def log(self, message: str, level: str = "info") -> None:
        """Log a message if verbose mode is enabled."""
        if self.verbose or level == "error":
            prefix = {"info": "ℹ", "success": "✓", "warning": "⚠", "error": "✗"}
            click.echo(f"{prefix.get(level, '•')} {message}", err=True)


pass_context = click.make_pass_decorator(CLIContext)


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.option(
    "-c", "--config",
    type=click.Path(exists=True),
    help="Path to config file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--syntax",
    type=click.Choice(available_syntaxes()),
    help="Address syntax (overrides config)",
)
@click.version_option(version=__version__, prog_name="sudohop")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool, syntax: str | None) -> None:
    """sudohop - open files as another user through any transport chain.

    Rewrites local and remote (multi-hop) file addresses so they are opened
    through the privilege-elevation transport on the same host.
    """
    try:
        ctx.obj = CLIContext(config_path=config, verbose=verbose, syntax=syntax)
    except ValueError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


# =============================================================================
# Commands
# =============================================================================


@cli.command()
@click.argument("file", required=False, default="")
@click.option(
    "-u", "--user",
    default=None,
    help="User to open the file as (default from config)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Output descriptor as JSON",
)
@pass_context
def path(ctx: CLIContext, file: str, user: str | None, as_json: bool) -> None:
    """Print the address that opens FILE as another user."""
    target_user = user if user is not None else ctx.config.elevation.default_user
    ctx.log(f"Target user: {target_user}")

    try:
        result = ctx.composer.compose_descriptor(file, target_user)
        raw = result if isinstance(result, str) else ctx.composer.parser.serialize(result)
    except SudoHopError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        data = {
            "path": raw,
            "descriptor": None if isinstance(result, str) else result.to_dict(),
        }
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(raw)


@cli.command()
@click.argument("file")
@pass_context
def hop(ctx: CLIContext, file: str) -> None:
    """Print the hop fragment that reaches the host of remote FILE."""
    composer = ctx.composer
    try:
        descriptor = composer.parser.dissect(file)
        fragment = build_hop(descriptor, composer.parser, composer.registry)
    except SudoHopError as e:
        raise click.ClickException(str(e)) from e

    if needs_downgrade(descriptor.method, composer.registry):
        ctx.log(f"{descriptor.method} downgraded to {composer.registry.canonical_method}", "warning")
    click.echo(fragment)


@cli.command()
@pass_context
def methods(ctx: CLIContext) -> None:
    """List known transport methods."""
    registry = ctx.composer.registry

    click.echo(f"{'Method':<12} {'Login':<10} {'Copy':<10} {'Mount':<6} {'Hop as':<8}")
    click.echo("-" * 50)
    for name in registry.methods():
        login = registry.get_parameter(name, "login_program") or "-"
        copy = registry.get_parameter(name, "copy_program") or "-"
        mount = "yes" if registry.get_parameter(name, "mount_style") else "no"
        hop_as = registry.canonical_method if needs_downgrade(name, registry) else name
        click.echo(f"{name:<12} {login:<10} {copy:<10} {mount:<6} {hop_as:<8}")


def main() -> None:
    """Entry point for the sudohop console script."""
    cli()


if __name__ == "__main__":
    main()
