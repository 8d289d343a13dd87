"""``dometrics`` command group: global options, logging setup, sub-commands."""

from __future__ import annotations

import logging

import click

from dometrics import __version__

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Chatty third-party loggers, kept at WARNING unless --verbose.
_NOISY_LOGGERS = ("httpx", "httpcore")


def _configure_logging(verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%H:%M:%S")
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(version=__version__, prog_name="dometrics")
@click.option("--config", type=click.Path(dir_okay=False), default=None,
              envvar="DOMETRICS_CONFIG", help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool, quiet: bool) -> None:
    """Dometrics -- domain risk, rarity, momentum and value scoring."""
    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")
    _configure_logging(verbose, quiet)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


from dometrics.cli.batch_cmd import batch_cmd  # noqa: E402
from dometrics.cli.config_cmd import config_group  # noqa: E402
from dometrics.cli.score import score_cmd  # noqa: E402

for _command in (score_cmd, batch_cmd, config_group):
    cli.add_command(_command)
