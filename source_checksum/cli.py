"""Command-line interface for docker-source-checksum."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from source_checksum.core.config import ChecksumConfig, default_platform, get_settings
from source_checksum.core.exceptions import ChecksumError
from source_checksum.core.logging import setup_logging
from source_checksum.services.checksum_service import ChecksumService
from source_checksum.services.hashing import SUPPORTED_ALGORITHMS

logger = logging.getLogger(__name__)


def _parse_key_values(
    ctx: click.Context,  # noqa: ARG001
    param: click.Parameter,
    values: tuple[str, ...],
) -> dict[str, str]:
    """Turn repeated ``KEY=VALUE`` options into a dict; later keys win."""
    result: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param=param)
        result[key] = value
    return result


def _split_platforms(
    ctx: click.Context,  # noqa: ARG001
    param: click.Parameter,  # noqa: ARG001
    values: tuple[str, ...],
) -> list[str]:
    """Accept both repeated and comma-separated ``--platform`` values."""
    platforms = [p.strip() for value in values for p in value.split(",") if p.strip()]
    return platforms or [default_platform()]


@click.command("docker-source-checksum")
@click.argument(
    "workdir",
    required=False,
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option(
    "-f",
    "--file",
    "dockerfile",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the dockerfile (default: Dockerfile)",
)
@click.option(
    "--build-arg",
    "build_args",
    multiple=True,
    callback=_parse_key_values,
    help="--build-arg for the docker build command (KEY=VALUE)",
)
@click.option(
    "--platform",
    "platforms",
    multiple=True,
    callback=_split_platforms,
    help="--platform for the docker build command (default: host platform)",
)
@click.option(
    "--label",
    "labels",
    multiple=True,
    callback=_parse_key_values,
    help="--label for the docker build command (KEY=VALUE)",
)
@click.option(
    "--hash",
    "hash_algorithm",
    type=click.Choice(SUPPORTED_ALGORITHMS),
    default=None,
    help="Hash algorithm to use (default: sha1)",
)
@click.option("--debug", is_flag=True, default=False, help="Print debug logs")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Log format on stderr",
)
@click.pass_context
def cli(
    ctx: click.Context,
    workdir: Path,
    dockerfile: Path | None,
    build_args: dict[str, str],
    platforms: list[str],
    labels: dict[str, str],
    hash_algorithm: str | None,
    debug: bool,
    log_format: str | None,
) -> None:
    """Print a checksum of a dockerfile build and the sources it uses.

    WORKDIR is the build context the dockerfile's sources are relative to.
    """
    settings = get_settings()
    debug = debug or settings.debug
    setup_logging(
        "DEBUG" if debug else settings.log_level,
        log_format or settings.log_format,
    )

    config = ChecksumConfig(
        dockerfile=dockerfile or Path(settings.dockerfile),
        workdir=workdir,
        build_args=build_args,
        labels=labels,
        platforms=platforms,
        hash_algorithm=hash_algorithm or settings.hash_algorithm,
        debug=debug,
    )

    try:
        digest = ChecksumService(config).calculate()
    except ChecksumError as e:
        logger.error("%s: %s", e.title, e.detail, extra={"error": e.to_dict()})
        ctx.exit(1)

    click.echo(digest, nl=False)


def main() -> None:
    cli()
