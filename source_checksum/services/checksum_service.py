"""Composition of the final build checksum."""

from __future__ import annotations

import logging
import os

from source_checksum.core.config import ChecksumConfig
from source_checksum.core.exceptions import RecipeError
from source_checksum.core.logging import redact_sensitive_data
from source_checksum.recipe.parser import parse_recipe
from source_checksum.services.hashing import (
    Hasher,
    LoggingHash,
    new_hash,
    write_field,
    write_mapping,
    write_sequence,
)
from source_checksum.services.path_extractor import extract_source_paths
from source_checksum.services.path_resolver import PathResolver
from source_checksum.services.tree_hasher import TreeHasher

logger = logging.getLogger(__name__)


class ChecksumService:
    """Computes the source checksum of one build.

    Everything that can change the build output is fed, in a fixed order,
    into a single accumulator:

    1. the recipe bytes
    2. every resolved source path (its name, then its tree digest)
    3. the effective build arguments, sorted by key
    4. the platforms, sorted
    5. the labels, sorted by key
    """

    def __init__(self, config: ChecksumConfig) -> None:
        self.config = config

    def calculate(self) -> str:
        """Read the configured recipe file and return its hex checksum.

        Raises:
            RecipeError: If the recipe file cannot be read
            ChecksumError: For any other failure during the computation
        """
        dockerfile = self.config.dockerfile
        try:
            content = dockerfile.read_bytes()
        except OSError as e:
            raise RecipeError(
                f"read dockerfile: {e.strerror or e}", path=str(dockerfile)
            ) from e
        return self.calculate_for_content(content)

    def calculate_for_content(self, content: bytes) -> str:
        """Return the hex checksum for recipe ``content``."""
        config = self.config
        recipe = parse_recipe(content)

        # Validate the root and algorithm before any expansion work
        resolver = PathResolver(config.workdir)
        tree_hasher = TreeHasher(config.hash_algorithm)
        h = self._new_accumulator()

        logger.debug(
            "Add dockerfile to checksum",
            extra={"workdir": str(config.workdir), "dockerfile": str(config.dockerfile)},
        )
        h.update(content)

        extracted = extract_source_paths(recipe, config.build_args)
        for resolved in resolver.resolve(extracted.patterns):
            logger.debug("Calculate checksum for path", extra={"path": resolved.name})
            write_field(h, os.fsencode(resolved.name))
            h.update(tree_hasher.digest(resolved.path))

        logger.debug(
            "Add build parameters to checksum",
            extra={
                "build_args": redact_sensitive_data(extracted.build_args),
                "platforms": sorted(config.platforms),
                "labels": config.labels,
            },
        )
        write_mapping(h, extracted.build_args)
        write_sequence(h, config.platforms)
        write_mapping(h, config.labels)

        return h.hexdigest()

    def _new_accumulator(self) -> Hasher:
        h = new_hash(self.config.hash_algorithm)
        if self.config.debug:
            return LoggingHash(h)
        return h


def calculate_checksum(config: ChecksumConfig) -> str:
    """Checksum of the recipe and sources described by ``config``."""
    return ChecksumService(config).calculate()
