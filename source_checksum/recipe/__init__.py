"""Recipe parsing and word expansion."""

from source_checksum.recipe.parser import parse_recipe
from source_checksum.recipe.shell import ShellLex

__all__ = ["ShellLex", "parse_recipe"]
