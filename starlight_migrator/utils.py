"""Shared utilities for the GitBook to Starlight migrator."""

import os
import posixpath
import re

from .config import ConvertConfig


def escape_attr(text: str) -> str:
    """Escape double quotes for an HTML/JSX attribute value."""
    return text.replace('"', '&quot;')


def escape_yaml(text: str) -> str:
    """Escape a value for a double-quoted YAML string."""
    return text.replace('\\', '\\\\').replace('"', '\\"').replace('\n', ' ').strip()


def strip_md(path: str) -> str:
    """Remove a trailing .md extension."""
    return re.sub(r'\.md$', '', path)


def to_posix(path: str) -> str:
    return path.replace('\\', '/')


def output_relpath(rel_path: str, config: ConvertConfig) -> str:
    """Map a source-relative .md path to its output path.

    The index file becomes the landing page (README.md → index.mdx); every
    other page keeps its name with the output extension.
    """
    rel_path = to_posix(rel_path)
    directory, filename = posixpath.split(rel_path)
    if config.is_index(filename):
        filename = config.landing_filename
    else:
        filename = strip_md(filename) + config.output_extension
    return posixpath.join(directory, filename)


def ensure_dir(path: str):
    """Create the parent directory of ``path`` if it doesn't exist."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
