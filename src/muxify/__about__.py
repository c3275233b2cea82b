"""Metadata for muxify package."""

from __future__ import annotations

__title__ = "muxify"
__package_name__ = "muxify"
__version__ = "0.3.0"
__description__ = "Manage local and remote tmux sessions, windows and panes over one API"
__email__ = "dev@muxify.invalid"
__author__ = "muxify contributors"
__github__ = "https://github.com/muxify/muxify"
__docs__ = "https://github.com/muxify/muxify#readme"
__tracker__ = "https://github.com/muxify/muxify/issues"
__pypi__ = "https://pypi.org/project/muxify/"
__license__ = "MIT"
__copyright__ = "Copyright 2025- muxify contributors"
