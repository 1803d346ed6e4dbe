"""automatic-releases: GitHub releases with conventional-commit changelogs."""

from __future__ import annotations

__version__ = "0.1.0"
