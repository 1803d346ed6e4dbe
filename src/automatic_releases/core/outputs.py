"""GitHub Actions output and environment files."""

from __future__ import annotations

import os
import uuid
from collections.abc import Mapping
from pathlib import Path


def _format_entry(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def append_key_values(path: Path, values: Mapping[str, object]) -> None:
    """Append ``name=value`` entries using the Actions file command format."""
    with path.open("a", encoding="utf-8") as f:
        for name, value in values.items():
            f.write(_format_entry(name, str(value)))


def set_outputs(values: Mapping[str, object], environ: Mapping[str, str] | None = None) -> bool:
    """Write step outputs to ``$GITHUB_OUTPUT``.

    Returns:
        Whether an output file was configured
    """
    env = os.environ if environ is None else environ
    target = env.get("GITHUB_OUTPUT")
    if not target:
        return False
    append_key_values(Path(target), values)
    return True


def export_variables(values: Mapping[str, object], environ: Mapping[str, str] | None = None) -> bool:
    """Export variables to later steps through ``$GITHUB_ENV``."""
    env = os.environ if environ is None else environ
    target = env.get("GITHUB_ENV")
    if not target:
        return False
    append_key_values(Path(target), values)
    return True
