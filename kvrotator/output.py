"""
Run-level output sink.

When running as a GitHub Actions step, outputs and the step summary go to
the files named by `$GITHUB_OUTPUT` and `$GITHUB_STEP_SUMMARY`. Outside
Actions, outputs are logged and the summary is printed to stdout.
"""

from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)

CSR_ARTIFACT_SUFFIX = ".csr.txt"


def set_output(name: str, value: str) -> None:
    """Publish a step output (e.g. `rotated-resources`)."""
    path = os.environ.get("GITHUB_OUTPUT")
    if not path:
        logger.info("Output %s=%s", name, value)
        return

    with open(path, "a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{name}={value}\n")


def write_summary(markdown: str) -> None:
    """Append markdown to the step summary."""
    path = os.environ.get("GITHUB_STEP_SUMMARY")
    if not path:
        print(markdown)
        return

    with open(path, "a", encoding="utf-8") as f:
        f.write(markdown)
        if not markdown.endswith("\n"):
            f.write("\n")


def _cell(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def render_inspection_table(rows: list[list[str]], heading: str = "Secrets Inspection") -> str:
    """Render rows (header first) as a markdown section with a table."""
    lines = [f"## {heading}", ""]
    if not rows:
        return "\n".join(lines) + "\n"

    header, *body = rows
    lines.append("| " + " | ".join(_cell(c) for c in header) + " |")
    lines.append("|" + "|".join(" --- " for _ in header) + "|")
    for row in body:
        lines.append("| " + " | ".join(_cell(c) for c in row) + " |")
    return "\n".join(lines) + "\n"


def write_csr_artifacts(directory: str | Path, artifacts: dict[str, str]) -> list[Path]:
    """Write each CSR to `<directory>/<configuration id>.csr.txt`.

    Returns:
        Paths written, in the order of `artifacts`.
    """
    if not artifacts:
        return []

    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for configuration_id, csr in artifacts.items():
        path = directory / f"{configuration_id}{CSR_ARTIFACT_SUFFIX}"
        path.write_text(csr if csr.endswith("\n") else csr + "\n", encoding="utf-8")
        logger.info("Wrote CSR for '%s' to %s", configuration_id, path)
        written.append(path)
    return written
