"""GitHub Actions step outputs."""

from __future__ import annotations

from pathlib import Path

from .errors import OutputError
from .shell import info


class StepOutputs:
    """Collects step outputs and appends them to the $GITHUB_OUTPUT file.

    Values are also kept in ``values`` (last write wins) so callers and
    tests can inspect what the run reported.
    """

    def __init__(self, output_path: Path | None = None) -> None:
        self.output_path = output_path
        self.values: dict[str, str] = {}

    def set(self, name: str, value: str) -> None:
        """Record an output and append it to the output file.

        Raises:
            ValueError: If ``value`` spans more than one line.
            OutputError: If the output file cannot be written.
        """
        if "\n" in value:
            raise ValueError(f"Output {name} must be a single line")
        self.values[name] = value
        info(f"output {name}={value}")
        if self.output_path is not None:
            try:
                with open(self.output_path, "a") as fh:
                    fh.write(f"{name}={value}\n")
            except OSError as exc:
                raise OutputError(
                    f"Could not write output {name} to {self.output_path}: {exc}"
                ) from exc
