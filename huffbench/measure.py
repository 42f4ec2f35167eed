import json
import logging
import math
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from . import config
from .errors import MeasurementError


def percent_saving(baseline: int, coded: int) -> float:
    # A zero baseline yields inf/nan instead of raising; those values propagate into the aggregate.
    delta = float(baseline - coded)
    if baseline == 0:
        if delta == 0:
            return math.nan
        return math.copysign(math.inf, delta)
    return 100.0 * delta / baseline


@dataclass(frozen=True)
class MeasurementResult:
    path: Path
    uncompressed: int
    reference: int
    entropy_coded: int

    @property
    def raw_saving(self) -> float:
        return percent_saving(self.uncompressed, self.entropy_coded)

    @property
    def reference_saving(self) -> float:
        return percent_saving(self.reference, self.entropy_coded)


def _run_command(cmd: Sequence[str], path: Path, timeout: Optional[float], *, text: bool) -> subprocess.CompletedProcess:
    try:
        completed = subprocess.run(
            list(cmd),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=text,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise MeasurementError(f"{cmd[0]} timed out after {exc.timeout}s", path) from exc
    except OSError as exc:
        raise MeasurementError(f"Could not start {cmd[0]}: {exc}", path) from exc

    if completed.returncode != 0:
        stderr = completed.stderr
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        detail = (stderr or "").strip().splitlines()
        message = f"{cmd[0]} exited with status {completed.returncode}"
        if detail:
            message = f"{message}: {detail[-1]}"
        raise MeasurementError(message, path)
    return completed


def _parse_sizes(output: str, path: Path, fields: Sequence[str]) -> dict[str, int]:
    try:
        record = json.loads(output)
    except json.JSONDecodeError as exc:
        raise MeasurementError(f"Unparsable measurement output: {exc}", path) from exc
    if not isinstance(record, dict):
        raise MeasurementError("Measurement output is not a JSON object", path)

    sizes: dict[str, int] = {}
    for name in fields:
        value = record.get(name)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise MeasurementError(f"Field {name!r} missing or not a non-negative integer: {value!r}", path)
        sizes[name] = value
    return sizes


class ExternalMeasurer(ABC):
    def __init__(self, tool: str, timeout: Optional[float] = None) -> None:
        self.tool = tool
        self.timeout = timeout

    @abstractmethod
    def measure(self, path: Path) -> MeasurementResult:
        ...

    def _run_tool(self, path: Path, fields: Sequence[str]) -> dict[str, int]:
        completed = _run_command([self.tool, str(path)], path, self.timeout, text=True)
        return _parse_sizes(completed.stdout, path, fields)


class CombinedMeasurer(ExternalMeasurer):
    """The tool reports all three sizes in one JSON record."""

    def measure(self, path: Path) -> MeasurementResult:
        sizes = self._run_tool(
            path,
            (config.FIELD_UNCOMPRESSED, config.FIELD_REFERENCE, config.FIELD_ENTROPY_CODED),
        )
        result = MeasurementResult(
            path=path,
            uncompressed=sizes[config.FIELD_UNCOMPRESSED],
            reference=sizes[config.FIELD_REFERENCE],
            entropy_coded=sizes[config.FIELD_ENTROPY_CODED],
        )
        logging.debug("Measured %s: %s", path, result)
        return result


class SplitMeasurer(ExternalMeasurer):
    """The tool reports raw and entropy-coded sizes; a second command encodes
    the file into the reference container on stdout and its payload size is
    the byte count minus the container overhead."""

    def __init__(
        self,
        tool: str,
        reference_command: Sequence[str],
        timeout: Optional[float] = None,
        header_bytes: int = config.REFERENCE_HEADER_BYTES,
    ) -> None:
        super().__init__(tool, timeout)
        if not reference_command:
            raise ValueError("reference_command must not be empty")
        self.reference_command = tuple(reference_command)
        self.header_bytes = header_bytes

    def _reference_args(self, path: Path) -> list[str]:
        args = [part.replace(config.INPUT_PLACEHOLDER, str(path)) for part in self.reference_command]
        if not any(config.INPUT_PLACEHOLDER in part for part in self.reference_command):
            args.append(str(path))
        return args

    def reference_size(self, path: Path) -> int:
        completed = _run_command(self._reference_args(path), path, self.timeout, text=False)
        encoded = len(completed.stdout)
        if encoded < self.header_bytes:
            raise MeasurementError(
                f"Reference output is {encoded} bytes, shorter than the {self.header_bytes}-byte container overhead",
                path,
            )
        return encoded - self.header_bytes

    def measure(self, path: Path) -> MeasurementResult:
        sizes = self._run_tool(path, (config.FIELD_UNCOMPRESSED, config.FIELD_ENTROPY_CODED))
        result = MeasurementResult(
            path=path,
            uncompressed=sizes[config.FIELD_UNCOMPRESSED],
            reference=self.reference_size(path),
            entropy_coded=sizes[config.FIELD_ENTROPY_CODED],
        )
        logging.debug("Measured %s: %s", path, result)
        return result


def measurer_from_settings(settings: config.BenchSettings) -> ExternalMeasurer:
    if settings.reference_command is not None:
        return SplitMeasurer(settings.tool, settings.reference_command, timeout=settings.timeout)
    return CombinedMeasurer(settings.tool, timeout=settings.timeout)
