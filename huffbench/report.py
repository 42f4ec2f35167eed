import math
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from colorama import Fore, Style

from . import config
from .stats import SavingsStats


@dataclass(frozen=True)
class ReportRow:
    name: str
    raw_mean: float
    raw_stddev: float
    reference_mean: float
    reference_stddev: float

    @classmethod
    def from_stats(cls, name: str, stats: SavingsStats) -> "ReportRow":
        # Raises EmptyAccumulatorError before anything is written
        return cls(
            name=name,
            raw_mean=stats.raw.mean(),
            raw_stddev=stats.raw.stddev(),
            reference_mean=stats.reference.mean(),
            reference_stddev=stats.reference.stddev(),
        )


def _round(value: float) -> float:
    """Two decimals, ties rounded up (towards +inf)."""
    if not math.isfinite(value):
        return value
    return math.floor(value * 100 + 0.5) / 100


def format_number(value: float) -> str:
    rounded = _round(value)
    if not math.isfinite(rounded):
        return str(rounded)
    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def color_value(value: float) -> str:
    rounded = _round(value)
    color = Fore.GREEN if rounded > 0 else Fore.RED
    return color + format_number(rounded) + Style.RESET_ALL


class Report:
    progress_enabled = False

    def __init__(self, stream: Optional[TextIO] = None, reference_label: str = config.REFERENCE_LABEL) -> None:
        self._stream = stream
        self.reference_label = reference_label

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def start(self) -> None:
        pass

    def begin_category(self, name: str) -> None:
        pass

    def end_progress(self) -> None:
        pass

    def category(self, name: str, stats: SavingsStats) -> None:
        self.emit(ReportRow.from_stats(name, stats))

    def total(self, stats: SavingsStats) -> None:
        row = ReportRow.from_stats(config.TOTAL_LABEL, stats)
        self.begin_category(row.name)
        self.end_progress()
        self.emit(row)

    def emit(self, row: ReportRow) -> None:
        raise NotImplementedError


class HumanReport(Report):
    progress_enabled = True

    def begin_category(self, name: str) -> None:
        self._write(f"{name}: ")

    def end_progress(self) -> None:
        self._write("\n")

    def emit(self, row: ReportRow) -> None:
        self._write(
            f"  vs. raw: avg = {color_value(row.raw_mean)}%, σ = {format_number(row.raw_stddev)}pp\n"
            f"  vs. {self.reference_label}: avg = {color_value(row.reference_mean)}%, "
            f"σ = {format_number(row.reference_stddev)}pp\n"
        )


class TableReport(Report):
    def header(self) -> str:
        label = self.reference_label
        return f"| category | vs. raw avg (%) | vs. raw σ (pp) | vs. {label} avg (%) | vs. {label} σ (pp) |"

    @staticmethod
    def separator() -> str:
        return "|---|---:|---:|---:|---:|"

    def start(self) -> None:
        self._write(self.header() + "\n" + self.separator() + "\n")

    def emit(self, row: ReportRow) -> None:
        self._write(
            f"| {row.name} | {row.raw_mean:.2f} | {row.raw_stddev:.2f} "
            f"| {row.reference_mean:.2f} | {row.reference_stddev:.2f} |\n"
        )


def make_report(tabular: bool, stream: Optional[TextIO] = None) -> Report:
    if tabular:
        return TableReport(stream)
    return HumanReport(stream)
