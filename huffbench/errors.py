from pathlib import Path
from typing import Optional


class BenchmarkError(Exception):
    """Base class for failures that abort or taint a benchmark run."""

    def __init__(self, message: str, *, category: Optional[str] = None) -> None:
        super().__init__(message)
        self.category = category

    def describe(self) -> str:
        if self.category:
            return f"[{self.category}] {self}"
        return str(self)


class MeasurementError(BenchmarkError):
    def __init__(self, message: str, path: Optional[Path] = None, *, category: Optional[str] = None) -> None:
        super().__init__(message, category=category)
        self.path = path

    def describe(self) -> str:
        context = self.category or ""
        if self.path is not None:
            context = f"{context}: {self.path}" if context else str(self.path)
        if context:
            return f"[{context}] {self}"
        return str(self)


class EmptyCategoryError(BenchmarkError):
    pass


class EmptyAccumulatorError(BenchmarkError):
    pass


class BuildError(BenchmarkError):
    pass
