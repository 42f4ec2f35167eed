from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CONCURRENCY = 16
MAX_CONCURRENCY = 256

PROGRESS_BAR_WIDTH = 16
PROGRESS_INTERVAL = 0.25

ELIGIBLE_SUFFIX = ".png"

# QOI container: 14-byte header plus the 8-byte end marker
REFERENCE_HEADER_BYTES = 22
REFERENCE_LABEL = "QOI"

DEFAULT_CORPUS_DIR = "corpus"
DEFAULT_TOOL = "zig-out/bin/qohi"
DEFAULT_BUILD_COMMAND = ("zig", "build", "-Doptimize=ReleaseSafe")

FIELD_UNCOMPRESSED = "uncompressed"
FIELD_REFERENCE = "qoi"
FIELD_ENTROPY_CODED = "huffman"

INPUT_PLACEHOLDER = "{input}"

TOTAL_LABEL = "total"


def clamp_worker_count(value: Optional[int]) -> int:
    if value is None:
        return DEFAULT_CONCURRENCY
    return max(1, min(int(value), MAX_CONCURRENCY))


@dataclass(frozen=True)
class BenchSettings:
    corpus: Path = Path(DEFAULT_CORPUS_DIR)
    tool: str = DEFAULT_TOOL
    tabular: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    reference_command: Optional[tuple[str, ...]] = None
    timeout: Optional[float] = None
    build: bool = False

    @property
    def split_measurement(self) -> bool:
        return self.reference_command is not None
