"""Where the coordinator gets its data from."""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple
from stats_errors import AllocationFailure, StartupFailure


class DataSource:
    """Supplies a declared point count and then the points themselves."""

    def header_count(self) -> int:
        raise NotImplementedError

    def read_values(self, max_count: int) -> Tuple[int, List[float]]:
        raise NotImplementedError


class ListDataSource(DataSource):
    """In-memory values, optionally with a header that disagrees with them."""

    def __init__(self, values: Iterable[float], declared_count: Optional[int] = None):
        self.values = [float(v) for v in values]
        self.declared_count = (
            len(self.values) if declared_count is None else declared_count
        )

    def header_count(self) -> int:
        return self.declared_count

    def read_values(self, max_count: int) -> Tuple[int, List[float]]:
        values = self.values[: max(max_count, 0)]
        return len(values), values

    def __str__(self):
        return f"ListDataSource(n={len(self.values)})"


class FileDataSource(DataSource):
    """Text file: the point count, then whitespace-separated numbers.

    The file is read on first use, so only the rank that actually loads
    data ever touches it. Reading stops at the first token that is not a
    number.
    """

    def __init__(self, path):
        self.path = Path(path)
        self._tokens: Optional[List[str]] = None

    def header_count(self) -> int:
        tokens = self._read_tokens()
        if not tokens:
            raise StartupFailure(f"{self.path} is empty, expected a point count")
        try:
            return int(tokens[0])
        except ValueError as exc:
            raise StartupFailure(
                f"bad point count {tokens[0]!r} in {self.path}"
            ) from exc

    def read_values(self, max_count: int) -> Tuple[int, List[float]]:
        values = []
        for token in self._read_tokens()[1 : max(max_count, 0) + 1]:
            try:
                values.append(float(token))
            except ValueError:
                break
        return len(values), values

    def _read_tokens(self) -> List[str]:
        if self._tokens is None:
            try:
                self._tokens = self.path.read_text(encoding="utf-8").split()
            except OSError as exc:
                raise StartupFailure(f"cannot open file {self.path}") from exc
            except UnicodeDecodeError as exc:
                raise StartupFailure(f"{self.path} is not a text file: {exc}") from exc
        return self._tokens

    def __str__(self):
        return f"FileDataSource({self.path})"


def load_dataset(source: DataSource) -> Tuple[int, List[float], List[str]]:
    """Read a source and return (declared count, values, warnings).

    A header that disagrees with the number of values actually read is a
    warning; the values read are what gets processed.
    """
    declared = source.header_count()
    if declared < 0:
        raise AllocationFailure(f"cannot reserve memory for {declared} data points")

    try:
        actual, values = source.read_values(declared)
    except MemoryError as exc:
        raise AllocationFailure(
            f"cannot reserve memory for {declared} data points"
        ) from exc

    warnings = []
    if actual != declared:
        warnings.append(
            f"actual number read ({actual}) differs from header value ({declared})"
        )
    return declared, values[:actual], warnings


def write_data_file(path, values: Iterable[float], declared_count: Optional[int] = None):
    """Write values in the format FileDataSource reads."""
    values = list(values)
    count = len(values) if declared_count is None else declared_count
    lines = [str(count)] + [repr(float(v)) for v in values]
    Path(path).write_text("\n".join(lines) + "\n")
