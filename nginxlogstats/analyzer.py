"""Per-path request statistics gathered from access log files."""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass, field
from itertools import accumulate
from pathlib import Path

_FLOAT_MAX = sys.float_info.max
_U64_MAX = 2**64 - 1
_STATUS = re.compile(r"\+?[0-9]+")
_FLOAT = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)

DETAIL_HEADER = (
    "| 路径 | 总请求 | 2xx | 3xx | 4xx | 5xx | 平均耗时 | 最大耗时 | 最小耗时 "
    "| p90耗时 | p95耗时 | p99耗时 |\n"
)
DETAIL_ALIGN = "|:---|---:|---:|---:|---:|---:|---:|---:|---:|---:|---:|---:|\n"
_PATH_LIMIT = 48
_PATH_KEEP = 45


class Histogram:
    """High dynamic range histogram of non-negative integer values."""

    def __init__(self, lowest: int, highest: int, significant_figures: int) -> None:
        if lowest < 1:
            raise ValueError("lowest trackable value must be at least 1")
        if not 0 <= significant_figures <= 5:
            raise ValueError("significant figures must be between 0 and 5")
        if highest < 2 * lowest:
            raise ValueError("highest trackable value must be at least twice the lowest")
        largest_single_unit = 2 * 10**significant_figures
        self._unit_magnitude = lowest.bit_length() - 1
        count_magnitude = (largest_single_unit - 1).bit_length()
        self._half_magnitude = max(count_magnitude, 1) - 1
        self._sub_bucket_count = 1 << (self._half_magnitude + 1)
        self._half_count = self._sub_bucket_count // 2
        self._sub_bucket_mask = (self._sub_bucket_count - 1) << self._unit_magnitude

        smallest_untrackable = self._sub_bucket_count << self._unit_magnitude
        bucket_count = 1
        while smallest_untrackable <= highest:
            if smallest_untrackable > _U64_MAX // 2:
                bucket_count += 1
                break
            smallest_untrackable <<= 1
            bucket_count += 1
        self._counts = [0] * ((bucket_count + 1) * self._half_count)
        self.total_count = 0

    def _bucket_of(self, value: int) -> tuple[int, int]:
        bucket = (
            (value | self._sub_bucket_mask).bit_length()
            - self._unit_magnitude
            - self._half_magnitude
            - 1
        )
        return bucket, value >> (bucket + self._unit_magnitude)

    def _index_for(self, value: int) -> int:
        bucket, sub_bucket = self._bucket_of(value)
        return ((bucket + 1) << self._half_magnitude) + sub_bucket - self._half_count

    def _value_for(self, index: int) -> int:
        bucket = (index >> self._half_magnitude) - 1
        sub_bucket = (index & (self._half_count - 1)) + self._half_count
        if bucket < 0:
            sub_bucket -= self._half_count
            bucket = 0
        return sub_bucket << (bucket + self._unit_magnitude)

    def _lowest_equivalent(self, value: int) -> int:
        bucket, sub_bucket = self._bucket_of(value)
        return sub_bucket << (bucket + self._unit_magnitude)

    def _equivalent_range(self, value: int) -> int:
        bucket, sub_bucket = self._bucket_of(value)
        if sub_bucket >= self._sub_bucket_count:
            bucket += 1
        return 1 << (self._unit_magnitude + bucket)

    def _highest_equivalent(self, value: int) -> int:
        if value == _U64_MAX:
            return _U64_MAX
        return self._lowest_equivalent(value) + self._equivalent_range(value) - 1

    def record(self, value: int) -> bool:
        """Count one occurrence of ``value``; False if it is out of range."""
        if value < 0:
            return False
        index = self._index_for(value)
        if index >= len(self._counts):
            return False
        self._counts[index] += 1
        self.total_count += 1
        return True

    def value_at_quantile(self, quantile: float) -> int:
        """The value below which the given fraction of recorded values fall."""
        quantile = min(quantile, 1.0)
        wanted = max(math.ceil(quantile * self.total_count), 1)
        for index, running in enumerate(accumulate(self._counts)):
            if running >= wanted:
                value = self._value_for(index)
                if quantile == 0.0:
                    return self._lowest_equivalent(value)
                return self._highest_equivalent(value)
        return 0


def _seconds_to_ms(seconds: float) -> int:
    scaled = seconds * 1000.0
    if math.isnan(scaled) or scaled <= 0:
        return 0
    if math.isinf(scaled) or scaled >= _U64_MAX:
        return _U64_MAX
    return int(scaled)


def _parse_status(text: str) -> int:
    if not _STATUS.fullmatch(text):
        return 0
    value = int(text)
    return value if value <= 0xFFFF else 0


def _parse_float(text: str) -> float:
    if not _FLOAT.fullmatch(text):
        return 0.0
    return float(text)


@dataclass(frozen=True)
class LogEntry:
    path: str
    status: int
    rt: float


@dataclass
class PathStats:
    """Counters and response-time distribution for one request path."""

    total_requests: int = 0
    status_2xx: int = 0
    status_3xx: int = 0
    status_4xx: int = 0
    status_5xx: int = 0
    total_rt: float = 0.0
    max_rt: float = 0.0
    min_rt: float = _FLOAT_MAX
    rt_hist: Histogram = field(default_factory=lambda: Histogram(1, 120_000, 3), repr=False)

    def add_entry(self, entry: LogEntry) -> None:
        """Fold one log entry into the statistics."""
        self.total_requests += 1
        self.total_rt += entry.rt
        if entry.rt > self.max_rt:
            self.max_rt = entry.rt
        if entry.rt < self.min_rt:
            self.min_rt = entry.rt
        if 200 <= entry.status <= 299:
            self.status_2xx += 1
        elif 300 <= entry.status <= 399:
            self.status_3xx += 1
        elif 400 <= entry.status <= 499:
            self.status_4xx += 1
        elif 500 <= entry.status <= 599:
            self.status_5xx += 1
        self.rt_hist.record(_seconds_to_ms(entry.rt))

    def avg_rt(self) -> float:
        if self.total_requests > 0:
            return self.total_rt / self.total_requests
        return 0.0

    def p90(self) -> float:
        return self.rt_hist.value_at_quantile(0.90) / 1000.0

    def p95(self) -> float:
        return self.rt_hist.value_at_quantile(0.95) / 1000.0

    def p99(self) -> float:
        return self.rt_hist.value_at_quantile(0.99) / 1000.0


def _display_path(path: str) -> str:
    encoded = path.encode("utf-8")
    if len(encoded) <= _PATH_LIMIT:
        return path
    return encoded[:_PATH_KEEP].decode("utf-8", errors="ignore") + "..."


class LogAnalyzer:
    """Parses log lines with a regular expression and groups them by path.

    The pattern may define the named groups ``path``, ``status`` and ``rt``.
    """

    def __init__(self, pattern: str) -> None:
        try:
            self.pattern = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"invalid log pattern: {exc}") from exc
        self.stats: dict[str, PathStats] = {}

    @classmethod
    def from_files(cls, pattern: str, file_paths) -> LogAnalyzer:
        """Build an analyzer and load every file in ``file_paths``."""
        analyzer = cls(pattern)
        for file_path in file_paths:
            analyzer.load_file(file_path)
        return analyzer

    def load_file(self, file_path) -> None:
        """Add every line of a file; a missing file only produces a warning."""
        path = Path(file_path)
        if not path.exists():
            print(f"[warn]: the log file not exists: {file_path}", file=sys.stderr)
            return
        with path.open("rb") as handle:
            for line_num, raw in enumerate(handle, start=1):
                line = raw.decode("utf-8").removesuffix("\n").removesuffix("\r")
                self.add_line(line, line_num)

    def add_line(self, line: str, line_num: int | None = None) -> bool:
        """Record one line; return False if the pattern does not match it."""
        entry = self.parse_log_line(line)
        if entry is None:
            if line_num is not None:
                print(
                    f"[warn] the line num: {line_num} can not be parsed, line: {line}",
                    file=sys.stderr,
                )
            return False
        self.stats.setdefault(entry.path, PathStats()).add_entry(entry)
        return True

    def parse_log_line(self, line: str) -> LogEntry | None:
        """Extract path (query stripped), status and response time."""
        match = self.pattern.search(line)
        if match is None:
            return None
        groups = match.groupdict()
        url = groups.get("path")
        status = groups.get("status")
        rt = groups.get("rt")
        return LogEntry(
            path=url.split("?", 1)[0] if url is not None else "",
            status=_parse_status(status) if status is not None else 0,
            rt=_parse_float(rt) if rt is not None else 0.0,
        )

    def total_requests(self) -> int:
        return sum(stat.total_requests for stat in self.stats.values())

    def status_count(self, status_range: str) -> int:
        """Requests in the class ``"2xx"``, ``"3xx"``, ``"4xx"`` or ``"5xx"``."""
        attribute = {
            "2xx": "status_2xx",
            "3xx": "status_3xx",
            "4xx": "status_4xx",
            "5xx": "status_5xx",
        }.get(status_range)
        if attribute is None:
            return 0
        return sum(getattr(stat, attribute) for stat in self.stats.values())

    def detail_markdown_cn(self) -> str:
        """A markdown table of per-path statistics, busiest path first."""
        rows = [DETAIL_HEADER, DETAIL_ALIGN]
        ordered = sorted(self.stats.items(), key=lambda item: item[1].total_requests, reverse=True)
        for path, stat in ordered:
            min_rt = 0.0 if stat.min_rt == _FLOAT_MAX else stat.min_rt
            rows.append(
                f"| {_display_path(path)} | {stat.total_requests} | {stat.status_2xx} "
                f"| {stat.status_3xx} | {stat.status_4xx} | {stat.status_5xx} "
                f"| {stat.avg_rt():.3f} | {stat.max_rt:.3f} | {min_rt:.3f} "
                f"| {stat.p90():.3f} | {stat.p95():.3f} | {stat.p99():.3f} |\n"
            )
        return "".join(rows)

    def summary_markdown_cn(self) -> str:
        """A markdown list of total requests and the share of each status class."""
        total = self.total_requests()
        lines = [f"- 总请求数: {total}\n"]
        if total > 0:
            for status_range in ("2xx", "3xx", "4xx", "5xx"):
                count = self.status_count(status_range)
                lines.append(f"- {status_range} 状态码: {count} ({count / total * 100.0:.1f}%)\n")
        return "".join(lines)