import pytest

from nginxlogstats.analyzer import (
    DETAIL_ALIGN,
    DETAIL_HEADER,
    Histogram,
    LogAnalyzer,
    LogEntry,
    PathStats,
)

PATTERN = r'"\S+ (?P<path>\S+) \S+" (?P<status>\d{3}) (?P<rt>[\d.]+)'


def line(path, status, rt):
    return f'10.0.0.1 - - "GET {path} HTTP/1.1" {status} {rt}'


def test_histogram_exact_for_small_values():
    hist = Histogram(1, 120_000, 3)
    for value in (5, 7):
        assert hist.record(value)
    assert hist.value_at_quantile(0.5) == 5
    assert hist.value_at_quantile(1.0) == 7


def test_histogram_empty_is_zero():
    assert Histogram(1, 120_000, 3).value_at_quantile(0.9) == 0


def test_histogram_large_value_within_precision():
    hist = Histogram(1, 120_000, 3)
    hist.record(100_000)
    value = hist.value_at_quantile(0.99)
    assert 100_000 <= value <= 100_000 * 1.001


def test_histogram_rejects_out_of_range():
    hist = Histogram(1, 120_000, 3)
    assert hist.record(10_000_000) is False
    assert hist.total_count == 0


def test_histogram_bad_bounds():
    with pytest.raises(ValueError):
        Histogram(0, 100, 3)


def test_path_stats_add_entry():
    stats = PathStats()
    stats.add_entry(LogEntry("/a", 200, 0.1))
    stats.add_entry(LogEntry("/a", 404, 0.3))
    stats.add_entry(LogEntry("/a", 999, 0.2))
    assert stats.total_requests == 3
    assert (stats.status_2xx, stats.status_3xx, stats.status_4xx, stats.status_5xx) == (1, 0, 1, 0)
    assert stats.max_rt == 0.3
    assert stats.min_rt == 0.1
    assert stats.avg_rt() == pytest.approx((0.1 + 0.3 + 0.2) / 3)
    assert stats.p99() == 0.3


def test_path_stats_empty_avg():
    assert PathStats().avg_rt() == 0.0


def test_parse_log_line_strips_query():
    analyzer = LogAnalyzer(PATTERN)
    entry = analyzer.parse_log_line(line("/api/users?id=1", 201, "0.125"))
    assert entry == LogEntry("/api/users", 201, 0.125)


def test_parse_log_line_no_match():
    assert LogAnalyzer(PATTERN).parse_log_line("garbage") is None


def test_parse_missing_groups_default():
    analyzer = LogAnalyzer(r"GET (?P<path>\S+)")
    assert analyzer.parse_log_line("GET /x") == LogEntry("/x", 0, 0.0)


def test_add_line_warns(capsys):
    analyzer = LogAnalyzer(PATTERN)
    assert analyzer.add_line("garbage", 3) is False
    assert "[warn] the line num: 3 can not be parsed, line: garbage" in capsys.readouterr().err
    assert analyzer.total_requests() == 0


def test_status_counts():
    analyzer = LogAnalyzer(PATTERN)
    for path, status in (("/a", 200), ("/b", 302), ("/a", 500), ("/c", 404)):
        assert analyzer.add_line(line(path, status, "0.1"))
    assert analyzer.total_requests() == 4
    assert [analyzer.status_count(r) for r in ("2xx", "3xx", "4xx", "5xx")] == [1, 1, 1, 1]
    assert analyzer.status_count("1xx") == 0


def test_invalid_pattern():
    with pytest.raises(ValueError):
        LogAnalyzer("(?P<path>")


def test_from_files(tmp_path, capsys):
    log = tmp_path / "access.log"
    log.write_bytes(
        (line("/a", 200, "0.1") + "\r\n" + "bad line\n" + line("/b", 500, "0.2") + "\n").encode()
    )
    missing = tmp_path / "missing.log"
    analyzer = LogAnalyzer.from_files(PATTERN, [str(log), str(missing)])
    assert sorted(analyzer.stats) == ["/a", "/b"]
    err = capsys.readouterr().err
    assert f"[warn]: the log file not exists: {missing}" in err
    assert "line num: 2" in err


def test_detail_markdown_row():
    analyzer = LogAnalyzer(PATTERN)
    analyzer.add_line(line("/a", 200, "0.25"))
    expected = DETAIL_HEADER + DETAIL_ALIGN + (
        "| /a | 1 | 1 | 0 | 0 | 0 | 0.250 | 0.250 | 0.250 | 0.250 | 0.250 | 0.250 |\n"
    )
    assert analyzer.detail_markdown_cn() == expected


def test_detail_markdown_sorted_and_truncated():
    analyzer = LogAnalyzer(PATTERN)
    long_path = "/" + "x" * 59
    analyzer.add_line(line("/few", 200, "0.1"))
    for _ in range(3):
        analyzer.add_line(line(long_path, 200, "0.1"))
    text = analyzer.detail_markdown_cn()
    assert long_path[:45] + "..." in text
    assert long_path not in text
    assert text.index(long_path[:45]) < text.index("/few")


def test_summary_empty():
    assert LogAnalyzer(PATTERN).summary_markdown_cn() == "- 总请求数: 0\n"


def test_summary_percentages():
    analyzer = LogAnalyzer(PATTERN)
    analyzer.add_line(line("/a", 200, "0.1"))
    analyzer.add_line(line("/a", 500, "0.1"))
    lines = analyzer.summary_markdown_cn().splitlines()
    assert len(lines) == 5
    assert "- 2xx 状态码: 1 (50.0%)" in lines