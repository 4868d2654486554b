# nginxlogstats

Reads nginx access logs and builds a per-path report: request counts, status
classes (2xx–5xx), average/max/min response time and p90/p95/p99 latency. The
report is rendered as Markdown and sent by e-mail as plain text plus styled HTML.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

```
nginxlogstats --config settings.yaml
```

`-c/--config` is required. The command:

1. loads the settings file (`.toml`, `.yaml`/`.yml` or `.json`, chosen by extension);
2. expands placeholders in each entry of `log.path_templates`;
3. parses every line of those files with `log.pattern`;
4. expands placeholders in `mail.title` and `mail.content`, where the two report
   sections are available as mapping keys (see below);
5. sends the mail and prints `Email sent successfully!`.

Missing log files and lines the pattern does not match produce a warning on
stderr and are skipped. The exit code is 0 on success and 1 when the settings
cannot be read, the pattern is invalid, a log file cannot be read or decoded as
UTF-8, or the mail cannot be built or sent.

## Configuration

```yaml
log:
  path_templates:
    - "/var/log/nginx/access_{{placeholder|:|get_time|:|%Y%m%d|:|-86400000}}.log"
  # named groups: path, status, rt (seconds)
  pattern: '"\S+ (?P<path>\S+) [^"]*" (?P<status>\d{3}) .* (?P<rt>[\d.]+)$'

mail:
  smtp:
    host: smtp.example.com
  sender: reports@example.com
  password: password
  recipients:
    - ops@example.com
  title: "nginx report {{placeholder|:|get_time|:|%Y-%m-%d}}"
  content: |
    ## Summary
    {{placeholder|:|simple_mapping|:|get_analysis_results_summary_markdown_cn}}

    ## Per path
    {{placeholder|:|simple_mapping|:|get_analysis_results_detail_markdown_cn}}

placeholder:
  site: main
```

All sections and fields shown (except the contents of `placeholder`) are
required; a missing or mistyped one raises `ConfigError`.

The pattern is a Python regular expression searched anywhere in each line. The
named groups are optional: `path` (the query string after `?` is dropped),
`status` (an integer) and `rt` (response time in seconds). A missing or
unparsable group counts as an empty path, status 0 or time 0.0.

## Placeholders

Templates may contain `{{placeholder|:|<udf>|:|<arg>...}}`:

- `simple_mapping|:|key` — the value of `key` under `placeholder` in the config,
  or an empty string. The keys `get_analysis_results_summary_markdown_cn` and
  `get_analysis_results_detail_markdown_cn` hold the generated report sections.
- `get_time|:|format|:|offset_ms` — the current time in UTC+8, shifted by
  `offset_ms` milliseconds (0 if absent or not an integer) and formatted with
  strftime codes.

An unknown UDF is left in the text (as `{placeholder|:|name|:|args`) so it is
easy to spot.

## Report details

- The per-path table is sorted by request count, busiest first; paths longer
  than 48 bytes are cut to 45 bytes plus `...`.
- Percentiles come from a histogram of millisecond values between 1 ms and
  120 000 ms with three significant figures; response times above that range
  are left out of the percentiles but still count in the other columns.
- The summary lists the total and the share of each status class, to one decimal.

## Library use

```python
from nginxlogstats.analyzer import LogAnalyzer

analyzer = LogAnalyzer.from_files(pattern, ["/var/log/nginx/access.log"])
print(analyzer.total_requests(), analyzer.status_count("5xx"))
print(analyzer.summary_markdown_cn())
print(analyzer.detail_markdown_cn())
```

Other building blocks:

- `nginxlogstats.config.Settings.from_file(path)` / `Settings.from_dict(data)`
- `nginxlogstats.placeholder.PlaceholderUtil(mapping).replace_placeholders(template)`,
  and the shared-instance functions `init_global`, `add_global_mapping`,
  `replace_placeholders` (only the first `init_global` call takes effect)
- `nginxlogstats.dateutil.format_timestamp(timestamp_ms, fmt)` and
  `format_now_with_diff(fmt, diff)`
- `nginxlogstats.mail_util.render_html(body)`, `build_message(...)`, `send_mail(...)`

## Limitations

- Mail is always sent with implicit TLS on port 465, logging in with the sender
  address; there is no setting for another port, STARTTLS or an unauthenticated relay.
- There is no option to print the report instead of mailing it; use the
  library calls above for that.
- The report labels are in Chinese only.