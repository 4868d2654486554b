"""Command line entry: analyse the configured logs and mail a report."""

from __future__ import annotations

import argparse
import sys

from .analyzer import LogAnalyzer
from .config import ConfigError, Settings
from .mail_util import MailError, send_mail
from .placeholder import add_global_mapping, init_global, replace_placeholders

DETAIL_KEY = "get_analysis_results_detail_markdown_cn"
SUMMARY_KEY = "get_analysis_results_summary_markdown_cn"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nginx-log-analyzer", description="Analyze nginx log files")
    parser.add_argument("-c", "--config", required=True)
    return parser


def main(argv=None) -> int:
    """Run the analysis described by the configuration file; return an exit code."""
    args = _parser().parse_args(argv)
    try:
        settings = Settings.from_file(args.config)
    except ConfigError as exc:
        print(f"failed to read config: {exc}", file=sys.stderr)
        return 1

    init_global(settings.placeholder)
    paths = [replace_placeholders(template) for template in settings.log.path_templates]

    try:
        analyzer = LogAnalyzer.from_files(settings.log.pattern, paths)
        add_global_mapping(DETAIL_KEY, analyzer.detail_markdown_cn())
        add_global_mapping(SUMMARY_KEY, analyzer.summary_markdown_cn())
        content = replace_placeholders(settings.mail.content)
        title = replace_placeholders(settings.mail.title)
        mail = settings.mail
        send_mail(mail.smtp.host, mail.sender, mail.password, mail.recipients, title, content)
    except (OSError, ValueError, MailError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())