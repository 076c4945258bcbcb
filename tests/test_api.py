import io
import logging

import security_scanner
from security_scanner import ReporterConfig, create_reporter, create_scanner, scan
from security_scanner.log import LOGGER_NAME, configure_logging
from security_scanner.scanner import ScannerState


def test_create_scanner_applies_keyword_overrides(make_tree):
    root = make_tree({"src/a.ts": "Math.random()\n", "src/b.js": "Math.random()\n"})

    scanner = create_scanner(root_dir=root, include=["**/*.ts"])

    assert scanner.state is ScannerState.READY
    assert scanner.find_files() == ["src/a.ts"]


def test_scan_without_reports(make_tree, tmp_path):
    root = make_tree({"src/a.js": "const id = Math.random();\n"})

    result = scan(root, reporter=False)

    assert [finding.rule_id for finding in result.findings] == ["RULE-80-RANDOM"]
    assert result.reports == {}


def test_scan_with_reporter_config_records_paths(make_tree, tmp_path):
    root = make_tree({"src/a.js": "const id = Math.random();\n"})
    out_dir = tmp_path / "audit"

    result = scan(root, reporter=ReporterConfig(output_dir=out_dir, formats=("markdown",)))

    assert result.reports == {"markdown": out_dir / "security-report.md"}
    assert "RULE-80-RANDOM" in result.reports["markdown"].read_text(encoding="utf-8")


def test_create_reporter_overrides(tmp_path):
    reporter = create_reporter(output_dir=tmp_path, formats=["json"])

    assert reporter.output_dir == tmp_path
    assert reporter.config.formats == ("json",)


def test_configure_logging_replaces_its_handler():
    stream = io.StringIO()
    configure_logging(level="debug", stream=stream)
    logger = configure_logging(level="warn", stream=stream)

    flagged = [handler for handler in logger.handlers if getattr(handler, "_security_scanner_handler", False)]
    assert len(flagged) == 1
    assert logger.level == logging.WARNING

    logging.getLogger(f"{LOGGER_NAME}.scanner").warning("watch out")
    logging.getLogger(f"{LOGGER_NAME}.scanner").info("hidden")
    assert "[WARNING] watch out" in stream.getvalue()
    assert "hidden" not in stream.getvalue()


def test_version_is_exposed():
    assert isinstance(security_scanner.__version__, str)
