import json

import pytest

from security_scanner.config import ReporterConfig
from security_scanner.reporter import REPORT_FILENAMES, Reporter, render_html, render_markdown
from security_scanner.result import Finding, FindingLine, ScanResult, summarize
from security_scanner.severity import Severity


def _result(findings=()):
    result = ScanResult(root_dir="/repo", rules_loaded=12, scanned_at="2024-05-01T10:00:00+00:00")
    result.findings = list(findings)
    result.summary = summarize(result.findings)
    result.files_scanned = 1
    return result


def _xss_finding():
    return Finding(
        rule_id="RULE-80-XSS",
        rule_name="XSS Vulnerability",
        severity=Severity.CRITICAL,
        description="Potential XSS vulnerability. Use proper output encoding.",
        recommendation="Sanitize <all> inputs",
        file="src/App.jsx",
        lines=(
            FindingLine(line=1, content="const x = 1;", is_match=False),
            FindingLine(line=2, content='el.innerHTML = "<b>hi</b>";', is_match=True),
        ),
        metadata={"ciaImpact": "Integrity, Confidentiality", "cwe": "CWE-79: Cross-site Scripting (XSS)"},
    )


def test_render_writes_every_requested_format(tmp_path):
    reporter = Reporter(ReporterConfig(output_dir=tmp_path / "out", formats=("markdown", "html", "json")))

    written = reporter.render(_result([_xss_finding()]))

    assert list(written) == ["markdown", "html", "json"]
    for report_format, path in written.items():
        assert path == tmp_path / "out" / REPORT_FILENAMES[report_format]
        assert path.is_file()
    data = json.loads(written["json"].read_text(encoding="utf-8"))
    assert data["summary"]["total"] == 1
    assert data["findings"][0]["ruleId"] == "RULE-80-XSS"


def test_render_is_idempotent_and_leaves_result_untouched(tmp_path):
    result = _result([_xss_finding()])
    before = result.to_dict()
    reporter = Reporter(ReporterConfig(output_dir=tmp_path, formats=("markdown", "json")))

    first = {fmt: path.read_text(encoding="utf-8") for fmt, path in reporter.render(result).items()}
    second = {fmt: path.read_text(encoding="utf-8") for fmt, path in reporter.render(result).items()}

    assert first == second
    assert result.to_dict() == before


def test_markdown_marks_matched_line_and_metadata():
    text = render_markdown(_result([_xss_finding()]))

    assert "### 1. XSS Vulnerability" in text
    assert "- **CIA Impact**: Integrity, Confidentiality" in text
    assert "- **Lines**: 2" in text
    assert '→ Line 2: el.innerHTML = "<b>hi</b>";' in text
    assert "  Line 1: const x = 1;" in text
    assert "🆕 New" in text


def test_html_escapes_source_and_text():
    text = render_html(_result([_xss_finding()]))

    assert "&lt;b&gt;hi&lt;/b&gt;" in text
    assert "<b>hi</b>" not in text
    assert "Sanitize &lt;all&gt; inputs" in text
    assert 'class="highlight"' in text


def test_empty_result_reports_no_issues():
    result = _result()

    assert "✅ No security issues found." in render_markdown(result)
    assert "No Security Issues Found!" in render_html(result)


def test_unknown_format_is_rejected(tmp_path):
    reporter = Reporter(ReporterConfig(output_dir=tmp_path))

    with pytest.raises(ValueError):
        reporter.render(_result(), formats=["pdf"])
    assert list(tmp_path.iterdir()) == []
