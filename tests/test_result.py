import pytest

from security_scanner.result import (
    Finding,
    FindingLine,
    ScanError,
    ScanResult,
    format_summary_table,
    summarize,
)
from security_scanner.severity import Severity


def _finding(rule_id="R1", severity=Severity.HIGH, file="src/app.js", line=3):
    return Finding(
        rule_id=rule_id,
        rule_name=f"Rule {rule_id}",
        severity=severity,
        description="desc",
        recommendation="fix it",
        file=file,
        lines=(
            FindingLine(line=line - 1, content="before", is_match=False),
            FindingLine(line=line, content="match", is_match=True),
        ),
    )


def _result(findings):
    result = ScanResult(root_dir="/repo", rules_loaded=4, scanned_at="2024-01-01T00:00:00+00:00")
    result.findings = list(findings)
    result.summary = summarize(result.findings)
    result.files_scanned = 2
    return result


def test_summarize_counts_by_severity_and_rule_key():
    findings = [
        _finding("R1", Severity.CRITICAL),
        _finding("R1", Severity.CRITICAL, line=9),
        _finding("R2", Severity.LOW),
    ]

    summary = summarize(findings)

    assert summary.total == 3
    assert summary.by_severity == {"critical": 2, "low": 1}
    assert summary.by_rule == {"R1 - Rule R1": 2, "R2 - Rule R2": 1}
    assert summary.as_rows() == [("critical", 2), ("high", 0), ("medium", 0), ("low", 1), ("info", 0)]


def test_summarize_empty():
    summary = summarize([])

    assert summary.total == 0
    assert summary.by_severity == {}
    assert summary.by_rule == {}


@pytest.mark.parametrize(
    "fail_on, expected",
    [
        (Severity.INFO, 1),
        (Severity.MEDIUM, 1),
        (Severity.HIGH, 0),
        (Severity.CRITICAL, 0),
    ],
)
def test_exit_code_respects_threshold(fail_on, expected):
    result = _result([_finding(severity=Severity.MEDIUM), _finding(severity=Severity.LOW)])

    assert result.exit_code(fail_on) == expected


def test_clean_result_passes():
    result = _result([])

    assert result.passed
    assert result.exit_code() == 0


def test_to_dict_uses_report_keys():
    result = _result([_finding()])
    result.errors.append(ScanError(path="bad.js", stage="read", message="boom"))

    data = result.to_dict()

    assert set(data) == {"findings", "summary", "scannedAt", "config", "filesScanned", "errors"}
    assert data["config"] == {"rootDir": "/repo", "rulesLoaded": 4}
    assert data["summary"] == {"total": 1, "bySeverity": {"high": 1}, "byRule": {"R1 - Rule R1": 1}}
    finding = data["findings"][0]
    assert finding["ruleId"] == "R1"
    assert finding["severity"] == "high"
    assert finding["status"] == "new"
    assert finding["lines"][1] == {"line": 3, "content": "match", "isMatch": True}
    assert data["errors"] == [{"path": "bad.js", "stage": "read", "message": "boom"}]


def test_summary_table_lists_top_findings_by_severity():
    result = _result([_finding("LOW-1", Severity.LOW), _finding("CRIT-1", Severity.CRITICAL, line=7)])

    table = format_summary_table(result)

    assert "Scan Summary" in table
    assert "Status    : FAIL" in table
    assert "critical   |     1" in table
    top = table.split("Top Findings", 1)[1]
    assert top.index("[CRITICAL] CRIT-1") < top.index("[LOW] LOW-1")
    assert "Location: src/app.js:7" in top


def test_summary_table_for_clean_scan():
    table = format_summary_table(_result([]))

    assert "Status    : PASS" in table
    assert "Top Findings" not in table
