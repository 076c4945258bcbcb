"""Core result data structures for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .severity import SEVERITY_ORDER, Severity

FINDING_STATUS_NEW = "new"


@dataclass(frozen=True)
class FindingLine:
    """One source line of a finding's context window."""

    line: int
    content: str
    is_match: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"line": self.line, "content": self.content, "isMatch": self.is_match}


@dataclass(frozen=True)
class Finding:
    """Capture a single rule match, normalized for reporting."""

    rule_id: str
    rule_name: str
    severity: Severity
    description: str
    recommendation: str
    file: str
    lines: Tuple[FindingLine, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)
    status: str = FINDING_STATUS_NEW

    @property
    def matched_lines(self) -> List[int]:
        return [line.line for line in self.lines if line.is_match]

    @property
    def rule_key(self) -> str:
        return f"{self.rule_id} - {self.rule_name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "severity": self.severity.value,
            "description": self.description,
            "recommendation": self.recommendation,
            "file": self.file,
            "lines": [line.to_dict() for line in self.lines],
            "metadata": dict(self.metadata),
            "status": self.status,
        }


@dataclass(frozen=True)
class ScanError:
    """A non-fatal problem recorded while scanning a file."""

    path: str
    stage: str
    message: str
    rule_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path, "stage": self.stage, "message": self.message}
        if self.rule_id is not None:
            data["ruleId"] = self.rule_id
        return data


@dataclass
class Summary:
    """Aggregate finding counts by severity and by rule."""

    total: int = 0
    by_severity: Dict[str, int] = field(default_factory=dict)
    by_rule: Dict[str, int] = field(default_factory=dict)

    def count(self, severity: Severity) -> int:
        return self.by_severity.get(severity.value, 0)

    def as_rows(self) -> List[Tuple[str, int]]:
        """Return severity/count pairs ordered for reporting."""

        return [(severity.value, self.count(severity)) for severity in SEVERITY_ORDER]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "bySeverity": dict(self.by_severity),
            "byRule": dict(self.by_rule),
        }


def summarize(findings: Iterable[Finding]) -> Summary:
    """Count findings by severity and by ``"<ruleId> - <ruleName>"``."""

    summary = Summary()
    for finding in findings:
        summary.total += 1
        severity = finding.severity.value
        summary.by_severity[severity] = summary.by_severity.get(severity, 0) + 1
        summary.by_rule[finding.rule_key] = summary.by_rule.get(finding.rule_key, 0) + 1
    return summary


@dataclass
class ScanResult:
    """Bundle scan summary, findings list and a snapshot of the scan config."""

    root_dir: str
    rules_loaded: int
    scanned_at: str
    findings: List[Finding] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)
    files_scanned: int = 0
    errors: List[ScanError] = field(default_factory=list)
    reports: Dict[str, Path] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return self.summary.total == 0

    def findings_at_or_above(self, threshold: Severity) -> List[Finding]:
        return [finding for finding in self.findings if finding.severity.rank >= threshold.rank]

    def exit_code(self, fail_on: Severity = Severity.INFO) -> int:
        """Return 1 when any finding reaches ``fail_on``, else 0."""

        return 1 if self.findings_at_or_above(fail_on) else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "findings": [finding.to_dict() for finding in self.findings],
            "summary": self.summary.to_dict(),
            "scannedAt": self.scanned_at,
            "config": {
                "rootDir": self.root_dir,
                "rulesLoaded": self.rules_loaded,
            },
            "filesScanned": self.files_scanned,
            "errors": [error.to_dict() for error in self.errors],
        }

    def top_findings(self, limit: int = 5) -> List[Finding]:
        """Return findings ordered by severity ranking."""

        ordered = sorted(
            self.findings,
            key=lambda finding: (-finding.severity.rank, finding.rule_id, finding.file),
        )
        return ordered[:limit]


def format_summary_table(result: ScanResult, max_findings: int = 5) -> str:
    """Create a human-readable summary table for console output."""

    lines: List[str] = []
    lines.append("Scan Summary")
    lines.append("=" * 40)
    header = f"{'Severity':<10} | {'Count':>5}"
    lines.append(header)
    lines.append("-" * len(header))
    for severity, count in result.summary.as_rows():
        lines.append(f"{severity:<10} | {count:>5}")
    lines.append("-" * len(header))
    status = "PASS" if result.passed else "FAIL"
    lines.append(f"Status    : {status}")
    lines.append(f"Findings  : {result.summary.total}")
    lines.append(f"Files     : {result.files_scanned}")
    lines.append(f"Rules     : {result.rules_loaded}")
    if result.errors:
        lines.append(f"Errors    : {len(result.errors)}")

    findings = result.top_findings(max_findings)
    if findings:
        lines.append("")
        lines.append("Top Findings")
        lines.append("-" * 40)
        for finding in findings:
            location = finding.file
            if finding.matched_lines:
                location = f"{finding.file}:{finding.matched_lines[0]}"
            lines.append(f"[{finding.severity.value.upper()}] {finding.rule_id} {finding.rule_name}")
            lines.append(f"  Location: {location}")
    return "\n".join(lines)
