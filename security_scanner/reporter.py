"""Render scan results into Markdown, HTML and JSON report files."""

from __future__ import annotations

import json
import logging
from html import escape
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .config import REPORT_FORMATS, ReporterConfig
from .result import Finding, ScanResult

logger = logging.getLogger(__name__)

REPORT_FILENAMES = {
    "markdown": "security-report.md",
    "html": "security-report.html",
    "json": "security-report.json",
}

HTML_STYLE = """
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           background: #f5f5f5; padding: 20px; line-height: 1.6; }
    .container { max-width: 1200px; margin: 0 auto; background: white;
                 border-radius: 8px; box-shadow: 0 2px 8px rgba(0,0,0,0.1); }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
              color: white; padding: 30px; border-radius: 8px 8px 0 0; }
    .summary { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
               gap: 20px; padding: 30px; background: #f9fafb; }
    .stat-card { background: white; padding: 20px; border-radius: 8px; }
    .stat-card .number { font-size: 2.5em; font-weight: bold; }
    .critical { color: #dc2626; } .high { color: #ea580c; }
    .medium { color: #ca8a04; } .low { color: #2563eb; } .info { color: #6b7280; }
    .findings { padding: 30px; }
    .finding { background: #f9fafb; border-left: 4px solid #ddd;
               padding: 20px; margin-bottom: 20px; border-radius: 4px; }
    .finding.critical { border-left-color: #dc2626; } .finding.high { border-left-color: #ea580c; }
    .finding.medium { border-left-color: #ca8a04; } .finding.low { border-left-color: #2563eb; }
    .finding-meta { display: flex; flex-wrap: wrap; gap: 15px; margin: 10px 0; font-size: 0.9em; }
    .meta-label { font-weight: 600; color: #6b7280; }
    .code-block { background: #1f2937; color: #e5e7eb; padding: 15px;
                  border-radius: 4px; overflow-x: auto; margin-top: 15px; }
    .code-block pre { margin: 0; font-family: 'Monaco', 'Courier New', monospace; font-size: 0.85em; }
    .highlight { background: #374151; }
    .recommendation { background: #dbeafe; border-left: 3px solid #3b82f6;
                      padding: 15px; margin-top: 15px; border-radius: 4px; }
    .no-issues { text-align: center; padding: 60px 20px; color: #059669; }
"""


class Reporter:
    """Write report artifacts for a :class:`ScanResult`.

    Report content depends only on the result, so rendering the same result
    twice produces identical files.
    """

    def __init__(self, config: Optional[ReporterConfig] = None) -> None:
        self.config = config or ReporterConfig()
        self._renderers: Dict[str, Callable[[ScanResult], str]] = {
            "markdown": render_markdown,
            "html": render_html,
            "json": render_json,
        }

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    def render(self, result: ScanResult, formats: Optional[Iterable[str]] = None) -> Dict[str, Path]:
        """Write one file per format and return ``{format: path}``."""

        selected = [item.lower() for item in (formats if formats is not None else self.config.formats)]
        unknown = [item for item in selected if item not in self._renderers]
        if unknown:
            raise ValueError(
                f"Unknown report format(s): {', '.join(unknown)} (expected: {', '.join(REPORT_FORMATS)})"
            )

        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: Dict[str, Path] = {}
        for report_format in selected:
            if report_format in written:
                continue
            path = self.output_dir / REPORT_FILENAMES[report_format]
            path.write_text(self._renderers[report_format](result), encoding="utf-8")
            logger.info("Wrote %s report to %s", report_format, path)
            written[report_format] = path
        return written


def render_json(result: ScanResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False) + "\n"


def render_markdown(result: ScanResult) -> str:
    lines: List[str] = ["# Security Audit Report", "", f"## Scan - {result.scanned_at}", ""]
    lines.append(f"- **Scanned**: {result.root_dir}")
    lines.append(f"- **Rules loaded**: {result.rules_loaded}")
    lines.append(f"- **Files scanned**: {result.files_scanned}")
    lines.append("")

    if not result.findings:
        lines.append("✅ No security issues found.")
        lines.append("")
        return "\n".join(lines)

    lines.append(f"Found {len(result.findings)} potential security issues:")
    lines.append("")
    for index, finding in enumerate(result.findings, start=1):
        lines.extend(_markdown_finding(index, finding))
    return "\n".join(lines)


def _markdown_finding(index: int, finding: Finding) -> List[str]:
    lines = [f"### {index}. {finding.rule_name}"]
    lines.append(f"- **Severity**: {finding.severity.marker} {finding.severity.value}")
    lines.append(f"- **Rule ID**: {finding.rule_id}")
    for key, label in (("ciaImpact", "CIA Impact"), ("owasp", "OWASP"), ("cwe", "CWE")):
        value = finding.metadata.get(key)
        if value:
            lines.append(f"- **{label}**: {value}")
    lines.append(f"- **Location**: {finding.file}")
    if finding.matched_lines:
        lines.append(f"- **Lines**: {', '.join(str(number) for number in finding.matched_lines)}")
    lines.append(f"- **Description**: {finding.description}")
    lines.append(f"- **Recommendation**: {finding.recommendation}")
    lines.append(f"- **Status**: 🆕 {finding.status.capitalize()}")
    lines.append("")
    if finding.lines:
        lines.append("**Code Evidence:**")
        lines.append("```")
        for line in finding.lines:
            marker = "→ " if line.is_match else "  "
            lines.append(f"{marker}Line {line.line}: {line.content}")
        lines.append("```")
        lines.append("")
    return lines


def render_html(result: ScanResult) -> str:
    cards = [_stat_card("Total Issues", result.summary.total, "")]
    for severity, count in result.summary.by_severity.items():
        cards.append(_stat_card(severity.capitalize(), count, severity))

    if result.findings:
        body = "\n".join(_html_finding(index, finding) for index, finding in enumerate(result.findings, start=1))
    else:
        body = (
            '<div class="no-issues">\n'
            "  <h2>No Security Issues Found!</h2>\n"
            "  <p>Your codebase passed all security checks.</p>\n"
            "</div>"
        )

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        "  <title>Security Audit Report</title>\n"
        f"  <style>{HTML_STYLE}  </style>\n"
        "</head>\n"
        "<body>\n"
        '<div class="container">\n'
        '  <div class="header">\n'
        "    <h1>🔒 Security Audit Report</h1>\n"
        f"    <p>Generated: {escape(result.scanned_at)}</p>\n"
        f"    <p>Scanned: {escape(result.root_dir)}</p>\n"
        "  </div>\n"
        f'  <div class="summary">\n{"".join(cards)}  </div>\n'
        f'  <div class="findings">\n{body}\n  </div>\n'
        "</div>\n"
        "</body>\n"
        "</html>\n"
    )


def _stat_card(title: str, count: int, css_class: str) -> str:
    return (
        '    <div class="stat-card">\n'
        f"      <h3>{escape(title)}</h3>\n"
        f'      <div class="number {css_class}">{count}</div>\n'
        "    </div>\n"
    )


def _html_finding(index: int, finding: Finding) -> str:
    severity = finding.severity
    meta = [
        _meta_item("Severity", f'<span class="{severity.value}">{severity.marker} {severity.value.upper()}</span>'),
        _meta_item("Rule", escape(finding.rule_id)),
        _meta_item("File", escape(finding.file)),
    ]
    cia = finding.metadata.get("ciaImpact")
    if cia:
        meta.append(_meta_item("CIA Impact", escape(str(cia))))

    evidence = ""
    if finding.lines:
        rows = "".join(_evidence_row(line.line, line.content, line.is_match) for line in finding.lines)
        evidence = f'\n    <div class="code-block"><pre>{rows}</pre></div>'

    return (
        f'    <div class="finding {severity.value}">\n'
        f"    <h3>{index}. {escape(finding.rule_name)}</h3>\n"
        f'    <div class="finding-meta">{"".join(meta)}</div>\n'
        f"    <p><strong>Description:</strong> {escape(finding.description)}</p>"
        f"{evidence}\n"
        f'    <div class="recommendation"><strong>💡 Recommendation:</strong> {escape(finding.recommendation)}</div>\n'
        "    </div>"
    )


def _meta_item(label: str, value_html: str) -> str:
    return f'<span class="meta-item"><span class="meta-label">{label}:</span> {value_html}</span>'


def _evidence_row(number: int, content: str, is_match: bool) -> str:
    css = ' class="highlight"' if is_match else ""
    return f"<div{css}>Line {number}: {escape(content)}</div>"
