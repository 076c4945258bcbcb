"""Rule abstraction shared by built-in and user supplied rules.

A rule answers two questions about a file: does it apply (``applies_to``) and
where does it match (``detect``).  The default implementation is driven by a
regular expression; subclasses override either method with custom logic.
Rules are built once at load time and shared read-only between scans and
worker threads, so ``detect`` must not keep state between calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Union

from security_scanner.errors import RuleDefinitionError
from security_scanner.severity import Severity

TextSource = Union[str, Callable[["Match"], str]]
PatternSource = Union[str, Pattern[str]]

RULE_OPTIONS = (
    "id",
    "name",
    "severity",
    "description",
    "recommendation",
    "pattern",
    "file_pattern",
    "ignore_case",
    "category",
    "cwe",
    "owasp",
    "metadata",
)
REQUIRED_DEFINITION_KEYS = ("id", "name", "severity", "pattern")
OPTION_ALIASES = {
    "filePattern": "file_pattern",
    "ignoreCase": "ignore_case",
}


@dataclass(frozen=True)
class Match:
    """A raw occurrence reported by ``Rule.detect``."""

    line: Optional[int]
    matched_text: str
    index: int
    groups: Mapping[str, str] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)


def normalize_options(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Map camelCase definition keys onto constructor keywords.

    Keys that are not rule options (``tags``, ``enabled``, ...) are kept as
    metadata; an explicit ``metadata`` mapping wins over them.
    """

    normalized: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in options.items():
        key = OPTION_ALIASES.get(key, key)
        if key in RULE_OPTIONS:
            normalized[key] = value
        else:
            extra[key] = value
    if extra:
        metadata = normalized.get("metadata") or {}
        if isinstance(metadata, Mapping):
            normalized["metadata"] = {**extra, **metadata}
    return normalized


class Rule:
    """Pattern-driven rule; subclass to customise detection or applicability."""

    id: Optional[str] = None
    name: Optional[str] = None
    severity: Union[Severity, str] = Severity.MEDIUM
    description: TextSource = ""
    recommendation: TextSource = ""
    pattern: Optional[PatternSource] = None
    file_pattern: Optional[str] = None
    ignore_case: bool = True
    category: str = "security"
    cwe: str = ""
    owasp: str = ""
    metadata: Mapping[str, Any] = {}

    def __init__(self, **options: Any) -> None:
        options = normalize_options(options)
        cls = type(self)

        self.id = str(options.get("id") or cls.id or cls.__name__)
        self.name = str(options.get("name") or cls.name or cls.__name__)
        try:
            self.severity = Severity.parse(options.get("severity") or cls.severity)
        except ValueError as exc:
            raise RuleDefinitionError(f"Rule {self.id}: {exc}") from exc
        self.description = options.get("description", cls.description) or ""
        self.recommendation = options.get("recommendation", cls.recommendation) or ""
        self.ignore_case = bool(options.get("ignore_case", cls.ignore_case))

        merged: Dict[str, Any] = {"category": cls.category, "cwe": cls.cwe, "owasp": cls.owasp}
        merged.update(cls.metadata)
        for key in ("category", "cwe", "owasp"):
            if key in options:
                merged[key] = options[key]
        extra = options.get("metadata") or {}
        if not isinstance(extra, Mapping):
            raise RuleDefinitionError(f"Rule {self.id}: metadata must be a mapping")
        merged.update(extra)
        self.metadata = MappingProxyType(merged)

        self.pattern = options.get("pattern", cls.pattern)
        self.regex = self._compile_pattern(self.pattern)
        self.file_pattern = options.get("file_pattern", cls.file_pattern)
        self.file_regex = self._compile_file_pattern(self.file_pattern)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, severity={self.severity.value!r})"

    @classmethod
    def create(cls, definition: Mapping[str, Any]) -> "Rule":
        """Build a pattern-driven rule from a plain definition mapping."""

        if not isinstance(definition, Mapping):
            raise RuleDefinitionError(
                f"Rule definition must be a mapping, got {type(definition).__name__}"
            )
        options = normalize_options(definition)
        missing = [key for key in REQUIRED_DEFINITION_KEYS if not options.get(key)]
        if missing:
            label = options.get("id") or "<unnamed>"
            raise RuleDefinitionError(f"Rule {label} is missing keys: {', '.join(missing)}")
        return cls(**options)

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------
    def detect(self, content: str, file_path: str) -> List[Match]:
        """Return every non-overlapping pattern occurrence in offset order."""

        if self.regex is None:
            return []
        matches: List[Match] = []
        for found in self.regex.finditer(content):
            start, end = found.span()
            if start == end:
                continue
            matches.append(
                Match(
                    line=line_number_at(content, start),
                    matched_text=found.group(0),
                    index=start,
                    groups={key: value for key, value in found.groupdict().items() if value is not None},
                )
            )
        return matches

    def applies_to(self, file_path: str) -> bool:
        if self.file_regex is None:
            return True
        return self.file_regex.search(file_path) is not None

    # ------------------------------------------------------------------
    # Text helpers
    # ------------------------------------------------------------------
    def get_description(self, match: Match) -> str:
        return _resolve_text(self.description, match)

    def get_recommendation(self, match: Match) -> str:
        return _resolve_text(self.recommendation, match)

    def _compile_pattern(self, pattern: Optional[PatternSource]) -> Optional[Pattern[str]]:
        if pattern is None or pattern == "":
            return None
        if isinstance(pattern, re.Pattern):
            return pattern
        flags = re.IGNORECASE if self.ignore_case else 0
        try:
            return re.compile(str(pattern), flags)
        except re.error as exc:
            raise RuleDefinitionError(f"Rule {self.id}: invalid pattern {pattern!r}: {exc}") from exc

    def _compile_file_pattern(self, file_pattern: Optional[str]) -> Optional[Pattern[str]]:
        if not file_pattern:
            return None
        try:
            return re.compile(file_pattern)
        except re.error as exc:
            raise RuleDefinitionError(
                f"Rule {self.id}: invalid file pattern {file_pattern!r}: {exc}"
            ) from exc


def line_number_at(content: str, index: int) -> int:
    """Return the 1-based line containing character offset ``index``."""

    return content.count("\n", 0, index) + 1


def _resolve_text(source: TextSource, match: Match) -> str:
    if callable(source):
        return str(source(match))
    return source
