"""Scanning engine: file discovery, rule evaluation and finding assembly."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import ScannerConfig
from .errors import ConfigError, ScannerStateError
from .result import Finding, FindingLine, ScanError, ScanResult, summarize
from .rules import Match, Rule, load_rules
from .utils import find_files, read_text_file

logger = logging.getLogger(__name__)


class ScannerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    SCANNING = "scanning"
    DONE = "done"


@dataclass
class FileOutcome:
    """Findings and errors produced for one file."""

    path: str
    findings: List[Finding] = field(default_factory=list)
    errors: List[ScanError] = field(default_factory=list)
    scanned: bool = False


class SecurityScanner:
    """Apply a rule set to every file selected by the include/exclude globs.

    Lifecycle: ``init()`` loads rules, then ``scan()`` may be called any
    number of times, one at a time.  Findings are ordered by file (resolved
    order), then rule (load order), then match (detect order), whether the
    files are processed sequentially or on a thread pool.
    """

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        rules: Optional[Sequence[Rule]] = None,
    ) -> None:
        self.config = config or ScannerConfig()
        self.root_dir = Path(self.config.root_dir)
        self.rules: List[Rule] = []
        self.state = ScannerState.UNINITIALIZED
        self._preset_rules = list(rules) if rules is not None else None

    def init(self) -> "SecurityScanner":
        if self.state is ScannerState.SCANNING:
            raise ScannerStateError("Cannot re-initialize while a scan is running")
        self.root_dir = self._check_root()
        if self._preset_rules is not None:
            self.rules = list(self._preset_rules)
        else:
            self.rules = load_rules(self.config.resolved_rules_dir)
        logger.info("Loaded %d security rules", len(self.rules))
        self.state = ScannerState.READY
        return self

    def find_files(self) -> List[str]:
        """Return scan-root-relative POSIX paths selected by the config globs."""

        return find_files(self.root_dir, self.config.include, self.config.exclude)

    def scan(self, files: Optional[Iterable[Union[str, Path]]] = None) -> ScanResult:
        """Scan ``files`` (default: the discovered file list) and return the result."""

        if self.state is ScannerState.SCANNING:
            raise ScannerStateError("A scan is already running on this scanner")
        if self.state is ScannerState.UNINITIALIZED:
            raise ScannerStateError("Call init() before scan()")

        self._check_root()
        self.state = ScannerState.SCANNING
        try:
            if files is None:
                targets = self.find_files()
            else:
                targets = [self._relative_path(item) for item in files]
            logger.info("Scanning %d files...", len(targets))
            outcomes = self._scan_files(targets)
        finally:
            self.state = ScannerState.DONE

        result = ScanResult(
            root_dir=str(self.root_dir),
            rules_loaded=len(self.rules),
            scanned_at="",
        )
        for outcome in outcomes:
            result.findings.extend(outcome.findings)
            result.errors.extend(outcome.errors)
            if outcome.scanned:
                result.files_scanned += 1
        result.summary = summarize(result.findings)
        result.scanned_at = datetime.now(timezone.utc).isoformat()
        logger.info(
            "Scan complete: %d findings in %d files (%d errors)",
            result.summary.total,
            result.files_scanned,
            len(result.errors),
        )
        return result

    # ------------------------------------------------------------------
    # Per-file work
    # ------------------------------------------------------------------
    def _scan_files(self, targets: List[str]) -> List[FileOutcome]:
        workers = self.config.workers
        if workers > 1 and len(targets) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                return list(pool.map(self.scan_file, targets))
        return [self.scan_file(target) for target in targets]

    def scan_file(self, relative_path: str) -> FileOutcome:
        """Evaluate every applicable rule against one file."""

        outcome = FileOutcome(path=relative_path)
        path = self.root_dir / relative_path
        try:
            size = path.stat().st_size
            if size > self.config.max_file_size:
                logger.debug("Skipping %s (%d bytes > %d limit)", relative_path, size, self.config.max_file_size)
                return outcome
            content = read_text_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error scanning file %s: %s", relative_path, exc)
            outcome.errors.append(ScanError(path=relative_path, stage="read", message=str(exc)))
            return outcome

        outcome.scanned = True
        lines = content.split("\n")
        for rule in self.rules:
            try:
                if not rule.applies_to(relative_path):
                    continue
                matches = rule.detect(content, relative_path) or []
                findings = [self._build_finding(rule, match, relative_path, lines) for match in matches]
            except Exception as exc:
                logger.error("Rule %s failed on %s: %s", rule.id, relative_path, exc)
                outcome.errors.append(
                    ScanError(path=relative_path, stage="detect", message=str(exc), rule_id=rule.id)
                )
                continue
            outcome.findings.extend(findings)
        logger.debug("Scanned %s: %d findings", relative_path, len(outcome.findings))
        return outcome

    def _build_finding(self, rule: Rule, match: Match, relative_path: str, lines: List[str]) -> Finding:
        metadata = dict(rule.metadata)
        metadata.update(match.metadata or {})
        return Finding(
            rule_id=rule.id,
            rule_name=rule.name,
            severity=rule.severity,
            description=rule.get_description(match),
            recommendation=rule.get_recommendation(match),
            file=relative_path,
            lines=context_window(lines, match.line, self.config.context_lines),
            metadata=metadata,
        )

    def _check_root(self) -> Path:
        root = Path(self.config.root_dir)
        if not root.is_dir():
            raise ConfigError(f"Root directory does not exist: {root}")
        return root.resolve()

    def _relative_path(self, item: Union[str, Path]) -> str:
        path = Path(item)
        if not path.is_absolute():
            return path.as_posix()
        return Path(os.path.relpath(path, self.root_dir)).as_posix()


def context_window(lines: List[str], line_number: Optional[int], radius: int = 2) -> Tuple[FindingLine, ...]:
    """Return the lines around ``line_number`` (1-based), clipped to the file."""

    if not line_number or line_number < 1:
        return ()
    index = line_number - 1
    start = max(0, index - radius)
    end = min(len(lines) - 1, index + radius)
    return tuple(
        FindingLine(line=position + 1, content=lines[position], is_match=position == index)
        for position in range(start, end + 1)
    )
