"""Pattern-based security scanner package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Optional, Union

from .config import ReporterConfig, ScannerConfig
from .errors import ConfigError, RuleDefinitionError, ScannerStateError, SecurityScannerError
from .reporter import Reporter
from .result import Finding, ScanResult
from .rules import Match, Rule, load_rules, register_rule
from .scanner import SecurityScanner
from .severity import Severity

try:
    __version__ = version("security-scanner")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"


def create_scanner(config: Optional[ScannerConfig] = None, **options: Any) -> SecurityScanner:
    """Return an initialized scanner; keyword options override ``config`` fields."""

    scanner_config = (config or ScannerConfig()).with_overrides(**options)
    return SecurityScanner(scanner_config).init()


def create_reporter(config: Optional[ReporterConfig] = None, **options: Any) -> Reporter:
    return Reporter((config or ReporterConfig()).with_overrides(**options))


def scan(
    root_dir: Union[str, Path, None] = None,
    *,
    reporter: Union[ReporterConfig, bool, None] = None,
    **options: Any,
) -> ScanResult:
    """Scan ``root_dir`` and, unless ``reporter`` is ``False``, write reports.

    Report paths are stored on ``result.reports``.
    """

    scanner = create_scanner(root_dir=root_dir, **options)
    result = scanner.scan()
    if reporter is not False:
        reporter_config = reporter if isinstance(reporter, ReporterConfig) else ReporterConfig()
        result.reports = Reporter(reporter_config).render(result)
    return result


__all__ = [
    "__version__",
    "ConfigError",
    "Finding",
    "Match",
    "Reporter",
    "ReporterConfig",
    "Rule",
    "RuleDefinitionError",
    "ScanResult",
    "ScannerConfig",
    "ScannerStateError",
    "SecurityScanner",
    "SecurityScannerError",
    "Severity",
    "create_reporter",
    "create_scanner",
    "load_rules",
    "register_rule",
    "scan",
]
