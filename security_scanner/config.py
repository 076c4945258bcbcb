"""Scanner, reporter and logging configuration.

Settings come from three layers: explicit values (CLI flags or keyword
arguments), an optional ``.securityrc`` file, then the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .utils.fileio import read_structured_file

DEFAULT_INCLUDE: Tuple[str, ...] = ("**/*.{js,jsx,ts,tsx}",)
DEFAULT_EXCLUDE: Tuple[str, ...] = ("**/node_modules/**", "**/dist/**", "**/build/**")
DEFAULT_RULES_DIR = ".security/rules"
DEFAULT_OUTPUT_DIR = "security-audit"
DEFAULT_FORMATS: Tuple[str, ...] = ("markdown", "html")
REPORT_FORMATS: Tuple[str, ...] = ("markdown", "html", "json")
CONFIG_FILENAMES = (".securityrc.yaml", ".securityrc.yml", ".securityrc.json")
LOG_LEVELS = ("error", "warn", "warning", "info", "debug")


def _default_log_level() -> str:
    return (os.getenv("LOG_LEVEL") or "info").lower()


@dataclass(frozen=True)
class LoggingConfig:
    level: str = field(default_factory=_default_log_level)
    silent: bool = False


@dataclass(frozen=True)
class ScannerConfig:
    root_dir: Path = field(default_factory=Path.cwd)
    rules_dir: Optional[Path] = None
    include: Tuple[str, ...] = DEFAULT_INCLUDE
    exclude: Tuple[str, ...] = DEFAULT_EXCLUDE
    context_lines: int = 2
    max_file_size: int = 1_048_576
    workers: int = 1
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def resolved_rules_dir(self) -> Path:
        """Custom rules location; defaults to ``<root>/.security/rules``."""

        if self.rules_dir is not None:
            return Path(self.rules_dir)
        return Path(self.root_dir) / DEFAULT_RULES_DIR

    def with_overrides(self, **overrides: Any) -> "ScannerConfig":
        """Return a copy where every non-``None`` override replaces the current value."""

        return replace(self, **_coerce_scanner_fields(_drop_none(overrides)))


@dataclass(frozen=True)
class ReporterConfig:
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    formats: Tuple[str, ...] = DEFAULT_FORMATS

    def with_overrides(self, **overrides: Any) -> "ReporterConfig":
        values = _drop_none(overrides)
        if "output_dir" in values:
            values["output_dir"] = Path(values["output_dir"])
        if "formats" in values:
            values["formats"] = _validate_formats(values["formats"])
        return replace(self, **values)


@dataclass(frozen=True)
class AppConfig:
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    reporter: ReporterConfig = field(default_factory=ReporterConfig)


def find_config_file(directory: Path) -> Optional[Path]:
    for name in CONFIG_FILENAMES:
        candidate = Path(directory) / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: str | Path) -> AppConfig:
    """Load a ``.securityrc`` file; relative paths resolve against its directory."""

    config_path = Path(path)
    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        raw = read_structured_file(config_path)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Could not read config file {config_path}: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ConfigError("Config file must contain a mapping")
    return build_config(raw, base_dir=config_path.parent.resolve())


def build_config(raw: Mapping[str, Any], base_dir: Optional[Path] = None) -> AppConfig:
    base = Path(base_dir) if base_dir is not None else Path.cwd()

    root_value = _optional_str(_pick(raw, "rootDir", "root_dir"))
    root_dir = _resolve(base, root_value) if root_value else base
    rules_value = _optional_str(_pick(raw, "rulesDir", "rules_dir"))

    logger_raw = raw.get("logger", {}) or {}
    if not isinstance(logger_raw, Mapping):
        raise ConfigError("'logger' must be an object")
    logging_config = LoggingConfig(
        level=_validate_log_level(logger_raw.get("level", _default_log_level())),
        silent=bool(logger_raw.get("silent", False)),
    )

    scanner = ScannerConfig(root_dir=root_dir, logging=logging_config).with_overrides(
        rules_dir=_resolve(root_dir, rules_value) if rules_value else None,
        include=_pick(raw, "include"),
        exclude=_pick(raw, "exclude"),
        context_lines=_pick(raw, "contextLines", "context_lines"),
        max_file_size=_pick(raw, "maxFileSize", "max_file_size"),
        workers=_pick(raw, "workers"),
    )

    reporter_raw = raw.get("reporter", {}) or {}
    if not isinstance(reporter_raw, Mapping):
        raise ConfigError("'reporter' must be an object")
    output_value = _optional_str(_pick(reporter_raw, "outputDir", "output_dir"))
    reporter = ReporterConfig().with_overrides(
        output_dir=_resolve(base, output_value) if output_value else None,
        formats=_pick(reporter_raw, "formats"),
    )

    return AppConfig(scanner=scanner, reporter=reporter)


def _coerce_scanner_fields(values: dict) -> dict:
    known = {item.name for item in fields(ScannerConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown scanner option(s): {', '.join(unknown)}")
    if "root_dir" in values:
        values["root_dir"] = Path(values["root_dir"])
    if "rules_dir" in values:
        values["rules_dir"] = Path(values["rules_dir"])
    for key in ("include", "exclude"):
        if key in values:
            values[key] = tuple(_ensure_string_list(values[key], key))
    for key, minimum in (("context_lines", 0), ("max_file_size", 1), ("workers", 1)):
        if key in values:
            values[key] = _ensure_int(values[key], key, minimum)
    return values


def _validate_formats(value: Any) -> Tuple[str, ...]:
    formats = tuple(item.lower() for item in _ensure_string_list(value, "formats"))
    unknown = [item for item in formats if item not in REPORT_FORMATS]
    if unknown:
        raise ConfigError(
            f"Unknown report format(s): {', '.join(unknown)} (expected: {', '.join(REPORT_FORMATS)})"
        )
    return formats


def _validate_log_level(value: Any) -> str:
    level = str(value).strip().lower()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {value}")
    return level


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _drop_none(values: Mapping[str, Any]) -> dict:
    return {key: value for key, value in values.items() if value is not None}


def _resolve(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _ensure_string_list(value: object, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ConfigError(f"'{key}' must be a list of strings")
    return [str(item) for item in value]


def _ensure_int(value: object, key: str, minimum: int) -> int:
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be an integer") from None
    if number < minimum:
        raise ConfigError(f"'{key}' must be >= {minimum}")
    return number
