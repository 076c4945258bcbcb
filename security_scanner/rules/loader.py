"""Rule registry and loader.

Custom rules are declarative descriptors (YAML or JSON) found in a rules
directory.  A descriptor is either a plain definition::

    id: ORG-001
    name: Internal host
    severity: medium
    pattern: "corp\\.internal"

or a reference to a rule class registered in Python with
:func:`register_rule`::

    use: RULE-97-HTTPS
    severity: low

A file may hold one descriptor, a list of them, or a mapping with a
top-level ``rules`` list.  A file that fails to load is logged and skipped
as a whole; the remaining files still load.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar, Union

import yaml

from security_scanner.errors import ConfigError, RuleDefinitionError
from security_scanner.utils.fileio import STRUCTURED_SUFFIXES, read_structured_file

from .base import Rule
from .builtin import BUILTIN_RULES

logger = logging.getLogger(__name__)

RuleFactory = Callable[..., Rule]
F = TypeVar("F", bound=RuleFactory)

SKIPPED_DIRECTORIES = {"node_modules", "__pycache__"}

_REGISTRY: Dict[str, RuleFactory] = {}


def register_rule(key: Optional[str] = None) -> Callable[[F], F]:
    """Register a rule class (or factory) so descriptors can ``use`` it.

    The key defaults to the class ``id`` attribute, then its ``__name__``.
    """

    def decorator(factory: F) -> F:
        name = key or getattr(factory, "id", None) or factory.__name__
        _REGISTRY[str(name)] = factory
        return factory

    return decorator


def unregister_rule(key: str) -> None:
    _REGISTRY.pop(key, None)


def registered_rules() -> Dict[str, RuleFactory]:
    return dict(_REGISTRY)


for _builtin in BUILTIN_RULES:
    register_rule()(_builtin)


def load_builtin_rules() -> List[Rule]:
    return [rule_cls() for rule_cls in BUILTIN_RULES]


def load_rules(custom_rules_dir: Union[str, Path, None] = None) -> List[Rule]:
    """Return built-in rules followed by the rules found in ``custom_rules_dir``.

    A missing directory means "no custom rules".  A path that exists but is
    not a readable directory is a configuration error.
    """

    rules = load_builtin_rules()
    if custom_rules_dir is None:
        return rules

    directory = Path(custom_rules_dir)
    if not directory.exists():
        logger.debug("Custom rules directory %s not found, using built-in rules only", directory)
        return rules
    if not directory.is_dir():
        raise ConfigError(f"Rules path is not a directory: {directory}")
    if not os.access(directory, os.R_OK | os.X_OK):
        raise ConfigError(f"Rules directory is not readable: {directory}")

    rules.extend(load_rules_from_dir(directory))
    return rules


def load_rules_from_dir(directory: Path) -> List[Rule]:
    rules: List[Rule] = []
    for path in iter_rule_files(directory):
        try:
            loaded = load_rule_file(path)
        except (RuleDefinitionError, yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping rule file %s: %s", path, exc)
            continue
        logger.debug("Loaded %d rule(s) from %s", len(loaded), path)
        rules.extend(loaded)
    return rules


def iter_rule_files(directory: Path) -> Iterator[Path]:
    """Yield descriptor files below ``directory`` in sorted traversal order."""

    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(
            name for name in dirnames if not _is_infrastructure(name) and name not in SKIPPED_DIRECTORIES
        )
        for filename in sorted(filenames):
            if _is_infrastructure(filename):
                continue
            if not filename.lower().endswith(STRUCTURED_SUFFIXES):
                continue
            yield Path(dirpath) / filename


def load_rule_file(path: Path) -> List[Rule]:
    return build_rules(read_structured_file(path))


def build_rules(document: Any) -> List[Rule]:
    """Turn a parsed descriptor document into rule instances, in order."""

    if document is None:
        return []
    if isinstance(document, Mapping) and "rules" in document:
        document = document["rules"]
        if not isinstance(document, list):
            raise RuleDefinitionError("'rules' must be a list")
    if isinstance(document, Mapping):
        return [build_rule(document)]
    if isinstance(document, list):
        return [build_rule(entry) for entry in document]
    raise RuleDefinitionError(
        f"Expected a rule mapping or list of rules, got {type(document).__name__}"
    )


def build_rule(entry: Any) -> Rule:
    if not isinstance(entry, Mapping):
        raise RuleDefinitionError(f"Each rule entry must be a mapping, got {type(entry).__name__}")
    if "use" not in entry:
        return Rule.create(entry)

    key = str(entry["use"])
    factory = _REGISTRY.get(key)
    if factory is None:
        raise RuleDefinitionError(f"No registered rule named {key!r}")
    overrides = {name: value for name, value in entry.items() if name != "use"}
    try:
        rule = factory(**overrides)
    except (TypeError, ValueError) as exc:
        raise RuleDefinitionError(f"Could not build rule {key!r}: {exc}") from exc
    if not isinstance(rule, Rule):
        raise RuleDefinitionError(f"Registered rule {key!r} did not produce a Rule")
    return rule


def _is_infrastructure(name: str) -> bool:
    return name.startswith((".", "_"))
