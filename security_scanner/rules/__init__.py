"""Rule abstraction, built-in rules and the rule loader."""

from __future__ import annotations

from .base import Match, Rule
from .builtin import BUILTIN_RULES
from .loader import build_rules, load_builtin_rules, load_rules, register_rule

__all__ = [
    "BUILTIN_RULES",
    "Match",
    "Rule",
    "build_rules",
    "load_builtin_rules",
    "load_rules",
    "register_rule",
]
