"""Built-in rules for formcheck."""

from formcheck.rules.builtins import (
    EMAIL_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
    register_builtin_rules,
)

__all__ = [
    "EMAIL_PATTERN",
    "PHONE_PATTERN",
    "URL_PATTERN",
    "register_builtin_rules",
]
