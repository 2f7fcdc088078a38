"""Rule registry for formcheck.

Provides registration and lookup for rule definitions. Built-in rules are
registered once at startup by ``register_builtin_rules``; applications may
register their own rules the same way before validating.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from formcheck.types import ConfigurationError, ParsedRule, RuleContext

logger = logging.getLogger(__name__)

Predicate = Callable[[str, ParsedRule, RuleContext], bool]


class UnknownRuleError(ConfigurationError):
    """A rule token names a rule that is not registered."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        super().__init__(
            f"Rule '{name}' is not registered. Available rules: " + ", ".join(available)
        )


@dataclass(frozen=True)
class RuleDefinition:
    """Complete definition of a validation rule.

    Attributes:
        name: Rule identifier as used in rule tokens
        message: Default message template; ``%s`` is replaced by the field label
        description: Short human-readable description of what passes
        predicate: Returns True when the value satisfies the rule
        arity: Number of bracketed parameters the rule requires
        allow_empty: If False, an empty value fails without calling the predicate
    """

    name: str
    message: str
    description: str
    predicate: Predicate
    arity: int = 0
    allow_empty: bool = False

    def check(self, value: str, rule: ParsedRule, ctx: RuleContext) -> bool:
        """Evaluate the rule against a value."""
        if value == "" and not self.allow_empty:
            return False
        return bool(self.predicate(value, rule, ctx))

    def to_dict(self) -> dict[str, Any]:
        """Export for documentation."""
        return {
            "name": self.name,
            "message": self.message,
            "description": self.description,
            "arity": self.arity,
        }


class RuleRegistry:
    """Registry for validation rules.

    Rules must be registered before they can be referenced from a rule token.
    Lookup of an unknown rule raises instead of passing silently.

    Example:
        RuleRegistry.register(RuleDefinition(
            name="postcode",
            message="The %s field must be a postcode.",
            description="must be a postcode",
            predicate=lambda value, rule, ctx: bool(POSTCODE.match(value)),
        ))

        rule = RuleRegistry.get("postcode")
    """

    _rules: dict[str, RuleDefinition] = {}

    @classmethod
    def register(cls, rule_def: RuleDefinition) -> None:
        """Register a rule definition.

        Idempotent - re-registering the same name is a no-op.
        """
        if rule_def.name in cls._rules:
            return
        cls._rules[rule_def.name] = rule_def
        logger.debug("Registered rule %s", rule_def.name)

    @classmethod
    def get(cls, name: str) -> RuleDefinition:
        """Get a rule definition by name.

        Raises:
            UnknownRuleError: If the rule is not registered
        """
        if name not in cls._rules:
            raise UnknownRuleError(name, cls.list_registered())
        return cls._rules[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if a rule is registered."""
        return name in cls._rules

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered rule names."""
        return sorted(cls._rules)

    @classmethod
    def export_documentation(cls) -> dict[str, Any]:
        """Export the registry for documentation, keyed by rule name."""
        return {name: rule.to_dict() for name, rule in sorted(cls._rules.items())}

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._rules.clear()
