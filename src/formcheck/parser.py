"""Parser for rule tokens.

A rule token is a rule name optionally followed by bracketed parameters:

    required
    minLength[2]
    between[1, 10]
    custom[/^[0-9]{5}$/m]

Parameters are split on commas and trimmed, except for ``custom`` whose
bracket content is a single ``/body/flags`` regex literal that is compiled
as-is (so commas and brackets inside the pattern are never split).

A backslash stops the next character from opening or closing a bracket. The
backslash is passed through to the parameter unchanged: ``equals[\\]]`` has
the parameter ``\\]``.
"""

import re
from functools import lru_cache

from formcheck.types import ConfigurationError, ParsedRule

CUSTOM_RULE = "custom"

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Greedy body so the last slash separates the flags
REGEX_LITERAL_PATTERN = re.compile(r"^/(?P<body>.*)/(?P<flags>[A-Za-z]*)$", re.DOTALL)

# g and y only affect repeated matching; a single search ignores them
REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
    "g": 0,
    "y": 0,
}


class RuleSyntaxError(ConfigurationError):
    """A rule token, or one of its parameters, is malformed."""

    def __init__(self, message: str, token: str, position: int | None = None):
        self.token = token
        self.position = position
        location = f" at position {position}" if position is not None else ""
        super().__init__(f"{message} in rule '{token}'{location}")


class RuleParser:
    """Parser for a single rule token.

    Usage:
        parser = RuleParser("minLength[2]")
        rule = parser.parse()   # ParsedRule(name="minLength", params=("2",), ...)
    """

    def __init__(self, token: str):
        self.token = token
        self.source = token.strip()

    def parse(self) -> ParsedRule:
        """Parse the token and return a ParsedRule."""
        if not self.source:
            raise RuleSyntaxError("Empty rule", self.token)

        match = NAME_PATTERN.match(self.source)
        if not match:
            raise RuleSyntaxError("Expected a rule name", self.token, 0)

        name = match.group()
        position = match.end()

        if position == len(self.source):
            if name == CUSTOM_RULE:
                raise RuleSyntaxError(
                    "Expected a /pattern/flags argument", self.token, position
                )
            return ParsedRule(name=name)

        if self.source[position] != "[":
            raise RuleSyntaxError(
                f"Unexpected character '{self.source[position]}'", self.token, position
            )

        if name == CUSTOM_RULE:
            return self._parse_custom(name, position)

        raw = self._bracket_content(position)
        params = tuple(param.strip() for param in raw.split(","))
        if any(param == "" for param in params):
            raise RuleSyntaxError("Empty parameter", self.token, position + 1)

        return ParsedRule(name=name, params=params, raw_params=raw)

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _bracket_content(self, start: int) -> str:
        """Return the text inside the brackets opening at ``start``.

        Nested brackets must balance and the closing bracket must end the token.
        A backslash escapes the following character.
        """
        depth = 0
        i = start
        while i < len(self.source):
            char = self.source[i]
            if char == "\\":
                i += 2
                continue
            if char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    if i != len(self.source) - 1:
                        raise RuleSyntaxError(
                            "Unexpected text after ']'", self.token, i + 1
                        )
                    return self.source[start + 1:i]
            i += 1

        raise RuleSyntaxError("Unbalanced brackets", self.token, start)

    def _parse_custom(self, name: str, start: int) -> ParsedRule:
        """Parse ``custom[/body/flags]`` into a compiled pattern."""
        if not self.source.endswith("]"):
            raise RuleSyntaxError("Unbalanced brackets", self.token, start)

        raw = self.source[start + 1:-1]
        literal = REGEX_LITERAL_PATTERN.match(raw)
        if not literal:
            raise RuleSyntaxError(
                "Expected a /pattern/flags regular expression", self.token, start + 1
            )

        flags = 0
        for flag in literal.group("flags"):
            if flag not in REGEX_FLAGS:
                raise RuleSyntaxError(
                    f"Unsupported regular expression flag '{flag}'", self.token
                )
            flags |= REGEX_FLAGS[flag]

        try:
            pattern = re.compile(literal.group("body"), flags)
        except re.error as exc:
            raise RuleSyntaxError(
                f"Invalid regular expression ({exc})", self.token, start + 1
            ) from exc

        return ParsedRule(name=name, params=(raw,), raw_params=raw, pattern=pattern)


@lru_cache(maxsize=512)
def parse_rule(token: str) -> ParsedRule:
    """Parse a rule token.

    Convenience function that creates a RuleParser and parses the token.
    Results are cached; ParsedRule is immutable.
    """
    return RuleParser(token).parse()
