"""Rule expression parsing.

An expression is a comma separated list of ``tag`` or ``tag=param`` items,
for example ``"required,min=3,oneof=red green"``. Commas and pipes inside a
parameter are written as ``0x2C`` and ``0x7C``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from transvalid.engine.errors import RuleSyntaxError


SKIP_TAG = "-"
OMIT_EMPTY_TAG = "omitempty"

_ESCAPES = {"0x2C": ",", "0x7C": "|"}


@dataclass(frozen=True)
class RuleSpec:
    """A parsed rule: its tag and raw parameter."""
    tag: str
    param: str = ""


def _unescape(param: str) -> str:
    for escaped, char in _ESCAPES.items():
        param = param.replace(escaped, char)
    return param


@lru_cache(maxsize=512)
def parse_rules(expression: str) -> tuple[RuleSpec, ...]:
    """Parse a rule expression.

    Args:
        expression: Comma separated rules

    Returns:
        Parsed rules in order, empty for a blank expression or ``"-"``

    Raises:
        RuleSyntaxError: If an item is empty or has no tag
    """
    expression = expression.strip()
    if not expression or expression == SKIP_TAG:
        return ()

    specs: list[RuleSpec] = []
    for item in expression.split(","):
        item = item.strip()
        if not item:
            raise RuleSyntaxError(expression, "empty rule")

        tag, sep, param = item.partition("=")
        tag = tag.strip()
        if not tag:
            raise RuleSyntaxError(expression, f"missing rule name in '{item}'")
        if sep and tag == OMIT_EMPTY_TAG:
            raise RuleSyntaxError(expression, f"'{OMIT_EMPTY_TAG}' takes no parameter")

        specs.append(RuleSpec(tag=tag, param=_unescape(param)))

    return tuple(specs)
