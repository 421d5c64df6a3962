"""Per-value translation hooks.

A validated value may implement either protocol to override wording for its
own errors without touching the shared catalogs. Both are optional; a value
that implements neither is translated through the validator's translator.

Example:
    @dataclass
    class Signup:
        name: str = field(metadata={"validate": "required"})

        def translate_title(self, locale: str, field: str) -> str:
            if locale == "fa" and field == "name":
                return "نام"
            return ""
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TranslatableError(Protocol):
    """Value that can translate its own validation errors."""

    def translate_error(self, locale: str, rule: str, field: str) -> str:
        """Return a localized message for rule on field, or "" to defer."""
        ...


@runtime_checkable
class TranslatableField(Protocol):
    """Value that can translate its own field titles."""

    def translate_title(self, locale: str, field: str) -> str:
        """Return a localized display name for field, or "" to defer."""
        ...
