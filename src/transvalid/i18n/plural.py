"""CLDR cardinal plural rules.

Only cardinal rules are needed to pick a message form for a rule parameter
such as ``min=3``. Rules are registered per language and may be overridden.

Usage:
    rules = CLDRPluralRules()
    rules.get_category(1, LocaleInfo.parse("en"))  # ONE
    rules.get_category(5, LocaleInfo.parse("ru"))  # MANY
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from transvalid.i18n.protocols import (
    BasePluralRuleProvider,
    LocaleInfo,
    PluralCategory,
)


PluralRuleFunc = Callable[[float | int], PluralCategory]


@dataclass
class PluralOperands:
    """CLDR plural operands for a number.

    See: https://unicode.org/reports/tr35/tr35-numbers.html#Operands

    Attributes:
        n: Absolute value of the source number
        i: Integer digits of n
        v: Number of visible fraction digits
        f: Visible fraction digits as an integer
    """
    n: float
    i: int
    v: int
    f: int

    @classmethod
    def from_number(cls, n: float | int) -> "PluralOperands":
        abs_n = abs(n)
        if isinstance(n, int):
            return cls(n=float(abs_n), i=int(abs_n), v=0, f=0)

        _, _, fraction = repr(float(abs_n)).partition(".")
        fraction = fraction.rstrip("0")
        return cls(
            n=float(abs_n),
            i=int(abs_n),
            v=len(fraction),
            f=int(fraction) if fraction else 0,
        )


def _one_other(n: float | int) -> PluralCategory:
    # en, de, nl, it, es, sv ...: one when i = 1 and v = 0
    op = PluralOperands.from_number(n)
    if op.i == 1 and op.v == 0:
        return PluralCategory.ONE
    return PluralCategory.OTHER


def _zero_or_one(n: float | int) -> PluralCategory:
    # fa, hi, bn: one when i = 0 or n = 1
    op = PluralOperands.from_number(n)
    if op.i == 0 or op.n == 1:
        return PluralCategory.ONE
    return PluralCategory.OTHER


def _french(n: float | int) -> PluralCategory:
    op = PluralOperands.from_number(n)
    if op.i in (0, 1):
        return PluralCategory.ONE
    return PluralCategory.OTHER


def _east_slavic(n: float | int) -> PluralCategory:
    op = PluralOperands.from_number(n)
    if op.v != 0:
        return PluralCategory.OTHER
    i10 = op.i % 10
    i100 = op.i % 100
    if i10 == 1 and i100 != 11:
        return PluralCategory.ONE
    if 2 <= i10 <= 4 and not 12 <= i100 <= 14:
        return PluralCategory.FEW
    return PluralCategory.MANY


def _polish(n: float | int) -> PluralCategory:
    op = PluralOperands.from_number(n)
    if op.v != 0:
        return PluralCategory.OTHER
    i10 = op.i % 10
    i100 = op.i % 100
    if op.i == 1:
        return PluralCategory.ONE
    if 2 <= i10 <= 4 and not 12 <= i100 <= 14:
        return PluralCategory.FEW
    return PluralCategory.MANY


def _czech(n: float | int) -> PluralCategory:
    op = PluralOperands.from_number(n)
    if op.v != 0:
        return PluralCategory.MANY
    if op.i == 1:
        return PluralCategory.ONE
    if 2 <= op.i <= 4:
        return PluralCategory.FEW
    return PluralCategory.OTHER


def _arabic(n: float | int) -> PluralCategory:
    op = PluralOperands.from_number(n)
    n100 = int(op.n) % 100
    if op.n == 0:
        return PluralCategory.ZERO
    if op.n == 1:
        return PluralCategory.ONE
    if op.n == 2:
        return PluralCategory.TWO
    if op.n == int(op.n) and 3 <= n100 <= 10:
        return PluralCategory.FEW
    if op.n == int(op.n) and 11 <= n100 <= 99:
        return PluralCategory.MANY
    return PluralCategory.OTHER


def _hebrew(n: float | int) -> PluralCategory:
    op = PluralOperands.from_number(n)
    if op.v == 0 and op.i == 1:
        return PluralCategory.ONE
    if op.v == 0 and op.i == 2:
        return PluralCategory.TWO
    return PluralCategory.OTHER


def _no_plural(n: float | int) -> PluralCategory:
    return PluralCategory.OTHER


_DEFAULT_RULES: dict[PluralRuleFunc, tuple[str, ...]] = {
    _one_other: (
        "en", "de", "nl", "it", "es", "pt_PT", "ca", "da", "nb", "nn", "no",
        "sv", "fi", "et", "el", "hu", "tr", "bg", "ur",
    ),
    _zero_or_one: ("fa", "hi", "bn", "gu", "kn", "zu", "am"),
    _french: ("fr", "pt", "hy"),
    _east_slavic: ("ru", "uk", "be"),
    _polish: ("pl",),
    _czech: ("cs", "sk"),
    _arabic: ("ar", "ps"),
    _hebrew: ("he",),
    _no_plural: ("ja", "ko", "zh", "vi", "th", "id", "ms"),
}


class CLDRPluralRules(BasePluralRuleProvider):
    """CLDR cardinal plural rule provider.

    Languages without a registered rule always resolve to ``other``.
    """

    def __init__(self) -> None:
        self._rules: dict[str, PluralRuleFunc] = {}
        for rule, languages in _DEFAULT_RULES.items():
            for language in languages:
                self._rules[language] = rule

    def register_rule(self, language: str, rule: PluralRuleFunc) -> None:
        """Register a custom cardinal rule.

        Args:
            language: Language code, or ``language_REGION`` for a regional rule
            rule: Plural rule function
        """
        self._rules[language] = rule

    def get_category(self, count: float | int, locale: LocaleInfo) -> PluralCategory:
        """Get the plural category for a number.

        The regional rule (``pt_PT``) is preferred over the language rule.
        """
        if locale.region:
            regional = self._rules.get(f"{locale.language}_{locale.region}")
            if regional is not None:
                return regional(count)

        rule = self._rules.get(locale.language)
        if rule is None:
            return PluralCategory.OTHER
        return rule(count)

    def get_supported_languages(self) -> list[str]:
        return list(self._rules.keys())
