"""Tests for the pluralized translator, plural rules and catalogs."""

from __future__ import annotations

import json
import threading

import pytest

from transvalid.i18n import (
    CatalogEntry,
    CatalogLoadError,
    CatalogTranslator,
    CLDRPluralRules,
    LocaleInfo,
    PluralCategory,
    PluralOperands,
    PluralOption,
    Translator,
    format_message,
    get_builtin_messages,
    get_supported_locales,
    load_catalog_file,
    parse_catalog,
    plural_few,
    plural_many,
    plural_one,
    plural_zero,
)


# =============================================================================
# Locale and plural rules
# =============================================================================


class TestLocaleInfo:
    """Tests for locale tag parsing."""

    def test_language_only(self):
        locale = LocaleInfo.parse("fa")
        assert locale.language == "fa"
        assert locale.region is None
        assert locale.tag == "fa"

    def test_region_normalized(self):
        assert LocaleInfo.parse("fa_ir").tag == "fa-IR"
        assert LocaleInfo.parse("EN-us").tag == "en-US"

    def test_script(self):
        locale = LocaleInfo.parse("sr-latn-rs")
        assert locale.script == "Latn"
        assert locale.tag == "sr-Latn-RS"


class TestPluralOperands:
    """Tests for CLDR operand extraction."""

    def test_integer(self):
        op = PluralOperands.from_number(3)
        assert (op.i, op.v, op.f) == (3, 0, 0)

    def test_float(self):
        op = PluralOperands.from_number(1.5)
        assert (op.i, op.v, op.f) == (1, 1, 5)

    def test_negative(self):
        assert PluralOperands.from_number(-2).i == 2


class TestCLDRPluralRules:
    """Cardinal plural categories per language."""

    @pytest.fixture
    def rules(self) -> CLDRPluralRules:
        return CLDRPluralRules()

    @pytest.mark.parametrize(
        "count,expected",
        [(1, PluralCategory.ONE), (0, PluralCategory.OTHER), (2, PluralCategory.OTHER), (1.5, PluralCategory.OTHER)],
    )
    def test_english(self, rules, count, expected):
        assert rules.get_category(count, LocaleInfo.parse("en")) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [(0, PluralCategory.ONE), (1, PluralCategory.ONE), (5, PluralCategory.OTHER)],
    )
    def test_persian(self, rules, count, expected):
        assert rules.get_category(count, LocaleInfo.parse("fa")) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [
            (1, PluralCategory.ONE),
            (3, PluralCategory.FEW),
            (5, PluralCategory.MANY),
            (11, PluralCategory.MANY),
            (21, PluralCategory.ONE),
        ],
    )
    def test_russian(self, rules, count, expected):
        assert rules.get_category(count, LocaleInfo.parse("ru")) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, PluralCategory.ZERO),
            (1, PluralCategory.ONE),
            (2, PluralCategory.TWO),
            (5, PluralCategory.FEW),
            (11, PluralCategory.MANY),
            (100, PluralCategory.OTHER),
        ],
    )
    def test_arabic(self, rules, count, expected):
        assert rules.get_category(count, LocaleInfo.parse("ar")) == expected

    def test_no_plural_language(self, rules):
        assert rules.get_category(1, LocaleInfo.parse("ja")) == PluralCategory.OTHER

    def test_unknown_language(self, rules):
        assert rules.get_category(1, LocaleInfo.parse("xx")) == PluralCategory.OTHER

    def test_supported_languages(self, rules):
        languages = rules.get_supported_languages()

        for language in ["en", "fa", "ar", "ru"]:
            assert language in languages
        assert "xx" not in languages

        rules.register_rule("xx", lambda n: PluralCategory.OTHER)
        assert "xx" in rules.get_supported_languages()

    def test_regional_rule_preferred(self, rules):
        rules.register_rule("en_GB", lambda n: PluralCategory.MANY)
        assert rules.get_category(1, LocaleInfo.parse("en-GB")) == PluralCategory.MANY
        assert rules.get_category(1, LocaleInfo.parse("en-US")) == PluralCategory.ONE

    def test_zero_form_wins_for_zero(self, rules):
        forms = {PluralCategory.OTHER: "items", PluralCategory.ZERO: "no items"}
        assert rules.get_plural_form(0, forms, LocaleInfo.parse("en")) == "no items"
        assert rules.get_plural_form(2, forms, LocaleInfo.parse("en")) == "items"

    def test_missing_category_uses_other(self, rules):
        forms = {PluralCategory.OTHER: "items"}
        assert rules.get_plural_form(1, forms, LocaleInfo.parse("en")) == "items"


# =============================================================================
# Translator
# =============================================================================


class TestFormatMessage:
    """Placeholder substitution."""

    def test_substitution(self):
        assert format_message("{field} needs {param}", {"field": "name", "param": 3}) == "name needs 3"

    def test_unknown_placeholder_kept(self):
        assert format_message("{field} {unknown}", {"field": "name"}) == "name {unknown}"


class TestCatalogTranslator:
    """Tests for CatalogTranslator."""

    def test_satisfies_protocol(self, translator):
        assert isinstance(translator, Translator)

    def test_plural_selection(self, translator):
        translator.add_message(
            "en", "min",
            "{field} must be at least {param} characters",
            plural_one("{field} must be at least {param} character"),
        )

        assert translator.plural("en", "min", 1, {"field": "name", "param": 1}) == (
            "name must be at least 1 character"
        )
        assert translator.plural("en", "min", 3, {"field": "name", "param": 3}) == (
            "name must be at least 3 characters"
        )

    def test_zero_form(self, translator):
        translator.add_message("en", "items", "{count} items", plural_zero("no items"), plural_one("one item"))

        assert translator.plural("en", "items", 0, {}) == "no items"
        assert translator.plural("en", "items", 1, {}) == "one item"
        assert translator.plural("en", "items", 4, {}) == "4 items"

    def test_locale_specific_categories(self, translator):
        translator.add_message(
            "ru", "files", "{count} файла",
            plural_one("{count} файл"), plural_few("{count} файла"), plural_many("{count} файлов"),
        )

        assert translator.plural("ru", "files", 1, {}) == "1 файл"
        assert translator.plural("ru", "files", 5, {}) == "5 файлов"

    def test_missing_key_returns_empty(self, translator):
        assert translator.plural("en", "missing", 1, {"field": "name"}) == ""

    def test_empty_locale_uses_default(self):
        translator = CatalogTranslator("fa")
        translator.add_message("", "required", "{field} الزامی است")

        assert translator.has_message("fa", "required")
        assert translator.plural("", "required", 0, {"field": "نام"}) == "نام الزامی است"

    def test_region_falls_back_to_language(self, translator):
        translator.add_message("fa", "required", "{field} الزامی است")
        assert translator.plural("fa-IR", "required", 0, {"field": "نام"}) == "نام الزامی است"

    def test_fallback_locale(self):
        translator = CatalogTranslator("fa", fallback_locale="en")
        translator.add_message("en", "required", "{field} is required")

        assert translator.plural("fa", "required", 0, {"field": "name"}) == "name is required"

    def test_no_fallback_locale(self, translator):
        translator.add_message("fa", "required", "{field} الزامی است")
        assert translator.plural("en", "required", 0, {"field": "name"}) == ""

    def test_replacing_message(self, translator):
        translator.add_message("en", "required", "first")
        translator.add_message("en", "required", "second")
        assert translator.message("en", "required") == "second"

    def test_locales(self, translator):
        translator.add_message("fa", "a", "x")
        translator.add_message("en-US", "a", "x")
        assert translator.locales() == ["en-US", "fa"]

    def test_concurrent_registration_and_lookup(self, translator):
        def register(locale: str) -> None:
            for i in range(200):
                translator.add_message(locale, f"key{i}", f"message {i}")

        def lookup() -> None:
            for i in range(200):
                translator.plural("en", f"key{i}", 1, {})

        threads = [threading.Thread(target=register, args=(f"l{n}",)) for n in range(4)]
        threads += [threading.Thread(target=lookup) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert translator.locales() == ["l0", "l1", "l2", "l3"]
        assert translator.message("l3", "key199") == "message 199"

    def test_message(self, translator):
        translator.add_message("en", "required", "{field} is required", plural_one("unused"))
        assert translator.message("en", "required", {"field": "name"}) == "name is required"
        assert translator.message("en", "missing") == ""


# =============================================================================
# Catalog files
# =============================================================================


class TestCatalogLoading:
    """Tests for YAML and JSON catalog files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "messages.yaml"
        path.write_text(
            "fa:\n"
            "  required: \"{field} الزامی است\"\n"
            "en:\n"
            "  min:\n"
            "    one: \"{field} must be at least {param} character\"\n"
            "    other: \"{field} must be at least {param} characters\"\n",
            encoding="utf-8",
        )

        entries = load_catalog_file(path)

        assert entries[0] == CatalogEntry(locale="fa", key="required", message="{field} الزامی است")
        assert entries[1].locale == "en"
        assert entries[1].message == "{field} must be at least {param} characters"
        assert entries[1].options == (
            PluralOption(PluralCategory.ONE, "{field} must be at least {param} character"),
        )

    def test_load_json(self, tmp_path):
        path = tmp_path / "messages.json"
        path.write_text(json.dumps({"en": {"required": "{field} is required"}}), encoding="utf-8")

        entries = load_catalog_file(path)

        assert entries == [CatalogEntry(locale="en", key="required", message="{field} is required")]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_catalog_file(path) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError, match="file not found"):
            load_catalog_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("en: [unclosed\n", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            load_catalog_file(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            load_catalog_file(path)

    def test_plural_mapping_requires_other(self):
        with pytest.raises(CatalogLoadError, match="no 'other' form"):
            parse_catalog({"en": {"min": {"one": "x"}}})

    def test_unknown_plural_category(self):
        with pytest.raises(CatalogLoadError, match="unknown plural category"):
            parse_catalog({"en": {"min": {"several": "x", "other": "y"}}})

    def test_top_level_must_be_mapping(self):
        with pytest.raises(CatalogLoadError):
            parse_catalog(["en"])

    def test_locale_must_map_messages(self):
        with pytest.raises(CatalogLoadError):
            parse_catalog({"en": "required"})


class TestBuiltinCatalogs:
    """Tests for the built-in messages."""

    def test_supported_locales(self):
        assert get_supported_locales() == ["en", "fa"]

    def test_all_locales_by_default(self):
        locales = {entry.locale for entry in get_builtin_messages()}
        assert locales == {"en", "fa"}

    def test_single_locale(self):
        entries = get_builtin_messages("fa")
        assert entries
        assert all(entry.locale == "fa" for entry in entries)

    def test_unknown_locale(self):
        assert get_builtin_messages("xx") == []

    def test_same_keys_in_every_locale(self):
        en = {entry.key for entry in get_builtin_messages("en")}
        fa = {entry.key for entry in get_builtin_messages("fa")}
        assert en == fa

    def test_length_rules_have_singular_form(self):
        entries = {entry.key: entry for entry in get_builtin_messages("en")}
        assert entries["min"].options[0].category == PluralCategory.ONE
        assert entries["required"].options == ()
