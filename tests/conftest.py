"""Shared fixtures for transvalid tests."""

from __future__ import annotations

import logging

import pytest

from transvalid import CatalogTranslator, new_validator, with_builtin_messages, with_translator


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep debug output of the library out of test runs."""
    logging.getLogger("transvalid").setLevel(logging.WARNING)
    yield


@pytest.fixture
def translator() -> CatalogTranslator:
    """English translator with no messages."""
    return CatalogTranslator("en")


@pytest.fixture
def validator(translator):
    """Validator with a translator and the built-in messages."""
    return new_validator(with_translator(translator), with_builtin_messages())


@pytest.fixture
def bare_validator():
    """Validator without a translator."""
    return new_validator()
