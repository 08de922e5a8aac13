"""Tests for gitdesk.git.phrases module."""

import pytest

from gitdesk.git.models import ErrorType
from gitdesk.git.phrases import DEFAULT_PHRASES, PHRASES, PhraseBook, PhraseTable


class TestPhraseTable:
    """Building and merging tables."""

    def test_from_dict(self):
        table = PhraseTable.from_dict("de", {
            "up_to_date": [{"idiom": "bereits aktuell", "message": "Already up to date"}],
            "username_prompts": ["benutzername für"],
            "errors": {"host_not_found": ["konnte host nicht auflösen"]},
        })
        assert table.locale == "de"
        assert table.up_to_date == (("bereits aktuell", "Already up to date"),)
        assert table.username_prompts == ("benutzername für",)
        assert table.errors == {ErrorType.HOST_NOT_FOUND: ("konnte host nicht auflösen",)}

    def test_from_dict_rejects_unknown_error_type(self):
        with pytest.raises(ValueError):
            PhraseTable.from_dict("de", {"errors": {"no_such_type": ["x"]}})

    def test_merged_appends(self):
        extra = PhraseTable(locale="en", errors={ErrorType.CONNECTION_REFUSED: ("econnrefused",)})
        merged = PHRASES["en"].merged(extra)
        assert merged.errors[ErrorType.CONNECTION_REFUSED] == ("connection refused", "econnrefused")
        # Original is untouched
        assert PHRASES["en"].errors[ErrorType.CONNECTION_REFUSED] == ("connection refused",)


class TestPhraseBook:
    """Flattened lookups across locales."""

    def test_default_has_english_and_spanish(self):
        assert set(DEFAULT_PHRASES.tables) == {"en", "es"}

    def test_english_first(self):
        assert DEFAULT_PHRASES.username_prompts[0] == "username for"
        assert "usuario para" in DEFAULT_PHRASES.username_prompts

    def test_error_phrases_across_locales(self):
        phrases = DEFAULT_PHRASES.error_phrases(ErrorType.CONNECTION_REFUSED)
        assert phrases == ("connection refused", "conexión rechazada")

    def test_patterns_compiled(self):
        patterns = DEFAULT_PHRASES.conflict_path_patterns
        assert patterns[0].search("CONFLICT (content): Merge conflict in a.txt").group(1) == "a.txt"

    def test_extended_without_extra_returns_same_book(self):
        assert DEFAULT_PHRASES.extended(None) is DEFAULT_PHRASES
        assert DEFAULT_PHRASES.extended({}) is DEFAULT_PHRASES

    def test_extended_adds_locale(self):
        book = DEFAULT_PHRASES.extended({"fr": {"password_prompts": ["mot de passe pour"]}})
        assert list(book.tables) == ["en", "es", "fr"]
        assert "mot de passe pour" in book.password_prompts
        # Shared default is not mutated
        assert "fr" not in DEFAULT_PHRASES.tables

    def test_extended_merges_known_locale(self):
        book = DEFAULT_PHRASES.extended({"es": {"errors": {"authentication_failure": ["autenticación falló"]}}})
        assert "autenticación falló" in book.error_phrases(ErrorType.AUTHENTICATION_FAILURE)

    def test_empty_book(self):
        book = PhraseBook({})
        assert book.up_to_date == ()
        assert book.error_phrases(ErrorType.GENERIC_FAILURE) == ()
