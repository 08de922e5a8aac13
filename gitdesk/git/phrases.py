"""Locale phrase tables used to classify git output.

git localizes most of what it prints, so recognising an outcome means
recognising its wording in every language we support. The wording lives
here as data, one PhraseTable per locale. New locales or changed wording in
a new git release extend a table (or the YAML config) rather than the
classifier code.

All phrases are matched case-insensitively as substrings unless noted.
Tests pin the exact git wording they rely on.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace

from gitdesk.git.models import ErrorType

logger = logging.getLogger(__name__)


def _lowered(items) -> tuple[str, ...]:
    return tuple(item.lower() for item in items or [])


@dataclass(frozen=True)
class PhraseTable:
    """Recognised git wording for one locale."""

    locale: str
    # (idiom, canonical message) pairs, checked in order on successful output
    up_to_date: tuple[tuple[str, str], ...] = ()
    username_prompts: tuple[str, ...] = ()
    password_prompts: tuple[str, ...] = ()
    passphrase_prompts: tuple[str, ...] = ()
    # Line that opens a list of files (checkout/merge refusing to overwrite)
    file_list_markers: tuple[str, ...] = ()
    # Line prefix that closes such a list
    file_list_terminators: tuple[str, ...] = ()
    # Regexes with one group capturing a conflicted path on a CONFLICT line
    conflict_path_patterns: tuple[str, ...] = ()
    errors: dict[ErrorType, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, locale: str, data: dict) -> PhraseTable:
        """Build a table from config data (see config.schema.json).

        Substring phrases are lower-cased here since output is lower-cased
        before matching. Regex patterns are kept as written.
        """
        errors = {
            ErrorType(name): tuple(phrases)
            for name, phrases in (data.get("errors") or {}).items()
        }
        return cls(
            locale=locale,
            up_to_date=tuple(
                (item["idiom"].lower(), item["message"]) for item in data.get("up_to_date", [])
            ),
            username_prompts=_lowered(data.get("username_prompts")),
            password_prompts=_lowered(data.get("password_prompts")),
            passphrase_prompts=_lowered(data.get("passphrase_prompts")),
            file_list_markers=_lowered(data.get("file_list_markers")),
            file_list_terminators=_lowered(data.get("file_list_terminators")),
            conflict_path_patterns=tuple(data.get("conflict_path_patterns", [])),
            errors=errors,
        )

    def merged(self, other: PhraseTable) -> PhraseTable:
        """This table with other's phrases appended."""
        errors = dict(self.errors)
        for error_type, phrases in other.errors.items():
            errors[error_type] = errors.get(error_type, ()) + phrases
        return replace(
            self,
            up_to_date=self.up_to_date + other.up_to_date,
            username_prompts=self.username_prompts + other.username_prompts,
            password_prompts=self.password_prompts + other.password_prompts,
            passphrase_prompts=self.passphrase_prompts + other.passphrase_prompts,
            file_list_markers=self.file_list_markers + other.file_list_markers,
            file_list_terminators=self.file_list_terminators + other.file_list_terminators,
            conflict_path_patterns=self.conflict_path_patterns + other.conflict_path_patterns,
            errors=errors,
        )


ENGLISH = PhraseTable(
    locale="en",
    up_to_date=(
        ("already up to date", "Already up to date"),
        ("already up-to-date", "Already up to date"),
        ("everything up-to-date", "Everything up-to-date"),
        ("is up to date.", "Already up to date, nothing to rebase."),
    ),
    username_prompts=("username for",),
    password_prompts=("password for",),
    passphrase_prompts=("enter passphrase",),
    file_list_markers=("would be overwritten",),
    file_list_terminators=("please", "aborting"),
    conflict_path_patterns=(
        r"^CONFLICT \([^)]*\): Merge conflict in (.+)$",
        r"^CONFLICT \([^)]*\): (.+?) deleted in ",
    ),
    errors={
        ErrorType.HOST_KEY_FAILURE: ("host key verification failed",),
        ErrorType.AUTHENTICATION_FAILURE: (
            "authentication failed",
            "permission denied",
            "publickey",
        ),
        ErrorType.REMOTE_ACCESS_FAILURE: ("could not read from remote",),
        ErrorType.CONNECTION_REFUSED: ("connection refused",),
        ErrorType.CONNECTION_TIMEOUT: ("connection timed out", "operation timed out"),
        ErrorType.HOST_NOT_FOUND: ("could not resolve host",),
        ErrorType.CHECKOUT_WOULD_OVERWRITE: (
            "would be overwritten by checkout",
            "would be overwritten by merge",
        ),
        ErrorType.DIVERGENT_BRANCHES: (
            "divergent branches",
            "need to specify how to reconcile",
        ),
        ErrorType.REBASE_CONFLICT: (
            "could not apply",
            "git rebase --continue",
        ),
        ErrorType.MERGE_CONFLICT: (
            "automatic merge failed",
            "conflict (",
        ),
        ErrorType.GENERIC_FAILURE: ("fatal:", "error:"),
    },
)

SPANISH = PhraseTable(
    locale="es",
    up_to_date=(
        ("ya está actualizado", "Already up to date"),
        ("todo actualizado", "Everything up-to-date"),
    ),
    username_prompts=("usuario para",),
    password_prompts=("contraseña para",),
    passphrase_prompts=("introduzca la contraseña",),
    file_list_markers=("serían sobrescritos", "serán sobrescritos"),
    file_list_terminators=("por favor", "abortando"),
    conflict_path_patterns=(
        r"^CONFLICTO \([^)]*\): Conflicto de fusión en (.+)$",
    ),
    errors={
        ErrorType.REMOTE_ACCESS_FAILURE: ("no se pudo leer del repositorio remoto",),
        ErrorType.CONNECTION_REFUSED: ("conexión rechazada",),
        ErrorType.CONNECTION_TIMEOUT: ("tiempo de espera agotado",),
        ErrorType.HOST_NOT_FOUND: ("no se pudo resolver",),
        ErrorType.CHECKOUT_WOULD_OVERWRITE: (
            "serían sobrescritos por checkout",
            "serán sobrescritos por checkout",
        ),
        ErrorType.DIVERGENT_BRANCHES: ("ramas divergentes",),
        ErrorType.REBASE_CONFLICT: ("no se pudo aplicar",),
        ErrorType.MERGE_CONFLICT: (
            "fusión automática falló",
            "conflicto (",
        ),
    },
)

PHRASES: dict[str, PhraseTable] = {
    ENGLISH.locale: ENGLISH,
    SPANISH.locale: SPANISH,
}


class PhraseBook:
    """All phrase tables in effect, flattened for lookups.

    Order of locales is preserved; within a category English phrases are
    tried first.
    """

    def __init__(self, tables: dict[str, PhraseTable] | None = None):
        self.tables = dict(tables if tables is not None else PHRASES)
        self._patterns: list[re.Pattern] | None = None

    def _collect(self, attr: str) -> tuple:
        items: tuple = ()
        for table in self.tables.values():
            items += getattr(table, attr)
        return items

    @property
    def up_to_date(self) -> tuple[tuple[str, str], ...]:
        return self._collect("up_to_date")

    @property
    def username_prompts(self) -> tuple[str, ...]:
        return self._collect("username_prompts")

    @property
    def password_prompts(self) -> tuple[str, ...]:
        return self._collect("password_prompts")

    @property
    def passphrase_prompts(self) -> tuple[str, ...]:
        return self._collect("passphrase_prompts")

    @property
    def file_list_markers(self) -> tuple[str, ...]:
        return self._collect("file_list_markers")

    @property
    def file_list_terminators(self) -> tuple[str, ...]:
        return self._collect("file_list_terminators")

    @property
    def conflict_path_patterns(self) -> list[re.Pattern]:
        if self._patterns is None:
            self._patterns = [re.compile(p) for p in self._collect("conflict_path_patterns")]
        return self._patterns

    def error_phrases(self, error_type: ErrorType) -> tuple[str, ...]:
        phrases: tuple[str, ...] = ()
        for table in self.tables.values():
            phrases += table.errors.get(error_type, ())
        return phrases

    def extended(self, extra: dict[str, dict] | None) -> PhraseBook:
        """New book with config-supplied phrases merged in.

        Unknown locales are added; known ones get the extra phrases appended.
        """
        if not extra:
            return self
        tables = dict(self.tables)
        for locale, data in extra.items():
            addition = PhraseTable.from_dict(locale, data)
            if locale in tables:
                tables[locale] = tables[locale].merged(addition)
            else:
                tables[locale] = addition
            logger.debug(f"Loaded extra phrases for locale '{locale}'")
        return PhraseBook(tables)


DEFAULT_PHRASES = PhraseBook()
