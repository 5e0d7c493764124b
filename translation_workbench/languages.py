"""Supported language catalog and name/code mapping helpers."""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional


@dataclass(frozen=True)
class Language:
    """A supported language: locale code, display name and native name."""
    code: str
    name: str
    native_name: str = ''


DEFAULT_LANGUAGES: List[Language] = [
    Language(code='en', name='English', native_name='English'),
    Language(code='id', name='Indonesian', native_name='Bahasa Indonesia'),
    Language(code='zh-CN', name='Chinese Simplified', native_name='简体中文'),
    Language(code='zh-TW', name='Chinese Traditional', native_name='繁體中文'),
]

# Extra spellings accepted for a language code besides its display name.
LANGUAGE_ALIASES: Dict[str, List[str]] = {
    'id': ['bahasa indonesia'],
}


def _normalize_name(name: str) -> str:
    """Lowercase, treat underscores as spaces and collapse whitespace."""
    return re.sub(r'\s+', ' ', name.replace('_', ' ')).strip().lower()


class LanguageCatalog:
    """
    Read-only catalog of the languages the workbench knows about.

    The first entry is the default language. It is used for column priority in
    tables and as the fallback language for badly named single-file uploads.
    """

    def __init__(self, languages: Iterable[Language], aliases: Optional[Dict[str, List[str]]] = None):
        self._languages = list(languages)
        if not self._languages:
            raise ValueError("A language catalog needs at least one language.")
        self._aliases = aliases if aliases is not None else LANGUAGE_ALIASES
        self._by_code: Dict[str, Language] = {lang.code: lang for lang in self._languages}
        self._name_to_code: Dict[str, str] = {}
        for lang in self._languages:
            self._name_to_code[_normalize_name(lang.name)] = lang.code
            for alias in self._aliases.get(lang.code, []):
                self._name_to_code.setdefault(_normalize_name(alias), lang.code)

    def __iter__(self):
        return iter(self._languages)

    def __len__(self) -> int:
        return len(self._languages)

    @property
    def languages(self) -> List[Language]:
        return list(self._languages)

    @property
    def default_language(self) -> Language:
        return self._languages[0]

    def get_language_by_code(self, code: str) -> Optional[Language]:
        return self._by_code.get(code)

    def get_language_by_name(self, name: str) -> Optional[Language]:
        """Find a language by display name or alias, ignoring case, spacing and underscores."""
        code = self._name_to_code.get(_normalize_name(name))
        return self._by_code.get(code) if code else None

    def is_valid_language_code(self, code: str) -> bool:
        return code in self._by_code

    def language_code_to_name(self, code: str) -> str:
        """Return the display name for ``code``, or ``code`` itself when unknown."""
        language = self.get_language_by_code(code)
        return language.name if language else code

    def map_language_name_to_code(self, name: str) -> str:
        """Return the code for a display name, or the name unchanged when unknown."""
        language = self.get_language_by_name(name)
        return language.code if language else name

    def get_file_name_from_language_code(self, code: str) -> str:
        """
        Convert a language code into the file-safe display name used in filenames
        and merged table headers (``zh-CN`` -> ``Chinese_Simplified``).

        Codes are matched exactly first and then case-insensitively; unknown codes
        are returned unchanged.
        """
        language = self.get_language_by_code(code)
        if language is None:
            lowered = code.lower()
            language = next((lang for lang in self._languages if lang.code.lower() == lowered), None)
        if language is None:
            return code
        return re.sub(r'\s+', '_', language.name)


def default_catalog() -> LanguageCatalog:
    """Return a catalog built from ``DEFAULT_LANGUAGES``."""
    return LanguageCatalog(DEFAULT_LANGUAGES)


def build_catalog_from_locales(locales_list: List[Dict[str, str]]) -> LanguageCatalog:
    """
    Build a catalog from the ``supported_locales`` list of the YAML configuration.

    Entries without both a ``code`` and a ``name`` are skipped. An empty or fully
    invalid list falls back to the default catalog.
    """
    languages = []
    for locale in locales_list or []:
        code = locale.get('code')
        name = locale.get('name')
        if code and name:
            languages.append(Language(code=code, name=name, native_name=locale.get('native_name', name)))
    if not languages:
        return default_catalog()
    return LanguageCatalog(languages)


def map_language_name_to_code(name: str, catalog: Optional[LanguageCatalog] = None) -> str:
    """Module-level shortcut for ``LanguageCatalog.map_language_name_to_code``."""
    return (catalog or default_catalog()).map_language_name_to_code(name)
