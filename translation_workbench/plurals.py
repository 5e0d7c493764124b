"""
Helpers for plural translations.

A plural translation holds both forms in one value, separated by a single pipe:
``"1 item | {count} items"``. Both forms must be non-empty.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from translation_workbench.models import MultiLanguageMap, Table, TranslationMap

PLURAL_SEPARATOR = '|'
FILTER_MODES = ('all', 'plural-only', 'singular-only')


@dataclass
class PluralTranslation:
    singular: str
    plural: str
    original: str


def is_plural_translation(value: Optional[str]) -> bool:
    if not value or not isinstance(value, str):
        return False
    parts = value.split(PLURAL_SEPARATOR)
    if len(parts) != 2:
        return False
    return bool(parts[0].strip()) and bool(parts[1].strip())


def parse_plural_translation(value: str) -> Optional[PluralTranslation]:
    if not is_plural_translation(value):
        return None
    singular, plural = value.split(PLURAL_SEPARATOR)
    return PluralTranslation(singular=singular.strip(), plural=plural.strip(), original=value)


def create_plural_translation(singular: str, plural: str) -> str:
    return f'{singular.strip()} {PLURAL_SEPARATOR} {plural.strip()}'


def get_singular_form(value: str) -> str:
    """The singular form, or ``value`` unchanged if it is not a plural translation."""
    parsed = parse_plural_translation(value)
    return parsed.singular if parsed else value


def get_plural_form(value: str) -> str:
    """The plural form, or ``value`` unchanged if it is not a plural translation."""
    parsed = parse_plural_translation(value)
    return parsed.plural if parsed else value


def _check_mode(mode: str) -> None:
    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown plural filter mode: {mode}. Expected one of {', '.join(FILTER_MODES)}")


def _keep(has_plural: bool, mode: str) -> bool:
    if mode == 'plural-only':
        return has_plural
    if mode == 'singular-only':
        return not has_plural
    return True


def filter_map_by_plural_mode(translations: TranslationMap, mode: str) -> TranslationMap:
    _check_mode(mode)
    return {key: value for key, value in translations.items() if _keep(is_plural_translation(value), mode)}


def filter_table_by_plural_mode(table: Table, mode: str) -> Table:
    """Keep rows by whether any language column holds a plural translation."""
    _check_mode(mode)
    rows = [
        dict(row) for row in table.rows
        if _keep(any(is_plural_translation(row.get(h) or '') for h in table.language_columns), mode)
    ]
    return Table(headers=list(table.headers), rows=rows)


def _translations_by_key(multi_map: MultiLanguageMap) -> Dict[str, Dict[str, str]]:
    """Regroup a language -> key -> value map as key -> language -> value."""
    by_key: Dict[str, Dict[str, str]] = {}
    for language, translations in multi_map.items():
        for key, value in translations.items():
            by_key.setdefault(key, {})[language] = value
    return by_key


def filter_multi_map_by_plural_mode(multi_map: MultiLanguageMap, mode: str) -> MultiLanguageMap:
    """
    Keep or drop each key across all languages at once.

    A key counts as plural when any language holds a plural translation for it.
    Every language of the input stays in the result, possibly empty.
    """
    _check_mode(mode)
    kept = {
        key for key, translations in _translations_by_key(multi_map).items()
        if _keep(any(is_plural_translation(v) for v in translations.values()), mode)
    }
    return {
        language: {key: value for key, value in translations.items() if key in kept}
        for language, translations in multi_map.items()
    }


def get_plural_translation_stats(multi_map: MultiLanguageMap) -> Dict[str, float]:
    by_key = _translations_by_key(multi_map)
    total_keys = len(by_key)
    plural_keys = 0
    total_translations = 0
    plural_translations = 0

    for translations in by_key.values():
        plural_count = sum(1 for value in translations.values() if is_plural_translation(value))
        total_translations += len(translations)
        plural_translations += plural_count
        if plural_count:
            plural_keys += 1

    return {
        'total_keys': total_keys,
        'plural_keys': plural_keys,
        'singular_keys': total_keys - plural_keys,
        'total_translations': total_translations,
        'plural_translations': plural_translations,
        'singular_translations': total_translations - plural_translations,
        'plural_key_percentage': plural_keys / total_keys * 100 if total_keys else 0,
        'plural_translation_percentage': plural_translations / total_translations * 100 if total_translations else 0,
    }


def validate_plural_translation(value: Optional[str]) -> List[str]:
    """
    Check a translation value that may hold plural forms.

    Returns:
        List[str]: Problems found; empty for a valid plural or an ordinary value.
    """
    if not value or not isinstance(value, str):
        return ['Translation value is required']

    if value.count(PLURAL_SEPARATOR) != 1:
        return []

    singular, plural = value.split(PLURAL_SEPARATOR)
    errors = []
    if not singular.strip():
        errors.append('Singular form cannot be empty')
    if not plural.strip():
        errors.append('Plural form cannot be empty')
    return errors


def search_plural_translations(
        multi_map: MultiLanguageMap,
        query: str,
        search_in_singular: bool = True,
        search_in_plural: bool = True
) -> List[Dict[str, str]]:
    """
    Find plural translations whose singular and/or plural form contains ``query``.

    Each hit carries ``match_type``: ``singular``, ``plural`` or ``both``.
    """
    needle = query.lower()
    results = []
    for key, translations in _translations_by_key(multi_map).items():
        for language, value in translations.items():
            parsed = parse_plural_translation(value)
            if parsed is None:
                continue
            singular_match = search_in_singular and needle in parsed.singular.lower()
            plural_match = search_in_plural and needle in parsed.plural.lower()
            if not (singular_match or plural_match):
                continue
            if singular_match and plural_match:
                match_type = 'both'
            elif singular_match:
                match_type = 'singular'
            else:
                match_type = 'plural'
            results.append({'key': key, 'language': language, 'value': value, 'match_type': match_type})
    return results
