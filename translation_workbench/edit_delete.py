"""
Edit and delete operations over the three in-memory shapes of translation data:
a flat translation map, a table and a multi-language map.

Every operation returns an OperationResult whose ``updated`` field is a new
top-level container. The container passed in is never modified.
"""
import logging
import re
from typing import Callable, Optional

from translation_workbench.language_columns import add_column
from translation_workbench.languages import LanguageCatalog, default_catalog
from translation_workbench.models import (
    KEY_COLUMN,
    DeleteRequest,
    EditRequest,
    MultiLanguageMap,
    OperationResult,
    Table,
    TranslationMap,
)

logger = logging.getLogger(__name__)

MIN_KEY_LENGTH = 2
MAX_VALUE_LENGTH = 1000
KEY_PATTERN = re.compile(r'^[a-zA-Z0-9._-]+$')

LANGUAGE_NOT_FOUND = 'Language not found in multi-language data'


def validate_edit_request(request: EditRequest) -> Optional[str]:
    """
    Check the new key and value of an edit.

    Rules are checked in order and only the first failure is reported.

    Returns:
        Optional[str]: The failure message, or None if the request is acceptable.
    """
    if not request.new_key.strip():
        return 'Translation key cannot be empty'
    if not request.new_value.strip():
        return 'Translation value cannot be empty'
    if len(request.new_key) < MIN_KEY_LENGTH:
        return f'Translation key must be at least {MIN_KEY_LENGTH} characters'
    if len(request.new_value) > MAX_VALUE_LENGTH:
        return f'Translation value must be less than {MAX_VALUE_LENGTH} characters'
    if not KEY_PATTERN.match(request.new_key):
        return 'Translation key can only contain letters, numbers, dots, underscores, and hyphens'
    return None


def _guarded(operation: Callable[[], OperationResult], description: str) -> OperationResult:
    """Run an operation, turning unexpected exceptions into a failed result."""
    try:
        return operation()
    except Exception as e:
        logger.error("Unexpected error during %s: %s", description, e, exc_info=True)
        return OperationResult(success=False, error=str(e) or 'Unknown error')


def _is_rename(request: EditRequest) -> bool:
    return request.original_key != request.new_key


def _edit_map(translations: TranslationMap, request: EditRequest, location: str = '') -> OperationResult:
    if request.original_key not in translations:
        return OperationResult(success=False, error=f'Original translation key not found{location}')
    if _is_rename(request) and request.new_key in translations:
        return OperationResult(success=False, error=f'New translation key already exists{location}')

    # Rebuild to keep the renamed key at its original position
    updated: TranslationMap = {}
    for key, value in translations.items():
        if key == request.original_key:
            updated[request.new_key] = request.new_value
        else:
            updated[key] = value
    return OperationResult(success=True, data=request, updated=updated)


def _delete_from_map(translations: TranslationMap, request: DeleteRequest, not_found: str) -> OperationResult:
    if request.key not in translations:
        return OperationResult(success=False, error=not_found)
    updated = {key: value for key, value in translations.items() if key != request.key}
    return OperationResult(success=True, data=request, updated=updated)


def _resolve_language(multi_map: MultiLanguageMap, language: Optional[str],
                      catalog: Optional[LanguageCatalog]) -> Optional[str]:
    """Find the multi-map entry for a language given as a code or a display name."""
    if not language:
        return None
    if language in multi_map:
        return language
    code = (catalog or default_catalog()).map_language_name_to_code(language)
    return code if code in multi_map else None


def edit_in_map(translations: TranslationMap, request: EditRequest) -> OperationResult:
    """Edit (and optionally rename) one entry of a flat translation map."""
    return _guarded(lambda: _edit_map(translations, request), 'map edit')


def edit_in_table(table: Table, request: EditRequest) -> OperationResult:
    """
    Edit one row of a table.

    The value goes into ``request.language``'s column. Without a language the
    first language column is used; an unknown language becomes a new column.
    """
    def operation() -> OperationResult:
        if not table.has_key(request.original_key):
            return OperationResult(success=False, error='Original translation key not found in CSV data')
        if _is_rename(request) and table.has_key(request.new_key):
            return OperationResult(success=False, error='New translation key already exists in CSV data')

        updated = table.copy()
        column = request.language
        if column and column not in updated.headers:
            updated = add_column(updated, column, column)
        elif not column:
            column = next(iter(updated.language_columns), None)

        row = updated.rows[updated.find_row_index(request.original_key)]
        row[KEY_COLUMN] = request.new_key
        if column:
            row[column] = request.new_value
        return OperationResult(success=True, data=request, updated=updated)

    return _guarded(operation, 'table edit')


def edit_in_multi_map(multi_map: MultiLanguageMap, request: EditRequest,
                      catalog: Optional[LanguageCatalog] = None) -> OperationResult:
    """Edit one entry in the language named by ``request.language``; other languages are untouched."""
    def operation() -> OperationResult:
        language = _resolve_language(multi_map, request.language, catalog)
        if language is None:
            return OperationResult(success=False, error=LANGUAGE_NOT_FOUND)

        result = _edit_map(multi_map[language], request)
        if not result.success:
            return result
        updated = dict(multi_map)
        updated[language] = result.updated
        return OperationResult(success=True, data=request, updated=updated)

    return _guarded(operation, 'multi-language edit')


def delete_from_map(translations: TranslationMap, request: DeleteRequest) -> OperationResult:
    """Delete one key from a flat translation map."""
    return _guarded(lambda: _delete_from_map(translations, request, 'Translation key not found'), 'map delete')


def delete_from_table(table: Table, request: DeleteRequest) -> OperationResult:
    """Delete the row holding ``request.key``."""
    def operation() -> OperationResult:
        index = table.find_row_index(request.key)
        if index == -1:
            return OperationResult(success=False, error='Translation key not found in CSV data')
        updated = table.copy()
        del updated.rows[index]
        return OperationResult(success=True, data=request, updated=updated)

    return _guarded(operation, 'table delete')


def delete_from_multi_map(multi_map: MultiLanguageMap, request: DeleteRequest,
                          catalog: Optional[LanguageCatalog] = None) -> OperationResult:
    """
    Delete a key from one language, or from every language when none is given.

    Args:
        multi_map: Language code -> translation map.
        request: The key, and optionally the language (code or display name).
        catalog: Catalog used to resolve display names.

    Returns:
        OperationResult: ``updated`` holds the new multi-language map.
    """
    def operation() -> OperationResult:
        if request.language:
            language = _resolve_language(multi_map, request.language, catalog)
            if language is None:
                return OperationResult(success=False, error=LANGUAGE_NOT_FOUND)
            result = _delete_from_map(
                multi_map[language], request, 'Translation key not found in specified language'
            )
            if not result.success:
                return result
            updated = dict(multi_map)
            updated[language] = result.updated
            return OperationResult(success=True, data=request, updated=updated)

        if not any(request.key in translations for translations in multi_map.values()):
            return OperationResult(success=False, error='Translation key not found in any language')
        updated = {
            language: {key: value for key, value in translations.items() if key != request.key}
            for language, translations in multi_map.items()
        }
        return OperationResult(success=True, data=request, updated=updated)

    return _guarded(operation, 'multi-language delete')
