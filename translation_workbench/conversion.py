import json
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from translation_workbench.csv_parser import serialize_csv, table_to_csv
from translation_workbench.languages import Language, LanguageCatalog, default_catalog
from translation_workbench.memoization import TransformCache
from translation_workbench.models import (
    KEY_COLUMN,
    ConversionError,
    ConversionOptions,
    MultiLanguageMap,
    Table,
    TranslationMap,
    TranslationSource,
    is_key_header,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('json', 'csv')


def _with_default_first(languages: Sequence[Language], catalog: LanguageCatalog) -> List[Language]:
    """Move the catalog's default language (matched by display name) to the front."""
    default_name = catalog.default_language.name.lower()
    default = next((lang for lang in languages if lang.name.lower() == default_name), None)
    if default is None:
        return list(languages)
    return [default] + [lang for lang in languages if lang is not default]


def _sorted_key_union(maps: Iterable[TranslationMap]) -> List[str]:
    all_keys = set()
    for translations in maps:
        all_keys.update(translations.keys())
    return sorted(all_keys)


def single_map_to_csv(translations: TranslationMap, language_display_name: str = 'English') -> str:
    """
    Convert one translation map into a two-column CSV (``Key`` + one language).

    Args:
        translations: The key/value map.
        language_display_name: Header of the value column.

    Returns:
        CSV text in export format.
    """
    rows = [[KEY_COLUMN, language_display_name]]
    rows.extend([key, value] for key, value in translations.items())
    return serialize_csv(rows)


def multi_map_to_table(
        multi_map: MultiLanguageMap,
        languages: Sequence[Language],
        catalog: Optional[LanguageCatalog] = None,
        cache: Optional[TransformCache] = None
) -> Table:
    """
    Build a wide table with one column per language from a code-keyed multi-language map.

    The default language's column comes first; rows are the sorted union of all
    keys and missing translations become empty strings.

    Args:
        multi_map: Language code -> translation map.
        languages: Languages to emit, in caller order.
        catalog: Catalog that names the default language.
        cache: Optional caller-owned cache for repeated conversions.

    Returns:
        Table: A new table.
    """
    catalog = catalog or default_catalog()

    def build() -> Table:
        ordered = _with_default_first(languages, catalog)
        headers = [KEY_COLUMN] + [lang.name for lang in ordered]
        rows = []
        for key in _sorted_key_union(multi_map.values()):
            row = {KEY_COLUMN: key}
            for lang in ordered:
                row[lang.name] = multi_map.get(lang.code, {}).get(key) or ''
            rows.append(row)
        return Table(headers=headers, rows=rows)

    if cache is None:
        return build()
    return cache.get_or_compute('multi_map_to_table', (multi_map, list(languages)), build)


def multi_map_to_csv(
        multi_map: MultiLanguageMap,
        languages: Sequence[Language],
        catalog: Optional[LanguageCatalog] = None
) -> str:
    """Convert a code-keyed multi-language map into wide CSV text (see ``multi_map_to_table``)."""
    return table_to_csv(multi_map_to_table(multi_map, languages, catalog))


def csv_to_single_map(table: Table, target_language: Optional[str] = None) -> TranslationMap:
    """
    Extract one language column of a table as a translation map.

    Rows whose trimmed key or value is empty are left out. Empty cells are
    usually untranslated keys, and dropping them keeps exported JSON clean,
    so a CSV round trip does not preserve empty values.

    Args:
        table: The source table.
        target_language: Header of the column to extract; the first language
            column when omitted.

    Returns:
        TranslationMap: The extracted translations.

    Raises:
        ConversionError: If the table has no language column.
    """
    language_column = target_language or next(iter(table.language_columns), None)
    if not language_column:
        raise ConversionError('No language column found in CSV')

    key_column = next((h for h in table.headers if is_key_header(h)), KEY_COLUMN)

    result: TranslationMap = {}
    for row in table.rows:
        key = (row.get(key_column) or '').strip()
        value = (row.get(language_column) or '').strip()
        if key and value:
            result[key] = value
    return result


def csv_to_multi_map(table: Table, catalog: Optional[LanguageCatalog] = None) -> MultiLanguageMap:
    """
    Split a table into one translation map per language column.

    Column headers are display names; the result is keyed by the language code
    the catalog maps each header to. Unknown headers are kept as-is.
    """
    catalog = catalog or default_catalog()
    result: MultiLanguageMap = {}
    for column in table.language_columns:
        code = catalog.map_language_name_to_code(column)
        result[code] = csv_to_single_map(table, column)
    return result


def merge_to_csv(
        uploads: Sequence[Tuple[str, TranslationMap]],
        catalog: Optional[LanguageCatalog] = None
) -> Table:
    """
    Merge several single-language uploads into one table.

    Each upload is ``(language_code, translations)``. Language columns are the
    file-safe display names (``Chinese_Simplified``) sorted alphabetically;
    rows are the sorted union of keys. A later upload for the same language
    replaces an earlier one.
    """
    catalog = catalog or default_catalog()
    language_data: Dict[str, TranslationMap] = {}
    for language_code, translations in uploads:
        language_data[catalog.get_file_name_from_language_code(language_code)] = translations

    language_names = sorted(language_data.keys())
    rows = []
    for key in _sorted_key_union(language_data.values()):
        row = {KEY_COLUMN: key}
        for name in language_names:
            row[name] = language_data[name].get(key) or ''
        rows.append(row)

    logger.debug("Merged %d upload(s) into %d row(s).", len(uploads), len(rows))
    return Table(headers=[KEY_COLUMN] + language_names, rows=rows)


def merge_tables(first: Table, second: Table) -> Table:
    """
    Merge two tables by key.

    Headers are the ordered union of both header lists. For keys present in
    both tables the second table's cells win. Rows without a key are skipped.
    """
    headers: List[str] = []
    for header in first.headers + second.headers:
        if header not in headers:
            headers.append(header)

    merged: Dict[str, Dict[str, str]] = {}
    for table in (first, second):
        for row in table.rows:
            key = row.get(KEY_COLUMN)
            if not key:
                continue
            merged.setdefault(key, {}).update(row)

    rows = [{header: merged_row.get(header) or '' for header in headers} for merged_row in merged.values()]
    return Table(headers=headers, rows=rows)


def translation_stats(multi_map: MultiLanguageMap, language_codes: Sequence[str]) -> Dict[str, int]:
    """Count completed, empty and missing translations over the union of keys."""
    stats = {
        'total_languages': len(language_codes),
        'total_keys': 0,
        'completed_translations': 0,
        'missing_translations': 0,
        'empty_values': 0,
    }
    all_keys = _sorted_key_union(multi_map.values())
    stats['total_keys'] = len(all_keys)
    for key in all_keys:
        for code in language_codes:
            translations = multi_map.get(code)
            if translations is None or key not in translations:
                stats['missing_translations'] += 1
            elif translations[key] and translations[key].strip():
                stats['completed_translations'] += 1
            else:
                stats['empty_values'] += 1
    return stats


def to_json_text(translations: TranslationMap) -> str:
    """Render a translation map as pretty-printed JSON (2-space indent, UTF-8 kept)."""
    return json.dumps(translations, indent=2, ensure_ascii=False)


def export_multiple_json(
        multi_map: MultiLanguageMap,
        base_filename: str = 'translations',
        catalog: Optional[LanguageCatalog] = None
) -> Dict[str, str]:
    """Render one JSON document per language, named ``{base}_{Display_Name}.json``."""
    catalog = catalog or default_catalog()
    files = {}
    for language_code, translations in multi_map.items():
        filename = f"{base_filename}_{catalog.get_file_name_from_language_code(language_code)}.json"
        files[filename] = to_json_text(translations)
    return files


def validate_conversion_options(options: ConversionOptions) -> Tuple[bool, List[str]]:
    """
    Check that a conversion request is complete.

    Returns:
        Tuple[bool, List[str]]: Whether the options are valid, and the problems found.
    """
    errors = []
    if not options.source_format or not options.target_format:
        errors.append('Source and target formats are required')
    if options.source_format == options.target_format:
        errors.append('Source and target formats cannot be the same')
    if not options.languages:
        errors.append('At least one language must be specified')
    return not errors, errors


def get_supported_conversions() -> List[Dict[str, str]]:
    return [
        {
            'from': 'json',
            'to': 'csv',
            'description': 'Convert JSON translation files to CSV format with language columns'
        },
        {
            'from': 'csv',
            'to': 'json',
            'description': 'Convert CSV translation files to JSON format (single or multiple files)'
        },
    ]


def _format_size(estimated_bytes: float) -> Tuple[float, str]:
    if estimated_bytes < 1024:
        return estimated_bytes, 'bytes'
    if estimated_bytes < 1024 * 1024:
        return round(estimated_bytes / 1024), 'KB'
    return round(estimated_bytes / (1024 * 1024)), 'MB'


def estimate_output_size(source: TranslationSource, options: ConversionOptions) -> Tuple[float, str]:
    """
    Roughly estimate the size of a conversion result from average key and value lengths.

    The figure is advisory only. Sources that do not fit the requested
    direction, or are empty, estimate to zero bytes.
    """
    estimated_bytes = 0.0

    if options.source_format == 'json' and options.target_format == 'csv' and source.is_flat_map:
        entries = list(source.payload.items())
        if entries:
            avg_key_length = sum(len(key) for key, _ in entries) / len(entries)
            avg_value_length = sum(len(value) for _, value in entries) / len(entries)
            header_size = sum(len(lang.name) for lang in options.languages) + 10
            row_size = (avg_key_length + avg_value_length * len(options.languages) + 10) * len(entries)
            estimated_bytes = header_size + row_size

    elif options.source_format == 'csv' and options.target_format == 'json' and source.is_table:
        table = source.payload
        if table.rows:
            avg_key_length = sum(len(row.get(KEY_COLUMN, '')) for row in table.rows) / len(table.rows)
            per_row_averages = []
            for row in table.rows:
                values = [row.get(column, '') for column in table.language_columns]
                per_row_averages.append(sum(len(v) for v in values) / len(values) if values else 0)
            avg_value_length = sum(per_row_averages) / len(table.rows)
            estimated_bytes = (avg_key_length + avg_value_length + 20) * len(table.rows) * len(options.languages)

    return _format_size(estimated_bytes)


def get_conversion_preview(source: TranslationSource, options: ConversionOptions, max_rows: int = 10) -> str:
    """
    Render the first ``max_rows`` rows/entries of a conversion result.

    Truncated CSV previews end with a ``...`` line; truncated JSON previews end
    with a ``"...": "..."`` entry. Conversion failures are returned as text.
    """
    max_rows = max(0, max_rows)
    try:
        if options.source_format == 'json' and options.target_format == 'csv':
            if not source.is_flat_map:
                return 'Invalid JSON data'
            language = options.languages[0] if options.languages else default_catalog().default_language
            lines = single_map_to_csv(source.payload, language.name).split('\n')
            preview = '\n'.join(lines[:max_rows + 1])
            if len(lines) > max_rows + 1:
                preview += '\n...'
            return preview

        if options.source_format == 'csv' and options.target_format == 'json':
            if not source.is_table:
                return 'Invalid CSV data'
            target_language = options.languages[0].name if options.languages else None
            entries = list(csv_to_single_map(source.payload, target_language).items())
            shown = dict(entries[:max_rows])
            if len(entries) > max_rows:
                shown['...'] = '...'
            return to_json_text(shown)
    except ConversionError as e:
        logger.warning("Conversion preview failed: %s", e)
        return f'Preview error: {e}'

    return 'Preview not available'
