import logging
from typing import List, Optional, Sequence

from translation_workbench.memoization import TransformCache
from translation_workbench.models import KEY_COLUMN, Table, is_key_header
from translation_workbench.translation_validator import find_duplicates

logger = logging.getLogger(__name__)


def add_column(table: Optional[Table], language_code: str, language_display_name: str) -> Optional[Table]:
    """
    Add a language column to a table.

    Args:
        table: The table to extend. ``None`` is tolerated and returned as-is.
        language_code: Code of the language being added (used for logging only).
        language_display_name: Header of the new column.

    Returns:
        A new Table with the column appended and an empty cell in every row,
        or an unchanged copy if the header already exists.
    """
    if table is None:
        return None

    updated = table.copy()
    if language_display_name in updated.headers:
        return updated

    updated.headers.append(language_display_name)
    for row in updated.rows:
        row[language_display_name] = ''
    logger.debug("Added column '%s' (%s) to %d row(s).", language_display_name, language_code, len(updated.rows))
    return updated


def remove_column(table: Optional[Table], language_display_name: str) -> Optional[Table]:
    """Remove a language column from headers and rows. The key column is never removed."""
    if table is None:
        return None

    updated = table.copy()
    if is_key_header(language_display_name) or language_display_name not in updated.headers:
        return updated

    updated.headers = [h for h in updated.headers if h != language_display_name]
    for row in updated.rows:
        row.pop(language_display_name, None)
    logger.debug("Removed column '%s'.", language_display_name)
    return updated


def check_table_invariants(table: Table) -> List[str]:
    """
    Report violations of the table shape rules.

    Returns:
        List[str]: Human-readable problems; empty when the table is consistent.
    """
    problems = [f'Duplicate header: {header}' for header in find_duplicates(table.headers)]
    header_set = set(table.headers)
    for index, row in enumerate(table.rows):
        if set(row.keys()) != header_set:
            problems.append(f'Row {index + 1} keys do not match headers')
    return problems


def filter_table_languages(
        table: Table,
        selected_languages: Sequence[str],
        cache: Optional[TransformCache] = None
) -> Table:
    """Project a table onto the key column plus the selected language columns, in table order."""
    def build() -> Table:
        selected = set(selected_languages)
        headers = [h for h in table.headers if h == KEY_COLUMN or h in selected]
        rows = [{h: row.get(h, '') for h in headers} for row in table.rows]
        return Table(headers=headers, rows=rows)

    if cache is None:
        return build()
    return cache.get_or_compute('filter_table_languages', (table, sorted(selected_languages)), build)
