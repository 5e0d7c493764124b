from typing import Iterable, List, Optional

from translation_workbench.models import KEY_COLUMN, Table, is_key_header


def parse_csv_records(content: str) -> List[List[str]]:
    """
    Split CSV text into records of fields, keeping field text as written.

    A double quote opens a quoted field only as the field's first character;
    anywhere else it is literal text (``5" screen``). A quoted field may
    contain commas, line breaks and doubled quotes (``""``). A record ends at a
    line break only when no quoted field is open, so records spanning several
    physical lines are reassembled. Blank lines and records whose fields are
    all empty after trimming are dropped.

    Args:
        content (str): The raw CSV text.

    Returns:
        List[List[str]]: The records, each a list of field values.
    """
    lines = content.replace('\r\n', '\n').replace('\r', '\n').split('\n')
    records: List[List[str]] = []
    current_record: List[str] = []
    current_field = ''
    in_quotes = False
    field_started = False
    record_started = False

    for line in lines:
        i = 0
        while i < len(line):
            char = line[i]
            if in_quotes:
                if char == '"' and i + 1 < len(line) and line[i + 1] == '"':
                    # Escaped quote inside a quoted field
                    current_field += '"'
                    i += 1
                elif char == '"':
                    in_quotes = False
                else:
                    current_field += char
            elif char == '"' and not field_started:
                in_quotes = True
                field_started = True
            elif char == ',':
                current_record.append(current_field)
                current_field = ''
                field_started = False
            else:
                current_field += char
                field_started = True
            record_started = True
            i += 1

        if in_quotes:
            # The line break belongs to the open quoted field
            current_field += '\n'
        elif record_started:
            current_record.append(current_field)
            if any(f.strip() for f in current_record):
                records.append(current_record)
            current_record = []
            current_field = ''
            field_started = False
            record_started = False

    # An unterminated quote swallows the rest of the input into one field
    if in_quotes and record_started:
        current_record.append(current_field.rstrip('\n'))
        if any(f.strip() for f in current_record):
            records.append(current_record)

    return records


def reorder_columns_with_default_priority(headers: List[str], default_language_name: str = 'English') -> List[str]:
    """
    Put the key column first and the default language column second.

    The default language column is matched case-insensitively by display name.
    All other columns keep their original relative order.
    """
    key_column = next((h for h in headers if is_key_header(h)), None)
    language_columns = [h for h in headers if not is_key_header(h)]
    default_lower = default_language_name.lower()
    default_index = next((i for i, h in enumerate(language_columns) if h.lower() == default_lower), None)

    reordered = []
    if key_column is not None:
        reordered.append(key_column)
    if default_index is not None:
        reordered.append(language_columns.pop(default_index))
    reordered.extend(language_columns)
    return reordered


def parse_csv(content: str, default_language_name: str = 'English') -> Table:
    """
    Parse CSV text into a Table.

    The key header is recognized in any capitalization and renamed to ``Key``.
    Columns are reordered with ``reorder_columns_with_default_priority`` and every
    row is projected onto the final headers, missing cells becoming ``''``.

    Args:
        content (str): The raw CSV text.
        default_language_name (str): Display name of the language placed second.

    Returns:
        Table: The parsed table. Empty input yields a table without headers.
    """
    records = parse_csv_records(content)
    if not records:
        return Table()

    original_headers = [KEY_COLUMN if is_key_header(h) else h.strip() for h in records[0]]
    headers = reorder_columns_with_default_priority(original_headers, default_language_name)

    rows = []
    for values in records[1:]:
        by_header = {}
        for index, header in enumerate(original_headers):
            # First occurrence wins for duplicated headers
            if header not in by_header:
                by_header[header] = values[index] if index < len(values) else ''
        rows.append({header: by_header.get(header, '') for header in headers})

    return Table(headers=headers, rows=rows)


def quote_csv_cell(cell: Optional[str]) -> str:
    """Wrap a cell in double quotes, doubling any quote it contains."""
    text = '' if cell is None else str(cell)
    return '"' + text.replace('"', '""') + '"'


def serialize_csv(rows: Iterable[Iterable[str]]) -> str:
    """Render rows as CSV: every field quoted, fields joined by ``,``, rows by ``\\n``."""
    return '\n'.join(','.join(quote_csv_cell(cell) for cell in row) for row in rows)


def table_to_csv(table: Table) -> str:
    """Serialize a Table in export format, header row first."""
    lines = [table.headers]
    for row in table.rows:
        lines.append([row.get(header, '') for header in table.headers])
    return serialize_csv(lines)


def get_languages_from_table(table: Table) -> List[str]:
    """Return the language column headers of ``table`` (everything but the key column)."""
    return table.language_columns
