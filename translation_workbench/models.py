"""Data structures shared by the parser, validators, converters and editors."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# Canonical spelling of the key column header.
KEY_COLUMN = 'Key'

TranslationMap = Dict[str, str]
MultiLanguageMap = Dict[str, TranslationMap]
TableRow = Dict[str, str]


class WorkbenchError(Exception):
    """Base class for exceptional conditions raised by the workbench core."""


class ConversionError(WorkbenchError):
    """Raised when data cannot be converted (e.g. a table without language columns)."""


class UploadError(WorkbenchError):
    """Raised inside the upload pipeline; always converted into a failed UploadResult."""


def is_key_header(header: str) -> bool:
    """True if ``header`` names the key column, in any capitalization."""
    return header.strip().lower() == KEY_COLUMN.lower()


@dataclass
class Table:
    """
    A CSV-shaped translation table.

    ``headers[0]`` is the key column. Every row holds a value for every header.
    """
    headers: List[str] = field(default_factory=list)
    rows: List[TableRow] = field(default_factory=list)

    @property
    def language_columns(self) -> List[str]:
        return [h for h in self.headers if not is_key_header(h)]

    def copy(self) -> 'Table':
        """Copy headers and every row so the result shares no mutable state with ``self``."""
        return Table(headers=list(self.headers), rows=[dict(row) for row in self.rows])

    def find_row_index(self, key: str) -> int:
        for index, row in enumerate(self.rows):
            if row.get(KEY_COLUMN) == key:
                return index
        return -1

    def has_key(self, key: str) -> bool:
        return self.find_row_index(key) != -1


@dataclass
class ValidationIssue:
    """One error or warning. ``type`` is syntax/structure/duplicate/missing/empty_value."""
    type: str
    message: str
    line: Optional[int] = None
    key: Optional[str] = None


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def first_error_message(self) -> Optional[str]:
        return self.errors[0].message if self.errors else None


@dataclass
class EditRequest:
    original_key: str
    original_value: str
    new_key: str
    new_value: str
    language: Optional[str] = None


@dataclass
class DeleteRequest:
    key: str
    value: str = ''
    language: Optional[str] = None


@dataclass
class OperationResult:
    """
    Uniform outcome of an edit or delete.

    ``data`` echoes the request on success. ``updated`` carries the new top-level
    container; the container passed in is never modified.
    """
    success: bool
    data: Optional[Union[EditRequest, DeleteRequest]] = None
    error: Optional[str] = None
    updated: Any = None


SOURCE_FLAT_MAP = 'flatMap'
SOURCE_TABLE = 'table'


@dataclass
class TranslationSource:
    """Explicitly tagged uploaded data: a flat translation map or a table."""
    kind: str
    payload: Union[TranslationMap, Table]

    @classmethod
    def flat_map(cls, data: TranslationMap) -> 'TranslationSource':
        return cls(kind=SOURCE_FLAT_MAP, payload=data)

    @classmethod
    def table(cls, data: Table) -> 'TranslationSource':
        return cls(kind=SOURCE_TABLE, payload=data)

    @property
    def is_flat_map(self) -> bool:
        return self.kind == SOURCE_FLAT_MAP

    @property
    def is_table(self) -> bool:
        return self.kind == SOURCE_TABLE


@dataclass
class ConversionOptions:
    """Requested conversion: ``json`` -> ``csv`` or ``csv`` -> ``json`` for some languages."""
    source_format: Optional[str]
    target_format: Optional[str]
    languages: list = field(default_factory=list)
