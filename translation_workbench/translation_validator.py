import json
import logging
from typing import Any, Dict, List

import jsonschema

from translation_workbench.csv_parser import parse_csv_records
from translation_workbench.models import ValidationIssue, ValidationResult, is_key_header

logger = logging.getLogger(__name__)

# A translation file is a flat JSON object whose values are all strings.
LOCALIZATION_SCHEMA = {
    "type": "object",
    "patternProperties": {
        "^.*$": {"type": "string"}
    },
    "additionalProperties": False
}

_LOCALIZATION_VALIDATOR = jsonschema.Draft7Validator(LOCALIZATION_SCHEMA)


def find_duplicates(items: List[str]) -> List[str]:
    """Return each item that occurs more than once, in order of its first repeat."""
    seen = set()
    duplicates: List[str] = []
    for item in items:
        if item in seen and item not in duplicates:
            duplicates.append(item)
        seen.add(item)
    return duplicates


def _check_string_values(data: Dict[str, Any], errors: List[ValidationIssue], warnings: List[ValidationIssue]) -> None:
    """Flag non-string values as structure errors and blank strings as warnings."""
    invalid_keys = {
        error.path[0] for error in _LOCALIZATION_VALIDATOR.iter_errors(data) if error.path
    }
    for key, value in data.items():
        # Keys containing line breaks escape the pattern and only fail additionalProperties
        if key in invalid_keys or not isinstance(value, str):
            errors.append(ValidationIssue(
                type='structure',
                message=f'Value for key "{key}" must be a string',
                key=key
            ))
        elif value.strip() == '':
            warnings.append(ValidationIssue(
                type='empty_value',
                message=f'Empty value for key: {key}',
                key=key
            ))


def validate_json(content: str) -> ValidationResult:
    """
    Validate JSON text as a flat translation map.

    Duplicate keys cannot be detected here: the decoder keeps the last value
    for a repeated key before validation sees the data.

    Args:
        content: The raw JSON text.

    Returns:
        A ValidationResult. Empty values and an empty object are warnings only.
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError, ValueError, RecursionError) as e:
        logger.debug("JSON decode failed: %s", e)
        errors.append(ValidationIssue(type='syntax', message='Invalid JSON syntax'))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    if not isinstance(data, dict):
        errors.append(ValidationIssue(
            type='structure',
            message='JSON must be an object with key-value pairs'
        ))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    _check_string_values(data, errors, warnings)

    if not data:
        warnings.append(ValidationIssue(type='empty_value', message='JSON object is empty'))

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_translation_data(data: Dict[str, Any]) -> ValidationResult:
    """Validate an already decoded translation map with the same rules as ``validate_json``."""
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    if not data:
        warnings.append(ValidationIssue(type='empty_value', message='Translation data is empty'))

    _check_string_values(data, errors, warnings)
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_csv(content: str) -> ValidationResult:
    """
    Validate CSV text as a translation table.

    Uses the same quote-aware record splitting as the parser, so multi-line
    quoted values are never mistaken for column-count mismatches. Row numbers
    in messages are 1-indexed with the header as row 1.

    Args:
        content: The raw CSV text.

    Returns:
        A ValidationResult. Empty cells in language columns are warnings only.
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    if not content or not content.strip():
        errors.append(ValidationIssue(type='structure', message='CSV file is empty'))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    records = parse_csv_records(content)
    if not records:
        errors.append(ValidationIssue(type='structure', message='CSV file is empty'))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    headers = [h.strip() for h in records[0]]
    if len(headers) < 2:
        errors.append(ValidationIssue(
            type='structure',
            message='CSV must have at least 2 columns (Key and one language)'
        ))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    if not is_key_header(headers[0]):
        errors.append(ValidationIssue(type='structure', message='First column must be named "Key"'))

    for header in find_duplicates(headers):
        errors.append(ValidationIssue(type='duplicate', message=f'Duplicate column header: {header}'))

    seen_keys = set()
    for i in range(1, len(records)):
        values = records[i]
        row_number = i + 1

        if len(values) != len(headers):
            errors.append(ValidationIssue(
                type='structure',
                message=f'Row {row_number} has {len(values)} columns, expected {len(headers)}',
                line=row_number
            ))
            continue

        key = values[0]
        if not key.strip():
            errors.append(ValidationIssue(
                type='missing',
                message=f'Empty key in row {row_number}',
                line=row_number
            ))
            continue

        if key in seen_keys:
            errors.append(ValidationIssue(
                type='duplicate',
                message=f'Duplicate key: {key}',
                line=row_number,
                key=key
            ))
        seen_keys.add(key)

        for j in range(1, len(values)):
            if not values[j].strip():
                warnings.append(ValidationIssue(
                    type='empty_value',
                    message=f'Empty value for key "{key}" in column "{headers[j]}"',
                    key=key
                ))

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_text_input(content: str, text_format: str) -> ValidationResult:
    """Validate pasted text as ``json`` or ``csv``."""
    if text_format == 'json':
        return validate_json(content)
    if text_format == 'csv':
        return validate_csv(content)
    return ValidationResult(
        is_valid=False,
        errors=[ValidationIssue(type='structure', message=f'Unsupported format: {text_format}')]
    )
