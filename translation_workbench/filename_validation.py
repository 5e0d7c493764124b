import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from translation_workbench.languages import Language, LanguageCatalog, default_catalog

logger = logging.getLogger(__name__)

FILENAME_PREFIX = 'translations_'
_JSON_EXTENSION = re.compile(r'\.json$', re.IGNORECASE)


@dataclass
class FilenameValidationResult:
    is_valid: bool
    language_code: Optional[str] = None
    language: Optional[Language] = None
    error: Optional[str] = None
    expected_filenames: List[str] = field(default_factory=list)
    fallback_applied: bool = False
    warning_message: Optional[str] = None


@dataclass
class BatchFilenameValidation:
    """Outcome of validating the filenames of a multi-file upload."""
    valid: List[str] = field(default_factory=list)
    invalid: Dict[str, str] = field(default_factory=dict)
    duplicate_languages: List[str] = field(default_factory=list)


@dataclass
class MixedUploadValidation:
    csv_files: List[str] = field(default_factory=list)
    json_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def get_expected_filenames(catalog: Optional[LanguageCatalog] = None) -> List[str]:
    """List the conventional filename of every supported language."""
    catalog = catalog or default_catalog()
    return [
        f"{FILENAME_PREFIX}{catalog.get_file_name_from_language_code(lang.code)}.json"
        for lang in catalog
    ]


def get_filename_examples(catalog: Optional[LanguageCatalog] = None) -> List[Dict[str, object]]:
    catalog = catalog or default_catalog()
    return [
        {'language': lang, 'filename': f"{FILENAME_PREFIX}{catalog.get_file_name_from_language_code(lang.code)}.json"}
        for lang in catalog
    ]


def is_csv_file(filename: str) -> bool:
    return filename.lower().endswith('.csv')


def is_json_file(filename: str) -> bool:
    return filename.lower().endswith('.json')


def validate_json_filename(filename: str, catalog: Optional[LanguageCatalog] = None) -> FilenameValidationResult:
    """
    Match a filename against ``translations_{Display_Name}.json``.

    The display name part is compared exactly, with spaces written as underscores.

    Args:
        filename: The uploaded file's name.
        catalog: Supported languages; the default catalog when omitted.

    Returns:
        FilenameValidationResult: The resolved language, or an error with the expected filenames.
    """
    catalog = catalog or default_catalog()
    name_without_ext = _JSON_EXTENSION.sub('', filename)

    if not name_without_ext.startswith(FILENAME_PREFIX):
        return FilenameValidationResult(
            is_valid=False,
            error=f'Filename must start with "{FILENAME_PREFIX}"',
            expected_filenames=get_expected_filenames(catalog)
        )

    language_part = name_without_ext[len(FILENAME_PREFIX):]
    language = next(
        (lang for lang in catalog if catalog.get_file_name_from_language_code(lang.code) == language_part),
        None
    )
    if language is None:
        return FilenameValidationResult(
            is_valid=False,
            error=f'Invalid language name "{language_part}". Must be one of the supported language names.',
            expected_filenames=get_expected_filenames(catalog)
        )

    return FilenameValidationResult(is_valid=True, language_code=language.code, language=language)


def validate_json_filename_with_fallback(
        filename: str,
        allow_fallback: bool = True,
        catalog: Optional[LanguageCatalog] = None
) -> FilenameValidationResult:
    """
    Validate a single-upload filename, assigning the default language when it does not follow the convention.

    Returns:
        FilenameValidationResult: The strict result when valid or when fallback is
        disabled; otherwise a valid result for the default language with
        ``fallback_applied`` set and a warning naming the expected filenames.
    """
    catalog = catalog or default_catalog()
    strict_result = validate_json_filename(filename, catalog)
    if strict_result.is_valid or not allow_fallback:
        return strict_result

    default_language = catalog.default_language
    expected = get_expected_filenames(catalog)
    warning_message = (
        f'Filename "{filename}" doesn\'t follow the expected naming convention. '
        f'File processed as {default_language.name} translations. '
        f'For better organization, use: {", ".join(expected)}'
    )
    logger.warning(warning_message)
    return FilenameValidationResult(
        is_valid=True,
        language_code=default_language.code,
        language=default_language,
        expected_filenames=expected,
        fallback_applied=True,
        warning_message=warning_message
    )


def validate_multiple_json_files(
        filenames: Sequence[str],
        catalog: Optional[LanguageCatalog] = None
) -> BatchFilenameValidation:
    """
    Strictly validate the filenames of a multi-file upload.

    Non-JSON files, unconventional names and a second file for an already
    claimed language are reported per file; the rest of the batch stays valid.
    """
    catalog = catalog or default_catalog()
    batch = BatchFilenameValidation()
    seen_languages = set()

    for filename in filenames:
        if not is_json_file(filename):
            batch.invalid[filename] = 'Only JSON files are allowed for multiple upload'
            continue

        validation = validate_json_filename(filename, catalog)
        if not validation.is_valid:
            batch.invalid[filename] = validation.error or 'Invalid filename'
            continue

        if validation.language_code in seen_languages:
            batch.duplicate_languages.append(validation.language_code)
            batch.invalid[filename] = (
                f'Duplicate language: {validation.language.name}. Only one file per language is allowed.'
            )
            continue

        seen_languages.add(validation.language_code)
        batch.valid.append(filename)

    return batch


def validate_mixed_file_upload(filenames: Sequence[str]) -> MixedUploadValidation:
    """Sort an upload into CSV and JSON files; at most one CSV, and never CSV together with JSON."""
    result = MixedUploadValidation()
    for filename in filenames:
        if is_csv_file(filename):
            result.csv_files.append(filename)
        elif is_json_file(filename):
            result.json_files.append(filename)
        else:
            result.errors.append(f'Unsupported file type: {filename}')

    if len(result.csv_files) > 1:
        result.errors.append('Only one CSV file is allowed per upload')
    if result.csv_files and result.json_files:
        result.errors.append('Cannot upload CSV and JSON files together. Please upload them separately.')
    return result
