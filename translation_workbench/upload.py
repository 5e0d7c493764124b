"""
Upload pipeline: turn a raw text blob and its filename into validated, tagged
translation data. I/O stays with the caller; this module only sees text.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from translation_workbench.csv_parser import parse_csv
from translation_workbench.filename_validation import (
    validate_json_filename,
    validate_json_filename_with_fallback,
    validate_multiple_json_files,
)
from translation_workbench.languages import LanguageCatalog, default_catalog
from translation_workbench.models import TranslationSource, UploadError, ValidationResult
from translation_workbench.translation_validator import validate_csv, validate_json

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_MB = 10
SUPPORTED_EXTENSIONS = ('json', 'csv')


@dataclass
class UploadResult:
    success: bool
    format: Optional[str] = None
    source: Optional[TranslationSource] = None
    filename: Optional[str] = None
    language_code: Optional[str] = None
    fallback_applied: bool = False
    warning_message: Optional[str] = None
    validation: Optional[ValidationResult] = None
    error: Optional[str] = None


@dataclass
class MultipleUploadResult:
    success: bool
    files: List[UploadResult] = field(default_factory=list)
    valid_files: int = 0
    invalid_files: int = 0
    errors: List[str] = field(default_factory=list)


def get_file_extension(filename: str) -> str:
    if '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


def _format_mb(max_file_size_mb: float) -> str:
    return f'{max_file_size_mb:g}MB'


def _content_size(content: str, size: Optional[int]) -> int:
    return size if size is not None else len(content.encode('utf-8'))


def validate_file_before_upload(filename: str, size: int,
                                max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB) -> Tuple[bool, Optional[str]]:
    """Cheap pre-check on name and size before any content is read."""
    if size > max_file_size_mb * 1024 * 1024:
        return False, f'File "{filename}" exceeds {_format_mb(max_file_size_mb)} size limit'
    if get_file_extension(filename) not in SUPPORTED_EXTENSIONS:
        return False, f'File "{filename}" has unsupported format. Only JSON and CSV files are allowed.'
    return True, None


def _load_json(content: str, validation: ValidationResult) -> TranslationSource:
    if not validation.is_valid:
        raise UploadError(f'JSON validation failed: {validation.first_error_message}')
    return TranslationSource.flat_map(json.loads(content))


def _load_csv(content: str, validation: ValidationResult, default_language_name: str) -> TranslationSource:
    if not validation.is_valid:
        raise UploadError(f'CSV validation failed: {validation.first_error_message}')
    return TranslationSource.table(parse_csv(content, default_language_name))


def process_upload(
        content: str,
        filename: str,
        size: Optional[int] = None,
        max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB,
        catalog: Optional[LanguageCatalog] = None
) -> UploadResult:
    """
    Validate and parse one uploaded file.

    JSON filenames that do not follow the naming convention fall back to the
    default language with a warning. Every failure is returned as an
    unsuccessful UploadResult carrying the first actionable message.

    Args:
        content: The file's text.
        filename: The file's name; its extension selects the format.
        size: Size in bytes, when known; otherwise the UTF-8 length of ``content``.
        max_file_size_mb: Upload size limit.
        catalog: Supported languages.

    Returns:
        UploadResult: Tagged data plus validation and language information.
    """
    catalog = catalog or default_catalog()
    try:
        if _content_size(content, size) > max_file_size_mb * 1024 * 1024:
            raise UploadError(f'File size exceeds {_format_mb(max_file_size_mb)} limit')

        extension = get_file_extension(filename)
        if extension not in SUPPORTED_EXTENSIONS:
            raise UploadError('Only JSON and CSV files are supported')

        if extension == 'json':
            filename_validation = validate_json_filename_with_fallback(filename, True, catalog)
            if not filename_validation.is_valid:
                raise UploadError(filename_validation.error or 'Invalid JSON filename')
            validation = validate_json(content)
            source = _load_json(content, validation)
            logger.info("Loaded %d translation(s) from '%s' as %s.",
                        len(source.payload), filename, filename_validation.language_code)
            return UploadResult(
                success=True,
                format='json',
                source=source,
                filename=filename,
                language_code=filename_validation.language_code,
                fallback_applied=filename_validation.fallback_applied,
                warning_message=filename_validation.warning_message,
                validation=validation
            )

        validation = validate_csv(content)
        source = _load_csv(content, validation, catalog.default_language.name)
        logger.info("Loaded %d row(s) from '%s'.", len(source.payload.rows), filename)
        return UploadResult(success=True, format='csv', source=source, filename=filename, validation=validation)

    except UploadError as e:
        logger.warning("Upload of '%s' rejected: %s", filename, e)
        return UploadResult(success=False, filename=filename, error=str(e))
    except Exception as e:
        logger.error("Unexpected error while processing '%s': %s", filename, e, exc_info=True)
        return UploadResult(success=False, filename=filename, error=str(e) or 'Unknown error')


def process_multiple_json_uploads(
        files: Sequence[Tuple[str, str]],
        catalog: Optional[LanguageCatalog] = None
) -> MultipleUploadResult:
    """
    Validate and parse a batch of ``(filename, content)`` JSON uploads.

    Filenames must follow the naming convention strictly and each language may
    appear only once. Problems are reported per file without aborting the batch.
    """
    catalog = catalog or default_catalog()
    batch = validate_multiple_json_files([name for name, _ in files], catalog)
    results: List[UploadResult] = []
    errors: List[str] = []

    for filename, error in batch.invalid.items():
        errors.append(f'{filename}: {error}')
        results.append(UploadResult(success=False, filename=filename, error=error))

    valid_names = set(batch.valid)
    for filename, content in files:
        if filename not in valid_names:
            continue
        valid_names.discard(filename)
        try:
            filename_validation = validate_json_filename(filename, catalog)
            validation = validate_json(content)
            source = _load_json(content, validation)
            results.append(UploadResult(
                success=True,
                format='json',
                source=source,
                filename=filename,
                language_code=filename_validation.language_code,
                validation=validation
            ))
        except UploadError as e:
            errors.append(f'{filename}: {e}')
            results.append(UploadResult(success=False, filename=filename, error=str(e)))

    success = bool(batch.valid) and len(errors) == len(batch.invalid)
    return MultipleUploadResult(
        success=success,
        files=results,
        valid_files=len(batch.valid),
        invalid_files=len(batch.invalid),
        errors=errors
    )


def process_text_input(content: str, text_format: str,
                       catalog: Optional[LanguageCatalog] = None) -> UploadResult:
    """Validate and parse pasted ``json`` or ``csv`` text. Pasted JSON is treated as the default language."""
    catalog = catalog or default_catalog()
    try:
        if text_format == 'json':
            validation = validate_json(content)
            return UploadResult(
                success=True,
                format='json',
                source=_load_json(content, validation),
                language_code=catalog.default_language.code,
                validation=validation
            )
        if text_format == 'csv':
            validation = validate_csv(content)
            return UploadResult(
                success=True,
                format='csv',
                source=_load_csv(content, validation, catalog.default_language.name),
                validation=validation
            )
        raise UploadError(f'Unsupported format: {text_format}')
    except UploadError as e:
        logger.warning("Text input rejected: %s", e)
        return UploadResult(success=False, error=str(e))
