"""
Command-line entry point.

Usage:
    translation-workbench validate translations_English.json table.csv
    translation-workbench to-csv translations_English.json translations_Indonesian.json -o merged.csv
    translation-workbench to-json table.csv -o out/ [--language English]
    translation-workbench search table.csv "welcome" [--mode keys] [--format csv]
    translation-workbench preview table.csv [--language Indonesian] [--rows 5]
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from tqdm import tqdm

from translation_workbench.app_config import AppConfig, load_app_config
from translation_workbench.conversion import (
    csv_to_multi_map,
    csv_to_single_map,
    estimate_output_size,
    export_multiple_json,
    get_conversion_preview,
    merge_to_csv,
    single_map_to_csv,
    to_json_text,
)
from translation_workbench.csv_parser import table_to_csv
from translation_workbench.languages import Language
from translation_workbench.logging_config import PACKAGE_LOGGER_NAME
from translation_workbench.models import ConversionOptions
from translation_workbench.search import SearchEngine, export_search_results
from translation_workbench.upload import UploadResult, process_multiple_json_uploads, process_upload

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _write_text(path: str, content: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)


def _upload_file(path: str, config: AppConfig) -> UploadResult:
    return process_upload(
        _read_text(path),
        os.path.basename(path),
        size=os.path.getsize(path),
        max_file_size_mb=config.max_file_size_mb,
        catalog=config.catalog
    )


def _cmd_validate(args, config: AppConfig) -> int:
    failures = 0
    for path in tqdm(args.files, desc="Validating", unit="file", disable=len(args.files) < 2):
        result = _upload_file(path, config)
        if not result.success:
            failures += 1
            print(f"{path}: INVALID - {result.error}")
            continue
        print(f"{path}: OK ({result.format})")
        if result.warning_message:
            print(f"  warning: {result.warning_message}")
        for warning in result.validation.warnings:
            print(f"  warning: {warning.message}")
    return 1 if failures else 0


def _cmd_to_csv(args, config: AppConfig) -> int:
    if len(args.files) == 1:
        result = _upload_file(args.files[0], config)
        if not result.success:
            print(f"{args.files[0]}: {result.error}", file=sys.stderr)
            return 1
        if result.warning_message:
            print(f"warning: {result.warning_message}", file=sys.stderr)
        language_name = config.catalog.language_code_to_name(result.language_code)
        _write_text(args.output, single_map_to_csv(result.source.payload, language_name))
        print(f"Wrote {len(result.source.payload)} row(s) to {args.output}")
        return 0

    files = [(os.path.basename(path), _read_text(path))
             for path in tqdm(args.files, desc="Reading", unit="file")]
    batch = process_multiple_json_uploads(files, config.catalog)
    for error in batch.errors:
        print(error, file=sys.stderr)
    # Refuse partial merges: every file must have been accepted
    if batch.errors or not batch.success:
        return 1

    uploads = [(result.language_code, result.source.payload) for result in batch.files if result.success]
    table = merge_to_csv(uploads, config.catalog)
    _write_text(args.output, table_to_csv(table))
    print(f"Merged {len(uploads)} language(s) into {len(table.rows)} row(s) in {args.output}")
    return 0


def _cmd_to_json(args, config: AppConfig) -> int:
    result = _upload_file(args.file, config)
    if not result.success:
        print(f"{args.file}: {result.error}", file=sys.stderr)
        return 1
    if not result.source.is_table:
        print(f"{args.file}: expected a CSV file", file=sys.stderr)
        return 1

    table = result.source.payload
    if args.language:
        output_path = os.path.join(args.output, f"{args.base}_{args.language.replace(' ', '_')}.json")
        _write_text(output_path, to_json_text(csv_to_single_map(table, args.language)))
        print(f"Wrote {output_path}")
        return 0

    files = export_multiple_json(csv_to_multi_map(table, config.catalog), args.base, config.catalog)
    for filename, content in tqdm(files.items(), desc="Writing", unit="file", disable=len(files) < 2):
        _write_text(os.path.join(args.output, filename), content)
    print(f"Wrote {len(files)} file(s) to {args.output}")
    return 0


def _cmd_search(args, config: AppConfig) -> int:
    result = _upload_file(args.file, config)
    if not result.success:
        print(f"{args.file}: {result.error}", file=sys.stderr)
        return 1

    engine = SearchEngine(threshold=config.search_threshold, max_results=config.max_results)
    if args.limit is not None:
        engine.set_max_results(args.limit)
    if result.source.is_table:
        engine.index_table(result.source.payload)
    else:
        engine.index_flat_map(result.source.payload, config.catalog.language_code_to_name(result.language_code))

    if args.language:
        matches = engine.search_in_language(args.query, args.language,
                                            args.threshold if args.threshold is not None else engine.threshold)
    elif args.mode == 'keys':
        matches = engine.search_keys(args.query, args.threshold)
    elif args.mode == 'values':
        matches = engine.search_values(args.query, args.threshold)
    else:
        matches = engine.search(args.query, threshold=args.threshold)

    print(export_search_results(engine.sort_by_score(matches), args.format))
    return 0


def _cmd_preview(args, config: AppConfig) -> int:
    result = _upload_file(args.file, config)
    if not result.success:
        print(f"{args.file}: {result.error}", file=sys.stderr)
        return 1

    if result.source.is_flat_map:
        languages = [Language(code=result.language_code,
                              name=config.catalog.language_code_to_name(result.language_code))]
        options = ConversionOptions(source_format='json', target_format='csv', languages=languages)
    else:
        columns = [args.language] if args.language else result.source.payload.language_columns
        languages = [Language(code=config.catalog.map_language_name_to_code(column), name=column)
                     for column in columns]
        options = ConversionOptions(source_format='csv', target_format='json', languages=languages)

    rows = args.rows if args.rows is not None else config.preview_rows
    print(get_conversion_preview(result.source, options, max_rows=max(1, rows)))
    size, unit = estimate_output_size(result.source, options)
    print(f"\nEstimated {options.target_format.upper()} output: {size:g} {unit}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='translation-workbench',
        description='Validate, convert and search JSON/CSV translation files.'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging.')
    subparsers = parser.add_subparsers(dest='command', required=True)

    validate_parser = subparsers.add_parser('validate', help='Validate JSON and CSV translation files.')
    validate_parser.add_argument('files', nargs='+')
    validate_parser.set_defaults(handler=_cmd_validate)

    csv_parser = subparsers.add_parser('to-csv', help='Convert one or more JSON files into a CSV table.')
    csv_parser.add_argument('files', nargs='+')
    csv_parser.add_argument('-o', '--output', required=True, help='CSV file to write.')
    csv_parser.set_defaults(handler=_cmd_to_csv)

    json_parser = subparsers.add_parser('to-json', help='Split a CSV table into JSON files.')
    json_parser.add_argument('file')
    json_parser.add_argument('-o', '--output', required=True, help='Directory for the JSON files.')
    json_parser.add_argument('--language', help='Export only this language column.')
    json_parser.add_argument('--base', default='translations', help='Filename prefix.')
    json_parser.set_defaults(handler=_cmd_to_json)

    search_parser = subparsers.add_parser('search', help='Fuzzy-search a translation file.')
    search_parser.add_argument('file')
    search_parser.add_argument('query')
    search_parser.add_argument('--mode', choices=['all', 'keys', 'values'], default='all')
    search_parser.add_argument('--language', help='Search only this language.')
    search_parser.add_argument('--threshold', type=float)
    search_parser.add_argument('--limit', type=int)
    search_parser.add_argument('--format', choices=['json', 'csv'], default='json')
    search_parser.set_defaults(handler=_cmd_search)

    preview_parser = subparsers.add_parser('preview', help='Preview the conversion of a translation file.')
    preview_parser.add_argument('file')
    preview_parser.add_argument('--language', help='CSV column to preview as JSON.')
    preview_parser.add_argument('--rows', type=int, help='Rows to show (default: preview_rows from config).')
    preview_parser.set_defaults(handler=_cmd_preview)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_app_config()
    if args.verbose:
        logging.getLogger(PACKAGE_LOGGER_NAME).setLevel(logging.DEBUG)

    try:
        return args.handler(args, config)
    except OSError as e:
        logger.error("File error: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
