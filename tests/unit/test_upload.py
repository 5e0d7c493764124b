import json
import unittest
from unittest.mock import patch

from translation_workbench.upload import (
    get_file_extension,
    process_multiple_json_uploads,
    process_text_input,
    process_upload,
    validate_file_before_upload,
)


class TestProcessUpload(unittest.TestCase):

    def test_conventional_json(self):
        result = process_upload('{"app.title": "Judul"}', 'translations_Indonesian.json')
        self.assertTrue(result.success)
        self.assertEqual(result.format, 'json')
        self.assertTrue(result.source.is_flat_map)
        self.assertEqual(result.source.payload, {'app.title': 'Judul'})
        self.assertEqual(result.language_code, 'id')
        self.assertFalse(result.fallback_applied)

    def test_unconventional_json_falls_back(self):
        result = process_upload('{"a": "b"}', 'my-app.json')
        self.assertTrue(result.success)
        self.assertTrue(result.fallback_applied)
        self.assertEqual(result.language_code, 'en')
        self.assertIn('my-app.json', result.warning_message)

    def test_json_with_empty_value_keeps_warning(self):
        result = process_upload('{"a": ""}', 'translations_English.json')
        self.assertTrue(result.success)
        self.assertEqual(len(result.validation.warnings), 1)
        self.assertEqual(result.source.payload, {'a': ''})

    def test_invalid_json(self):
        result = process_upload('{"a": 1}', 'translations_English.json')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'JSON validation failed: Value for key "a" must be a string')

    def test_csv(self):
        result = process_upload('key,Indonesian,English\na,Halo,Hello\n', 'table.csv')
        self.assertTrue(result.success)
        self.assertTrue(result.source.is_table)
        self.assertEqual(result.source.payload.headers, ['Key', 'English', 'Indonesian'])
        self.assertIsNone(result.language_code)

    def test_invalid_csv(self):
        result = process_upload('Key,English\na\n', 'table.csv')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'CSV validation failed: Row 2 has 1 columns, expected 2')

    def test_unsupported_extension(self):
        result = process_upload('x', 'notes.txt')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'Only JSON and CSV files are supported')

    def test_size_limit(self):
        result = process_upload('{}', 'translations_English.json', size=11 * 1024 * 1024)
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'File size exceeds 10MB limit')

    def test_configurable_size_limit(self):
        result = process_upload('{"a": "b"}', 'translations_English.json', max_file_size_mb=0.000001)
        self.assertEqual(result.error, 'File size exceeds 1e-06MB limit')

    def test_unexpected_error_is_reported(self):
        with patch('translation_workbench.upload.validate_json', side_effect=RuntimeError('parser crashed')):
            result = process_upload('{}', 'translations_English.json')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'parser crashed')


class TestMultipleUploads(unittest.TestCase):

    def test_valid_batch(self):
        result = process_multiple_json_uploads([
            ('translations_English.json', json.dumps({'a': 'A'})),
            ('translations_Chinese_Simplified.json', json.dumps({'a': '甲'})),
        ])
        self.assertTrue(result.success)
        self.assertEqual(result.valid_files, 2)
        self.assertEqual([f.language_code for f in result.files], ['en', 'zh-CN'])

    def test_batch_with_duplicate_and_bad_content(self):
        result = process_multiple_json_uploads([
            ('translations_English.json', '{"a": "A"}'),
            ('translations_English.JSON', '{"a": "B"}'),
            ('translations_Indonesian.json', '[1, 2]'),
        ])
        self.assertFalse(result.success)
        self.assertEqual(result.valid_files, 2)
        self.assertEqual(result.invalid_files, 1)
        self.assertIn(
            'translations_English.JSON: Duplicate language: English. Only one file per language is allowed.',
            result.errors
        )
        self.assertIn(
            'translations_Indonesian.json: JSON validation failed: JSON must be an object with key-value pairs',
            result.errors
        )
        successes = [f for f in result.files if f.success]
        self.assertEqual([f.filename for f in successes], ['translations_English.json'])

    def test_unconventional_names_are_rejected(self):
        result = process_multiple_json_uploads([('my-app.json', '{}')])
        self.assertFalse(result.success)
        self.assertEqual(result.errors, ['my-app.json: Filename must start with "translations_"'])


class TestTextInputAndPrecheck(unittest.TestCase):

    def test_text_json(self):
        result = process_text_input('{"a": "b"}', 'json')
        self.assertTrue(result.success)
        self.assertEqual(result.language_code, 'en')

    def test_text_csv_invalid(self):
        result = process_text_input('Name,English\na,b', 'csv')
        self.assertEqual(result.error, 'CSV validation failed: First column must be named "Key"')

    def test_text_unknown_format(self):
        self.assertEqual(process_text_input('', 'xml').error, 'Unsupported format: xml')

    def test_precheck(self):
        self.assertEqual(validate_file_before_upload('a.json', 100), (True, None))
        valid, error = validate_file_before_upload('big.csv', 20 * 1024 * 1024)
        self.assertFalse(valid)
        self.assertEqual(error, 'File "big.csv" exceeds 10MB size limit')
        valid, error = validate_file_before_upload('notes.txt', 1)
        self.assertEqual(error, 'File "notes.txt" has unsupported format. Only JSON and CSV files are allowed.')

    def test_file_extension(self):
        self.assertEqual(get_file_extension('a.b.CSV'), 'csv')
        self.assertEqual(get_file_extension('README'), '')


if __name__ == '__main__':
    unittest.main()
