import unittest

from translation_workbench.models import (
    ConversionError,
    Table,
    TranslationSource,
    UploadError,
    ValidationIssue,
    ValidationResult,
    WorkbenchError,
    is_key_header,
)


class TestModels(unittest.TestCase):

    def test_key_header_detection(self):
        self.assertTrue(is_key_header(' KEY '))
        self.assertFalse(is_key_header('Keys'))

    def test_table_copy_is_independent(self):
        table = Table(headers=['Key', 'English'], rows=[{'Key': 'a', 'English': 'A'}])
        copy = table.copy()
        copy.rows[0]['English'] = 'changed'
        copy.headers.append('Indonesian')
        self.assertEqual(table.rows[0]['English'], 'A')
        self.assertEqual(table.headers, ['Key', 'English'])

    def test_table_lookup(self):
        table = Table(headers=['Key', 'English'], rows=[{'Key': 'a', 'English': 'A'}])
        self.assertEqual(table.language_columns, ['English'])
        self.assertEqual(table.find_row_index('a'), 0)
        self.assertEqual(table.find_row_index('b'), -1)
        self.assertTrue(table.has_key('a'))

    def test_tagged_sources(self):
        flat = TranslationSource.flat_map({'a': 'A'})
        table = TranslationSource.table(Table())
        self.assertEqual(flat.kind, 'flatMap')
        self.assertTrue(flat.is_flat_map)
        self.assertFalse(flat.is_table)
        self.assertEqual(table.kind, 'table')
        self.assertTrue(table.is_table)

    def test_first_error_message(self):
        self.assertIsNone(ValidationResult(is_valid=True).first_error_message)
        result = ValidationResult(is_valid=False, errors=[ValidationIssue('syntax', 'bad'), ValidationIssue('structure', 'worse')])
        self.assertEqual(result.first_error_message, 'bad')

    def test_exception_hierarchy(self):
        self.assertTrue(issubclass(ConversionError, WorkbenchError))
        self.assertTrue(issubclass(UploadError, WorkbenchError))


if __name__ == '__main__':
    unittest.main()
