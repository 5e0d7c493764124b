import unittest

from translation_workbench.csv_parser import (
    get_languages_from_table,
    parse_csv,
    parse_csv_records,
    quote_csv_cell,
    reorder_columns_with_default_priority,
    serialize_csv,
    table_to_csv,
)
from translation_workbench.models import Table


class TestParseCsvRecords(unittest.TestCase):

    def test_simple_records(self):
        records = parse_csv_records('Key,English\napp.title,Hello\n')
        self.assertEqual(records, [['Key', 'English'], ['app.title', 'Hello']])

    def test_missing_trailing_newline(self):
        records = parse_csv_records('Key,English\napp.title,Hello')
        self.assertEqual(records[-1], ['app.title', 'Hello'])

    def test_quoted_field_with_comma_and_newline(self):
        records = parse_csv_records('Key,English\nk1,"a, b\nc"\n')
        self.assertEqual(records, [['Key', 'English'], ['k1', 'a, b\nc']])

    def test_doubled_quotes_unescape(self):
        records = parse_csv_records('Key,English\nk1,"He said ""hi"""\n')
        self.assertEqual(records[1][1], 'He said "hi"')

    def test_crlf_line_endings(self):
        records = parse_csv_records('Key,English\r\nk1,v1\r\nk2,v2\r\n')
        self.assertEqual(records, [['Key', 'English'], ['k1', 'v1'], ['k2', 'v2']])

    def test_blank_and_all_empty_lines_dropped(self):
        records = parse_csv_records('Key,English\n\nk1,v1\n,\n')
        self.assertEqual(records, [['Key', 'English'], ['k1', 'v1']])

    def test_field_whitespace_is_kept(self):
        records = parse_csv_records('Key,English\nk1,"  padded  "\nk2, loose ')
        self.assertEqual(records, [['Key', 'English'], ['k1', '  padded  '], ['k2', ' loose ']])

    def test_quote_inside_unquoted_field_is_literal(self):
        records = parse_csv_records('Key,English\nscreen.size,5" screen\nbutton.ok,OK\nbutton.no,No\n')
        self.assertEqual(records, [
            ['Key', 'English'],
            ['screen.size', '5" screen'],
            ['button.ok', 'OK'],
            ['button.no', 'No'],
        ])

    def test_quote_after_leading_space_is_literal(self):
        records = parse_csv_records('Key,English\nk1, "a",b\n')
        self.assertEqual(records[1], ['k1', ' "a"', 'b'])
    def test_unterminated_quote_keeps_rest_of_input(self):
        records = parse_csv_records('Key,English\nk1,"open\nstill open')
        self.assertEqual(records[1], ['k1', 'open\nstill open'])

    def test_empty_input(self):
        self.assertEqual(parse_csv_records(''), [])


class TestParseCsv(unittest.TestCase):

    def test_key_header_any_case_is_canonicalized(self):
        table = parse_csv('KEY,English\nk1,v1')
        self.assertEqual(table.headers, ['Key', 'English'])
        self.assertEqual(table.rows, [{'Key': 'k1', 'English': 'v1'}])

    def test_default_language_moved_second(self):
        table = parse_csv('key,Indonesian,english,Chinese Simplified\nk1,a,b,c')
        self.assertEqual(table.headers, ['Key', 'english', 'Indonesian', 'Chinese Simplified'])
        self.assertEqual(table.rows[0], {'Key': 'k1', 'english': 'b', 'Indonesian': 'a', 'Chinese Simplified': 'c'})

    def test_short_rows_filled_with_empty_strings(self):
        table = parse_csv('Key,English,Indonesian\nk1,v1')
        self.assertEqual(table.rows[0]['Indonesian'], '')

    def test_first_duplicate_header_wins(self):
        table = parse_csv('Key,English,English\nk1,first,second')
        self.assertEqual(table.rows[0]['English'], 'first')

    def test_header_names_trimmed_but_cells_kept(self):
        table = parse_csv('Key , English \nk1,  v1 ')
        self.assertEqual(table.headers, ['Key', 'English'])
        self.assertEqual(table.rows, [{'Key': 'k1', 'English': '  v1 '}])

    def test_mid_field_quote_keeps_following_rows(self):
        table = parse_csv('Key,English\nscreen.size,5" screen\nbutton.ok,OK\n')
        self.assertEqual(table.rows, [
            {'Key': 'screen.size', 'English': '5" screen'},
            {'Key': 'button.ok', 'English': 'OK'},
        ])

    def test_empty_content_gives_empty_table(self):
        table = parse_csv('')
        self.assertEqual(table.headers, [])
        self.assertEqual(table.rows, [])

    def test_every_row_has_every_header(self):
        table = parse_csv('Key,English,Indonesian\nk1,a\nk2,b,c\n')
        for row in table.rows:
            self.assertEqual(set(row.keys()), set(table.headers))


class TestReorderColumns(unittest.TestCase):

    def test_no_default_language_keeps_order(self):
        self.assertEqual(
            reorder_columns_with_default_priority(['Key', 'Indonesian', 'Chinese Simplified']),
            ['Key', 'Indonesian', 'Chinese Simplified']
        )

    def test_key_moved_first(self):
        self.assertEqual(
            reorder_columns_with_default_priority(['English', 'key']),
            ['key', 'English']
        )

    def test_custom_default_language(self):
        self.assertEqual(
            reorder_columns_with_default_priority(['Key', 'English', 'Indonesian'], 'Indonesian'),
            ['Key', 'Indonesian', 'English']
        )


class TestSerializeCsv(unittest.TestCase):

    def test_quote_cell_doubles_quotes(self):
        self.assertEqual(quote_csv_cell('say "hi"'), '"say ""hi"""')
        self.assertEqual(quote_csv_cell(None), '""')

    def test_serialize_quotes_every_field(self):
        self.assertEqual(serialize_csv([['Key', 'English'], ['a', 'b']]), '"Key","English"\n"a","b"')

    def test_table_to_csv_uses_header_order(self):
        table = Table(headers=['Key', 'English'], rows=[{'English': 'Hello', 'Key': 'k'}])
        self.assertEqual(table_to_csv(table), '"Key","English"\n"k","Hello"')

    def test_export_then_parse_preserves_special_characters(self):
        table = Table(headers=['Key', 'English'], rows=[{'Key': 'k', 'English': 'a, "b"\nc'}])
        parsed = parse_csv(table_to_csv(table))
        self.assertEqual(parsed.rows, table.rows)

    def test_export_then_parse_preserves_surrounding_whitespace(self):
        table = Table(headers=['Key', 'English'], rows=[{'Key': 'k', 'English': '  indented '}])
        self.assertEqual(parse_csv(table_to_csv(table)).rows, table.rows)

    def test_languages_from_table(self):
        table = Table(headers=['Key', 'English', 'Indonesian'])
        self.assertEqual(get_languages_from_table(table), ['English', 'Indonesian'])


if __name__ == '__main__':
    unittest.main()
