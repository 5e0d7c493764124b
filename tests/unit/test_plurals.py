import pytest

from translation_workbench.models import Table
from translation_workbench.plurals import (
    create_plural_translation,
    filter_map_by_plural_mode,
    filter_multi_map_by_plural_mode,
    filter_table_by_plural_mode,
    get_plural_form,
    get_plural_translation_stats,
    get_singular_form,
    is_plural_translation,
    parse_plural_translation,
    search_plural_translations,
    validate_plural_translation,
)


class TestPluralParsing:

    @pytest.mark.parametrize("value,expected", [
        ('1 item | {n} items', True),
        ('item|items', True),
        ('no pipe', False),
        ('a | b | c', False),
        (' | items', False),
        ('', False),
        (None, False),
    ])
    def test_is_plural_translation(self, value, expected):
        assert is_plural_translation(value) is expected

    def test_parse(self):
        parsed = parse_plural_translation(' 1 file |  {n} files ')
        assert (parsed.singular, parsed.plural) == ('1 file', '{n} files')
        assert parse_plural_translation('plain') is None

    def test_create_and_forms(self):
        value = create_plural_translation(' file ', 'files ')
        assert value == 'file | files'
        assert get_singular_form(value) == 'file'
        assert get_plural_form(value) == 'files'
        assert get_singular_form('plain') == 'plain'

    def test_validate(self):
        assert validate_plural_translation('file | files') == []
        assert validate_plural_translation('plain text') == []
        assert validate_plural_translation('') == ['Translation value is required']
        assert validate_plural_translation(' | files') == ['Singular form cannot be empty']
        assert validate_plural_translation('file |') == ['Plural form cannot be empty']


class TestPluralFilters:

    def test_filter_map(self):
        data = {'a': 'x | xs', 'b': 'plain'}
        assert filter_map_by_plural_mode(data, 'plural-only') == {'a': 'x | xs'}
        assert filter_map_by_plural_mode(data, 'singular-only') == {'b': 'plain'}
        assert filter_map_by_plural_mode(data, 'all') == data

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            filter_map_by_plural_mode({}, 'some')

    def test_filter_table(self):
        table = Table(headers=['Key', 'English', 'Indonesian'], rows=[
            {'Key': 'a', 'English': 'file', 'Indonesian': 'berkas | berkas-berkas'},
            {'Key': 'b', 'English': 'save', 'Indonesian': 'simpan'},
        ])
        assert [r['Key'] for r in filter_table_by_plural_mode(table, 'plural-only').rows] == ['a']
        assert [r['Key'] for r in filter_table_by_plural_mode(table, 'singular-only').rows] == ['b']

    def test_filter_multi_map_keeps_key_across_languages(self, sample_multi_map):
        plural = filter_multi_map_by_plural_mode(sample_multi_map, 'plural-only')
        assert plural == {'en': {'items.count': '1 item | {n} items'}, 'id': {}, 'zh-CN': {}}
        singular = filter_multi_map_by_plural_mode(sample_multi_map, 'singular-only')
        assert 'items.count' not in singular['en']
        assert singular['id'] == sample_multi_map['id']


class TestPluralStatsAndSearch:

    def test_stats(self, sample_multi_map):
        stats = get_plural_translation_stats(sample_multi_map)
        assert stats['total_keys'] == 3
        assert stats['plural_keys'] == 1
        assert stats['total_translations'] == 6
        assert stats['plural_translations'] == 1
        assert stats['plural_key_percentage'] == pytest.approx(100 / 3)

    def test_stats_empty(self):
        assert get_plural_translation_stats({})['plural_key_percentage'] == 0

    def test_search(self, sample_multi_map):
        results = search_plural_translations(sample_multi_map, 'item')
        assert results == [{'key': 'items.count', 'language': 'en', 'value': '1 item | {n} items', 'match_type': 'both'}]
        plural_only = search_plural_translations(sample_multi_map, 'items', search_in_singular=False)
        assert plural_only[0]['match_type'] == 'plural'
        assert search_plural_translations(sample_multi_map, 'items', search_in_plural=False) == []
