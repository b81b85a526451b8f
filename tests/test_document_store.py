"""
Tests for YAML document storage.

Tests destination resolution, tolerant loading, saving and the
date-quoting guard.
"""

import pytest
import yaml

from tracespec.config import TraceConfig
from tracespec.store.document_store import (
    YamlDocumentStore, dump_yaml, quote_dates, round_trip
)


class TestQuoteDates:
    """Test suite for the date-quoting guard."""

    def test_quotes_bare_date(self):
        assert quote_dates("due: 2024-01-05\n") == "due: '2024-01-05'\n"

    def test_already_quoted_date_stable(self):
        assert quote_dates("due: '2024-01-05'\n") == "due: '2024-01-05'\n"

    def test_repeated_passes_stable(self):
        text = "a: 2024-01-05\nb: from 2023-12-31 on\n"
        once = quote_dates(text)

        assert quote_dates(quote_dates(once)) == once
        assert once == "a: '2024-01-05'\nb: from '2023-12-31' on\n"

    def test_datetime_not_touched(self):
        text = "at: '2024-01-05T10:00:00Z'\n"
        assert quote_dates(text) == text


class TestDumpYaml:
    """Test suite for dump_yaml()."""

    def test_keeps_insertion_order(self):
        text = dump_yaml({'tags': ['a'], 'summary': '/x', 'responses': {}, 'security': []})
        keys = [line.split(':')[0] for line in text.splitlines() if line and not line.startswith(('-', ' '))]

        assert keys == ['tags', 'summary', 'responses', 'security']

    def test_date_value_read_back_as_string(self):
        text = dump_yaml({'value': '2024-01-05'})

        assert "'2024-01-05'" in text
        assert yaml.safe_load(text) == {'value': '2024-01-05'}

    def test_status_codes_stay_strings(self):
        assert yaml.safe_load(dump_yaml({'200': {'description': None}})) == {'200': {'description': None}}

    def test_round_trip(self):
        assert round_trip({'a': [1, 'x', True]}) == {'a': [1, 'x', True]}
        assert round_trip('2024-01-05') == '2024-01-05'


class TestLocation:
    """Test suite for destination resolution."""

    def test_yaml_file_used_literally(self, tmp_path):
        store = YamlDocumentStore(TraceConfig(output='docs/openapi.yml', root=str(tmp_path)))

        assert store.location_for('users') == tmp_path / 'docs' / 'openapi.yml'

    def test_directory_gets_tag_file(self, tmp_path):
        store = YamlDocumentStore(TraceConfig(output='docs/api', root=str(tmp_path)))

        location = store.location_for('users')

        assert location == tmp_path / 'docs' / 'api' / 'users.yaml'
        assert (tmp_path / 'docs' / 'api').is_dir()

    def test_absolute_output(self, tmp_path):
        target = tmp_path / 'abs.yaml'
        store = YamlDocumentStore(TraceConfig(output=str(target), root='/somewhere/else'))

        assert store.location_for('users') == target


class TestLoadSave:
    """Test suite for load() and save()."""

    @pytest.fixture
    def store(self, tmp_path):
        return YamlDocumentStore(TraceConfig(output='openapi.yaml', root=str(tmp_path)))

    def test_missing_file(self, store, tmp_path):
        assert store.load(tmp_path / 'nope.yaml') is None

    def test_corrupt_file(self, store, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("paths: [unclosed\n  - : :\n", encoding='utf-8')

        assert store.load(path) is None

    def test_document_without_paths(self, store, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("openapi: 3.0.0\n", encoding='utf-8')

        assert store.load(path) is None

    def test_save_then_load(self, store, tmp_path):
        document = {'paths': {'/users': {'get': {'summary': 'on 2024-01-05'}}}}
        location = tmp_path / 'nested' / 'openapi.yaml'

        store.save(location, document)

        text = location.read_text(encoding='utf-8')
        assert text.startswith('---\n')
        assert "'2024-01-05'" in text
        loaded = store.load(location)
        assert loaded['paths']['/users']['get']['summary'] == "on '2024-01-05'"

    def test_guarded_datetime_still_loads(self, store, tmp_path):
        location = tmp_path / 'openapi.yaml'
        document = {'paths': {
            '/a': {'get': {'summary': '/a'}},
            '/b': {'get': {'value': {'at': '2024-01-05 10:00:00', 'note': '2024-01-05 release',
                                     'day': '2024-01-05'}}},
        }}

        store.save(location, document)

        assert "''2024-01-05' 10:00:00'" in location.read_text(encoding='utf-8')
        assert store.load(location) == document

    def test_round_trip_of_guarded_datetime(self):
        assert round_trip({'at': '2024-01-05 10:00:00'}) == {'at': '2024-01-05 10:00:00'}
