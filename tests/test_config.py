"""
Tests for configuration loading and response descriptions.
"""

import pytest

from tracespec.config import ConfigError, TraceConfig
from tracespec.update.descriptions import (
    LocaleDescriptions, StaticDescriptions, description_source
)


class TestTraceConfigFromEnv:
    """Test suite for TraceConfig.from_env()."""

    def test_defaults(self):
        config = TraceConfig.from_env({})

        assert config.environment == 'development'
        assert config.output == ''
        assert config.enabled is False
        assert config.request_body_mode == 'multipart'
        assert config.security == ['org_slug', 'locale']

    def test_enabled_in_test_environment(self):
        config = TraceConfig.from_env({'TRACESPEC_ENV': 'test', 'TRACESPEC_OUTPUT': 'docs/api'})

        assert config.enabled is True

    def test_reads_all_settings(self):
        config = TraceConfig.from_env({
            'TRACESPEC_TAG': 'people',
            'TRACESPEC_SUMMARY': 'concrete',
            'TRACESPEC_REQUEST_BODY': 'json',
            'TRACESPEC_SECURITY': 'api_key, bearer',
            'TRACESPEC_WITH_CONFIG': 'true',
            'TRACESPEC_FILTER_HOSTS': 'a.com, *.b.com',
        })

        assert config.tag == 'people'
        assert config.summary_mode == 'concrete'
        assert config.request_body_mode == 'json'
        assert config.security == ['api_key', 'bearer']
        assert config.with_config is True
        assert config.filter_hosts == ['a.com', '*.b.com']

    def test_empty_security(self):
        config = TraceConfig.from_env({'TRACESPEC_SECURITY': ''})

        assert config.security == []
        assert config.security_requirements() == []

    def test_both_body_modes_is_an_error(self):
        with pytest.raises(ConfigError, match="Exactly one request body mode"):
            TraceConfig.from_env({'TRACESPEC_REQUEST_BODY': 'multipart,json'})

    @pytest.mark.parametrize('env', [
        {'TRACESPEC_SUMMARY': 'other'},
        {'TRACESPEC_DESCRIPTIONS': 'other'},
        {'TRACESPEC_REQUEST_BODY': 'xml'},
        {'TRACESPEC_DESCRIPTIONS': 'locale'},
    ])
    def test_invalid_modes(self, env):
        with pytest.raises(ConfigError):
            TraceConfig.from_env(env)

    def test_envelope(self):
        envelope = TraceConfig(security=['locale']).envelope()

        assert envelope['openapi'] == '3.0.0'
        assert envelope['info'] == {'title': 'title', 'description': 'description', 'version': '1.0.0'}
        assert envelope['components']['securitySchemes'] == {
            'locale': {'type': 'apiKey', 'in': 'query', 'name': 'locale'}
        }


class TestDescriptions:
    """Test suite for description sources."""

    def test_static_known_and_unknown(self):
        descriptions = StaticDescriptions()

        assert descriptions.describe(404) == 'The requested resource could not be found on the server'
        assert descriptions.describe(418) is None

    def test_locale_lookup(self):
        descriptions = LocaleDescriptions({'en': {200: 'OK'}, 'de': {'200': 'Erfolg'}}, locale='de')

        assert descriptions.describe(200) == 'Erfolg'
        assert descriptions.describe(404) is None

    def test_missing_locale(self):
        assert LocaleDescriptions({'en': {200: 'OK'}}, locale='fr').describe(200) is None

    def test_locale_from_file(self, tmp_path):
        path = tmp_path / 'statuses.yml'
        path.write_text("en:\n  200: Success\n  422: Invalid\n", encoding='utf-8')
        config = TraceConfig(description_mode='locale', locale_file=str(path))

        source = description_source(config.validate())

        assert isinstance(source, LocaleDescriptions)
        assert source.describe(422) == 'Invalid'

    def test_static_source_by_default(self):
        assert isinstance(description_source(TraceConfig()), StaticDescriptions)
