"""
TraceSpec configuration.

Configuration is passed through TRACESPEC_* environment variables so that it
survives being re-imported by a test runner or by mitmproxy, the same way the
proxy CLI hands its arguments to the addon.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

SUMMARY_MODES = ('templated', 'concrete')
REQUEST_BODY_MODES = ('multipart', 'json')
DESCRIPTION_MODES = ('static', 'locale')

# Environment name under which capture is active
TEST_ENVIRONMENT = 'test'

DOCUMENT_EXTENSIONS = ('.yaml', '.yml')


class ConfigError(ValueError):
    """Raised for an invalid or contradictory configuration."""


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(',') if item.strip()]


def _flag(raw: str) -> bool:
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class TraceConfig:
    """Settings for recording exchanges into an API description."""

    environment: str = 'development'
    output: str = ''                    # File (.yaml/.yml) or directory
    root: str = ''                      # Base for relative outputs (default: cwd)
    tag: Optional[str] = None           # Overrides the resource name as tag

    summary_mode: str = 'templated'     # templated, concrete
    request_body_modes: Tuple[str, ...] = ('multipart',)  # exactly one of multipart, json
    description_mode: str = 'static'    # static, locale
    locale: str = 'en'
    locale_file: Optional[str] = None

    security: List[str] = field(default_factory=lambda: ['org_slug', 'locale'])

    # OpenAPI envelope (openapi/info/servers/components) written with paths
    with_config: bool = False
    api_title: str = 'title'
    api_description: str = 'description'
    api_version: str = '1.0.0'

    # Proxy capture only
    routes_file: Optional[str] = None
    filter_hosts: List[str] = field(default_factory=list)
    filter_regex: str = ''
    verbose: bool = False

    @property
    def enabled(self) -> bool:
        """Capture runs only in the test environment with a destination set."""
        return self.environment == TEST_ENVIRONMENT and bool(self.output)

    @property
    def request_body_mode(self) -> str:
        return self.request_body_modes[0]

    def validate(self) -> 'TraceConfig':
        """
        Check mode settings.

        Raises:
            ConfigError: for unknown modes, or when both request body modes
                are enabled at once
        """
        if self.summary_mode not in SUMMARY_MODES:
            raise ConfigError(f"Unknown summary mode: {self.summary_mode!r}")

        if self.description_mode not in DESCRIPTION_MODES:
            raise ConfigError(f"Unknown description mode: {self.description_mode!r}")

        if self.description_mode == 'locale' and not self.locale_file:
            raise ConfigError("Description mode 'locale' requires a locale file")

        unknown = [m for m in self.request_body_modes if m not in REQUEST_BODY_MODES]
        if unknown:
            raise ConfigError(f"Unknown request body mode(s): {unknown}")

        if len(self.request_body_modes) != 1:
            raise ConfigError(
                "Exactly one request body mode must be enabled "
                f"(got {list(self.request_body_modes)})"
            )

        return self

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> 'TraceConfig':
        """Build a validated config from TRACESPEC_* variables."""
        env = os.environ if env is None else env

        config = cls(
            environment=env.get('TRACESPEC_ENV', 'development'),
            output=env.get('TRACESPEC_OUTPUT', ''),
            root=env.get('TRACESPEC_ROOT', ''),
            tag=env.get('TRACESPEC_TAG') or None,
            summary_mode=env.get('TRACESPEC_SUMMARY', 'templated'),
            request_body_modes=tuple(_split_list(env.get('TRACESPEC_REQUEST_BODY', 'multipart'))),
            description_mode=env.get('TRACESPEC_DESCRIPTIONS', 'static'),
            locale=env.get('TRACESPEC_LOCALE', 'en'),
            locale_file=env.get('TRACESPEC_LOCALE_FILE') or None,
            with_config=_flag(env.get('TRACESPEC_WITH_CONFIG', 'false')),
            routes_file=env.get('TRACESPEC_ROUTES') or None,
            filter_hosts=_split_list(env.get('TRACESPEC_FILTER_HOSTS', '')),
            filter_regex=env.get('TRACESPEC_FILTER_REGEX', ''),
            verbose=_flag(env.get('TRACESPEC_VERBOSE', 'false')),
        )

        if 'TRACESPEC_SECURITY' in env:
            config.security = _split_list(env['TRACESPEC_SECURITY'])

        return config.validate()

    def security_requirements(self) -> List[Dict[str, List[str]]]:
        """Security requirement list: one entry naming every scheme."""
        if not self.security:
            return []
        return [{name: [] for name in self.security}]

    def envelope(self) -> Dict[str, object]:
        """OpenAPI document fields written alongside paths when with_config is on."""
        return {
            'openapi': '3.0.0',
            'info': {
                'title': self.api_title,
                'description': self.api_description,
                'version': self.api_version,
            },
            'servers': [],
            'components': {
                'securitySchemes': {
                    name: {'type': 'apiKey', 'in': 'query', 'name': name}
                    for name in self.security
                }
            },
        }
