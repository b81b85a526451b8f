"""
Response descriptions keyed by HTTP status code.

Two sources, selected once by configuration:
- StaticDescriptions: a fixed, closed table; unknown codes get no description
- LocaleDescriptions: messages loaded from a YAML file, keyed by locale and
  then by status code
"""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml

from ..config import TraceConfig

STATUS_DESCRIPTIONS: Dict[int, str] = {
    100: 'The initial part of the request has been received, and the client should proceed with sending the remainder of the request',
    101: "The server agrees to switch protocols and is acknowledging the client's request to change the protocol being used",
    200: 'The request has succeeded',
    201: 'The request has been fulfilled, and a new resource has been created as a result. The newly created resource is returned in the response body',
    202: 'The request has been accepted for processing, but the processing has not been completed. The response may contain an estimated completion time or other status information',
    204: "The server has successfully processed the request but does not need to return any content. It is often used for requests that don't require a response body, such as DELETE requests",
    300: 'The requested resource has multiple choices available, each with its own URI and representation. The client can select one of the available choices',
    301: 'The requested resource has been permanently moved to a new location, and any future references to this resource should use the new URI provided in the response',
    302: 'The requested resource has been temporarily moved to a different location. The client should use the URI specified in the response for future requests',
    304: "The client's cached copy of a resource is still valid, and there is no need to transfer a new copy. The client can use its cached version",
    400: 'The server cannot understand the request due to a client error, such as malformed syntax or invalid parameters',
    401: 'The request requires user authentication. The client must provide valid credentials (e.g., username and password) to access the requested resource',
    403: 'The server understood the request, but the client does not have permission to access the requested resource',
    404: 'The requested resource could not be found on the server',
    405: 'The requested resource does not support the HTTP method used in the request (e.g., GET, POST, PUT, DELETE)',
    409: 'The request could not be completed due to a conflict with the current state of the target resource. The client may need to resolve the conflict before resubmitting the request',
    422: 'The server understands the content type of the request entity but was unable to process the contained instructions',
    500: 'The server encountered an unexpected condition that prevented it from fulfilling the request',
    502: 'The server acting as a gateway or proxy received an invalid response from an upstream server',
    503: 'The server is currently unable to handle the request due to temporary overload or maintenance. The server may provide a Retry-After header to indicate when the client can try the request again',
    504: 'The server acting as a gateway or proxy did not receive a timely response from an upstream server',
}


class StaticDescriptions:
    """Descriptions from the built-in status table."""

    def describe(self, status: int) -> Optional[str]:
        return STATUS_DESCRIPTIONS.get(status)


class LocaleDescriptions:
    """
    Descriptions from a YAML messages file.

    Expected layout:

        en:
          200: Success
          404: Not found
        de:
          200: Erfolg
    """

    def __init__(self, messages: Dict[str, Dict[Union[int, str], str]], locale: str = 'en'):
        self.locale = locale
        table = messages.get(locale) or {}
        self.messages = {str(code): text for code, text in table.items()}

    @classmethod
    def from_file(cls, path: str, locale: str = 'en') -> 'LocaleDescriptions':
        with open(Path(path), 'r', encoding='utf-8') as f:
            messages = yaml.safe_load(f) or {}
        return cls(messages, locale)

    def describe(self, status: int) -> Optional[str]:
        return self.messages.get(str(status))


def description_source(config: TraceConfig):
    """Description source for the configured mode."""
    if config.description_mode == 'locale':
        return LocaleDescriptions.from_file(config.locale_file, config.locale)
    return StaticDescriptions()
