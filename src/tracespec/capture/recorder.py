"""
Trace recording.

Turns one captured exchange (request + response) into an Observation: the
templated path, method, tags, summary, parameters, optional request body,
response status and response example of a single operation call.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..common import safe_json_parse
from ..config import TraceConfig
from .params import flatten_keys
from .paths import normalize_path, path_bindings
from .schema import SchemaNode, infer_schema, property_schema, simple_example
from .values import from_native

# Response example used when the response body is not JSON
PLACEHOLDER_RESPONSE = {'file': 'file/data'}

MULTIPART = 'multipart/form-data'
JSON = 'application/json'


@dataclass
class Exchange:
    """One captured request paired with its response."""

    path: str
    method: str
    status: int
    path_params: Dict[str, Any] = field(default_factory=dict)
    query_params: Dict[str, Any] = field(default_factory=dict)
    body_params: Dict[str, Any] = field(default_factory=dict)
    response_body: Union[bytes, str, None] = b''
    resource: str = ''  # Routing target, used as the default tag


@dataclass
class Parameter:
    """An operation parameter (path, query or body)."""

    name: str
    location: str
    schema: SchemaNode
    example: Any = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.name,
            'in': self.location,
            'schema': self.schema.to_dict(with_example=False),
        }
        if self.example is not None:
            data['example'] = self.example
        return data


@dataclass
class Observation:
    """Everything recorded about one exchange, ready to merge."""

    templated_path: str
    method: str
    tags: List[str]
    summary: str
    parameters: List[Parameter] = field(default_factory=list)
    request_body: Optional[Dict[str, Any]] = None
    response_status: int = 200
    response_example: Any = None
    security: List[Dict[str, List[str]]] = field(default_factory=list)

    @property
    def status_key(self) -> str:
        return str(self.response_status)

    def operation(self, responses: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Operation dict in canonical key order."""
        operation: Dict[str, Any] = {
            'tags': list(self.tags),
            'summary': self.summary,
        }
        if self.parameters:
            operation['parameters'] = [p.to_dict() for p in self.parameters]
        if self.request_body:
            operation['requestBody'] = self.request_body
        operation['responses'] = responses or {}
        operation['security'] = self.security
        return operation


class TraceRecorder:
    """
    Builds Observations from Exchanges.

    Example:
        recorder = TraceRecorder(TraceConfig(tag='users'))
        observation = recorder.record(Exchange(
            path='/orgs/42/users/7', method='GET', status=200,
            path_params={'org_id': '42', 'user_id': '7'},
            response_body=b'{"id": 7}'
        ))
        observation.templated_path  # '/orgs/{org_id}/users/{user_id}'
    """

    def __init__(self, config: TraceConfig):
        self.config = config

    def record(self, exchange: Exchange) -> Observation:
        templated = normalize_path(exchange.path, exchange.path_params)
        request_body = self.request_body(exchange.body_params)

        return Observation(
            templated_path=templated,
            method=exchange.method.lower(),
            tags=self.tags(exchange),
            summary=templated if self.config.summary_mode == 'templated' else exchange.path,
            parameters=self.parameters(exchange, request_body),
            request_body=request_body,
            response_status=exchange.status,
            response_example=safe_json_parse(exchange.response_body, default=dict(PLACEHOLDER_RESPONSE)),
            security=self.config.security_requirements(),
        )

    def tags(self, exchange: Exchange) -> List[str]:
        return [self.config.tag or exchange.resource]

    def parameters(self, exchange: Exchange, request_body: Optional[Dict[str, Any]]) -> List[Parameter]:
        """Path parameters, then body parameters (only without a request body), then query."""
        parameters: List[Parameter] = []
        self._add_parameters(parameters, 'path', path_bindings(exchange.path_params))
        if request_body is None:
            self._add_parameters(parameters, 'body', exchange.body_params)
        self._add_parameters(parameters, 'query', exchange.query_params)
        return parameters

    @staticmethod
    def _add_parameters(parameters: List[Parameter], location: str, values: Dict[str, Any]) -> None:
        for name, raw in values.items():
            value = from_native(raw)
            node = infer_schema(value)
            parameters.append(Parameter(
                name=str(name),
                location=location,
                schema=node,
                example=simple_example(value),
            ))

    def request_body(self, body_params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Request body in the configured mode, or None when there are no body params."""
        if not body_params:
            return None

        if self.config.request_body_mode == 'json':
            content = {
                JSON: {
                    'schema': {'type': 'object'},
                    'example': body_params,
                }
            }
        else:
            properties = {
                key: property_schema(from_native(leaf)).to_dict()
                for key, leaf in flatten_keys(body_params)
            }
            content = {
                MULTIPART: {
                    'schema': {
                        'type': 'object',
                        'properties': properties,
                    }
                }
            }

        return {'content': content}
