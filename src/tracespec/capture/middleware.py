"""
TraceSpec ASGI middleware.

Captures request/response exchanges handled by a FastAPI or Starlette
application and records them through a TraceSession. This is the in-process
capture point used while a test suite drives the application (for example
through fastapi.testclient.TestClient).

Usage:
    app.add_middleware(TraceMiddleware, session=session)
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl

from starlette.datastructures import UploadFile
from starlette.requests import Request

from ..common import safe_json_parse
from ..session import TraceSession
from .filters import RequestFilter
from .params import nest_params
from .paths import RouteTable
from .recorder import Exchange

logger = logging.getLogger("tracespec.capture")


def _header(scope: Dict[str, Any], name: bytes) -> str:
    for key, value in scope.get('headers', []):
        if key.lower() == name:
            return value.decode('latin-1')
    return ''


def resource_name(scope: Dict[str, Any]) -> str:
    """
    Name of the routing target.

    The first tag of the matched FastAPI route if it has one, otherwise the
    last component of the endpoint's module (app.routers.users -> users),
    otherwise the last static segment of the path.
    """
    route = scope.get('route')
    tags = getattr(route, 'tags', None)
    if tags:
        return str(tags[0])

    endpoint = scope.get('endpoint')
    module = getattr(endpoint, '__module__', None)
    if module and module != '__main__':
        return module.rsplit('.', 1)[-1]

    return RouteTable().resource_for(scope.get('path', '/'))


def _form_value(value: Any) -> Any:
    if isinstance(value, UploadFile):
        return value.filename or 'file'
    return value


async def body_params(scope: Dict[str, Any], body: bytes) -> Dict[str, Any]:
    """Decode request body parameters from JSON, urlencoded or multipart bodies."""
    if not body:
        return {}

    content_type = _header(scope, b'content-type').lower()

    if 'json' in content_type:
        parsed = safe_json_parse(body, default={})
        return parsed if isinstance(parsed, dict) else {}

    if content_type.startswith('application/x-www-form-urlencoded'):
        return nest_params(parse_qsl(body.decode('utf-8', errors='replace'), keep_blank_values=True))

    if content_type.startswith('multipart/form-data'):
        sent = False

        async def replay():
            nonlocal sent
            if sent:
                return {'type': 'http.disconnect'}
            sent = True
            return {'type': 'http.request', 'body': body, 'more_body': False}

        form = await Request(scope, replay).form()
        try:
            return nest_params((key, _form_value(value)) for key, value in form.multi_items())
        finally:
            await form.close()

    return {}


async def build_exchange(scope: Dict[str, Any], request_body: bytes, status: int,
                         response_body: bytes) -> Exchange:
    """Build an Exchange from a completed ASGI request cycle."""
    query_string = scope.get('query_string', b'').decode('latin-1')

    return Exchange(
        path=scope.get('path', '/'),
        method=scope.get('method', 'GET'),
        status=status,
        path_params=dict(scope.get('path_params') or {}),
        query_params=nest_params(parse_qsl(query_string, keep_blank_values=True)),
        body_params=await body_params(scope, request_body),
        response_body=response_body,
        resource=resource_name(scope),
    )


class TraceMiddleware:
    """
    Pure ASGI middleware that records every HTTP exchange.

    Request body chunks are collected as the application reads them and the
    response is collected as it is sent, so the application sees an
    unmodified request/response cycle. Recording happens after the response
    has been sent and never raises.
    """

    def __init__(self, app, session: Optional[TraceSession] = None):
        """
        Args:
            app: The wrapped ASGI application
            session: Session to record into; built from TRACESPEC_* variables
                on first use when omitted
        """
        self.app = app
        self._session = session
        self._filter: Optional[RequestFilter] = None

    @property
    def session(self) -> TraceSession:
        if self._session is None:
            self._session = TraceSession.from_env()
        return self._session

    @property
    def request_filter(self) -> RequestFilter:
        if self._filter is None:
            config = self.session.config
            self._filter = RequestFilter(config.filter_hosts, config.filter_regex)
        return self._filter

    async def __call__(self, scope, receive, send):
        if scope['type'] != 'http' or not self.session.enabled:
            await self.app(scope, receive, send)
            return

        request_chunks: List[bytes] = []
        response_chunks: List[bytes] = []
        status = 0

        async def capture_receive():
            message = await receive()
            if message['type'] == 'http.request':
                request_chunks.append(message.get('body', b''))
            return message

        async def capture_send(message):
            nonlocal status
            if message['type'] == 'http.response.start':
                status = message['status']
            elif message['type'] == 'http.response.body':
                response_chunks.append(message.get('body', b''))
            await send(message)

        await self.app(scope, capture_receive, capture_send)

        host = _header(scope, b'host').split(':')[0]
        if not self.request_filter.should_capture(host, scope.get('path', '/')):
            return

        try:
            exchange = await build_exchange(
                scope, b''.join(request_chunks), status, b''.join(response_chunks)
            )
        except Exception as e:
            logger.error(f"Failed to capture {scope.get('method')} {scope.get('path')}: {e}")
            return

        self.session.record(exchange)
