"""
TraceSpec Mitmproxy Addon

Records HTTP traffic passing through mitmproxy into an API description.
Used for black-box capture, when the application under test runs in another
process. Path parameters are resolved from a routes file, since no framework
router is available.
"""

import logging
import sys
from typing import Any, Dict, List, Optional

import yaml
from mitmproxy import http

from tracespec.capture.filters import RequestFilter
from tracespec.capture.params import nest_params
from tracespec.capture.paths import RouteTable
from tracespec.capture.recorder import Exchange
from tracespec.common import safe_json_parse
from tracespec.config import TraceConfig
from tracespec.session import TraceSession

logger = logging.getLogger("tracespec.capture")


def load_routes(path: Optional[str]) -> RouteTable:
    """
    Load route templates from a YAML file.

    Accepts either a plain list of templates or a mapping with a
    'routes' list:

        routes:
          - /orgs/{org_id}/users/{user_id}
          - /orgs/{org_id}
    """
    if not path:
        return RouteTable()

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get('routes') or []
    return RouteTable([str(t) for t in data])


def _text(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return value


def request_body_params(req: http.Request) -> Dict[str, Any]:
    """Body parameters of a proxied request (JSON, urlencoded or multipart)."""
    if not req.content:
        return {}

    content_type = req.headers.get('content-type', '').lower()

    if 'json' in content_type:
        parsed = safe_json_parse(req.content, default={})
        return parsed if isinstance(parsed, dict) else {}

    if content_type.startswith('application/x-www-form-urlencoded'):
        return nest_params(req.urlencoded_form.items(multi=True))

    if content_type.startswith('multipart/form-data'):
        return nest_params((_text(k), _text(v)) for k, v in req.multipart_form.items(multi=True))

    return {}


class TraceSpecAddon:
    """
    Mitmproxy addon that records proxied exchanges.

    Configuration is read from TRACESPEC_* environment variables on first
    use, because mitmproxy may re-import the addon module.
    """

    def __init__(self):
        self.session: Optional[TraceSession] = None
        self.routes = RouteTable()
        self.request_filter: Optional[RequestFilter] = None
        self.recorded = 0
        self.initialized = False

    def _lazy_init(self):
        if self.initialized:
            return

        config = TraceConfig.from_env()
        self.session = TraceSession(config)
        self.routes = load_routes(config.routes_file)
        self.request_filter = RequestFilter(config.filter_hosts, config.filter_regex)
        # Set last so a failed setup is retried on the next flow
        self.initialized = True

        if config.filter_hosts or config.filter_regex:
            print(f"\n🔍 Filtering enabled:", flush=True)
            if config.filter_hosts:
                print(f"   Hosts ({len(config.filter_hosts)}): {config.filter_hosts}", flush=True)
            if config.filter_regex:
                print(f"   Regex: {config.filter_regex}", flush=True)
        else:
            print(f"\n⚠️  No filters active - recording ALL traffic", flush=True)
        print(f"   Routes: {len(self.routes.templates)} templates\n", flush=True)

    def exchange_for(self, flow: http.HTTPFlow) -> Exchange:
        req = flow.request
        resp = flow.response
        path = req.path.split('?', 1)[0]

        return Exchange(
            path=path,
            method=req.method,
            status=resp.status_code if resp else 0,
            path_params=self.routes.bindings_for(path),
            query_params=nest_params(req.query.items(multi=True)),
            body_params=request_body_params(req),
            response_body=resp.content if resp else b'',
            resource=self.routes.resource_for(path),
        )

    def response(self, flow: http.HTTPFlow) -> None:
        """Called when a complete HTTP response is received."""
        try:
            self._lazy_init()

            req = flow.request
            if not self.request_filter.should_capture(req.host, req.pretty_url):
                if self.session.config.verbose:
                    print(f"⏭️  Skipping: {req.method} {req.pretty_url}", flush=True)
                return

            result = self.session.record(self.exchange_for(flow))
            if result is not None:
                self.recorded += 1
                if self.session.config.verbose:
                    changes = ', '.join(result.changes) or 'no changes'
                    print(f"📝 {req.method} {req.path} → {changes}", flush=True)

        except Exception as e:
            # Log errors but don't break the proxied request
            print(f"Error recording request: {e}", file=sys.stderr, flush=True)

    def done(self):
        """Called when mitmproxy is shutting down."""
        if self.session is None:
            return

        self.session.close()
        if not self.recorded:
            print("\nNo requests recorded.", flush=True)
        else:
            print(f"\n📊 Recorded {self.recorded} exchanges → {self.session.config.output}", flush=True)


# Module-level addon list - mitmproxy looks for this
addons = [TraceSpecAddon()]
