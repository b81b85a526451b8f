"""
TraceSpec proxy - records HTTP traffic into an OpenAPI description

Runs mitmproxy with the TraceSpec addon. Every exchange passing through the
proxy is merged into the YAML description at --output.

Usage:
    tracespec-proxy --listen 8080 --output docs/openapi.yaml --routes routes.yaml

Requirements:
    pip install mitmproxy
"""

import argparse
import os
import sys
from pathlib import Path

from tracespec.config import ConfigError, TraceConfig


def _clip(text: str, width: int = 37) -> str:
    return text if len(text) <= width else text[:width - 3] + "..."


def parse_args(argv=None):
    """
    Parse command-line arguments.

    Returns:
        Namespace object with parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="TraceSpec - record proxied HTTP traffic into an OpenAPI description",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --output openapi.yaml
  %(prog)s --listen 8080 --output docs/api --routes routes.yaml

  # One file per tag in a directory
  %(prog)s --output docs/api --tag users

  # JSON request bodies instead of flattened multipart fields
  %(prog)s --output openapi.yaml --request-body json

  # Only record some hosts
  %(prog)s --output openapi.yaml --filter-host "*.example.com"

After starting, configure your HTTP client:
  export HTTP_PROXY=http://localhost:8080
  export HTTPS_PROXY=http://localhost:8080

Press Ctrl+C to stop.
        """
    )

    parser.add_argument('--listen', type=int, default=8080, metavar='PORT',
                        help='Port to listen on (default: 8080)')
    parser.add_argument('--output', type=str, required=True, metavar='PATH',
                        help='Description file (.yaml/.yml) or directory for one file per tag')
    parser.add_argument('--routes', type=str, default='', metavar='PATH',
                        help='YAML file listing route templates such as /users/{id}')
    parser.add_argument('--tag', type=str, default='', metavar='NAME',
                        help='Tag for every operation (default: resource name from the route)')
    parser.add_argument('--summary', choices=['templated', 'concrete'], default='templated',
                        help='Use the templated or the concrete path as summary')
    parser.add_argument('--request-body', choices=['multipart', 'json'], default='multipart',
                        dest='request_body', help='Request body format (default: multipart)')
    parser.add_argument('--with-config', action='store_true', dest='with_config',
                        help='Write the openapi/info/servers/components envelope')
    parser.add_argument('--verbose', action='store_true',
                        help='Show recorded and skipped requests')
    parser.add_argument('--filter-host', type=str, default='', metavar='HOSTS', dest='filter_host',
                        help='Record only these hosts (comma-separated, wildcards allowed)')
    parser.add_argument('--filter-regex', type=str, default='', metavar='PATTERN', dest='filter_regex',
                        help='Record only URLs matching this regex')

    return parser.parse_args(argv)


def main(argv=None):
    """
    Main entry point.

    Flow:
    1. Parse command-line arguments
    2. Pass configuration via environment variables
    3. Start mitmdump with tracespec_addon.py
    """
    args = parse_args(argv)

    # mitmproxy re-imports the addon module; environment variables survive that
    os.environ['TRACESPEC_ENV'] = 'test'
    os.environ['TRACESPEC_OUTPUT'] = args.output
    os.environ['TRACESPEC_ROUTES'] = args.routes
    os.environ['TRACESPEC_TAG'] = args.tag
    os.environ['TRACESPEC_SUMMARY'] = args.summary
    os.environ['TRACESPEC_REQUEST_BODY'] = args.request_body
    os.environ['TRACESPEC_WITH_CONFIG'] = 'true' if args.with_config else 'false'
    os.environ['TRACESPEC_VERBOSE'] = 'true' if args.verbose else 'false'
    os.environ['TRACESPEC_FILTER_HOSTS'] = args.filter_host
    os.environ['TRACESPEC_FILTER_REGEX'] = args.filter_regex

    try:
        TraceConfig.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    print(f"┌{'─' * 50}┐")
    print(f"│ {'TraceSpec Recording Proxy':<48} │")
    print(f"├{'─' * 50}┤")
    print(f"│ Listening: {'http://0.0.0.0:' + str(args.listen):<37} │")
    print(f"│ Output:    {_clip(args.output):<37} │")
    if args.routes:
        print(f"│ Routes:    {_clip(args.routes):<37} │")
    print(f"└{'─' * 50}┘")
    print()
    print("Press Ctrl+C to stop.\n", flush=True)

    addon_path = Path(__file__).parent / 'tracespec_addon.py'

    from mitmproxy.tools import main as mitmain

    try:
        sys.argv = [
            'mitmdump',
            '--listen-host', '0.0.0.0',
            '--listen-port', str(args.listen),
            '--set', 'ssl_insecure=true',
            '--quiet',
            '-s', str(addon_path),
        ]
        mitmain.mitmdump()

    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == '__main__':
    main()
