"""
Filtering logic for TraceSpec capture points.

Decides whether an exchange should be recorded, based on host matching
(exact, wildcard) and a regex pattern applied to the URL and host.
"""

import logging
import re
from typing import List, Optional

logger = logging.getLogger("tracespec.capture")


class RequestFilter:
    """
    Decides which requests are recorded.

    Supports:
    - Exact host matching (e.g., "api.example.com")
    - Wildcard matching (e.g., "*.example.com")
    - Regex pattern matching on URL and host
    """

    def __init__(self, host_filters: List[str], regex_pattern: Optional[str] = None):
        """
        Initialize the filter.

        Args:
            host_filters: List of hosts to match (supports wildcards)
            regex_pattern: Optional regex pattern to match against URLs
        """
        self.host_filters = host_filters
        self.regex_pattern = None

        if regex_pattern:
            try:
                self.regex_pattern = re.compile(regex_pattern)
            except re.error as e:
                logger.warning(f"Invalid regex pattern {regex_pattern!r}: {e}")

    def should_capture(self, host: str, url: str) -> bool:
        """
        Determine if a request should be recorded.

        - No filters configured: record everything
        - Any filter matches: record (OR logic)

        Args:
            host: The request hostname (e.g., "api.example.com")
            url: The full URL or path (e.g., "https://api.example.com/users")
        """
        if not self.host_filters and not self.regex_pattern:
            return True

        for filter_host in self.host_filters:
            if filter_host == host:
                logger.debug(f"[CAPTURE] {host} (exact match: {filter_host})")
                return True

            # *.example.com matches api.example.com and example.com itself
            if filter_host.startswith('*.'):
                domain = filter_host[2:]
                if host.endswith('.' + domain) or host == domain:
                    logger.debug(f"[CAPTURE] {host} (wildcard match: {filter_host})")
                    return True

        if self.regex_pattern and (self.regex_pattern.search(url) or self.regex_pattern.search(host)):
            logger.debug(f"[CAPTURE] {url} (regex match: {self.regex_pattern.pattern})")
            return True

        logger.debug(f"[SKIP] {host} {url}")
        return False
