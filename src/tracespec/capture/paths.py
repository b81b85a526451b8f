"""
Path templating.

Turns a concrete request path plus its path-parameter bindings into a
templated path such as /orgs/{org_id}/users/{user_id}.
"""

import re
from typing import Dict, Any, List, Optional, Tuple

# Routing keys that are not real path parameters
EXCLUDED_PATH_KEYS = ('controller', 'action', 'format')

_PLACEHOLDER = re.compile(r'^\{([^{}]+)\}$')


def path_bindings(path_params: Dict[str, Any]) -> Dict[str, Any]:
    """Drop routing keys from a path-parameter mapping, keeping order."""
    return {k: v for k, v in path_params.items() if k not in EXCLUDED_PATH_KEYS}


def normalize_path(path: str, path_params: Dict[str, Any]) -> str:
    """
    Replace each bound value in the path with its {name} placeholder.

    Bindings are applied in iteration order and every occurrence of a value
    is replaced, including occurrences in unrelated segments:

        normalize_path('/orgs/42/users/7', {'org_id': 42, 'user_id': 7})
        -> '/orgs/{org_id}/users/{user_id}'

        normalize_path('/items/1/v1', {'id': 1})
        -> '/items/{id}/v{id}'
    """
    templated = path
    for name, value in path_bindings(path_params).items():
        literal = str(value)
        if literal:
            templated = templated.replace(literal, '{' + name + '}')
    return templated


class RouteTable:
    """
    Resolves path-parameter bindings from a list of route templates.

    Used where no framework router is available (proxy capture). A template
    matches when it has the same number of segments as the path and all of
    its static segments are equal; the first match wins.

    Example:
        routes = RouteTable(['/orgs/{org_id}/users/{user_id}'])
        routes.match('/orgs/42/users/7')
        -> ('/orgs/{org_id}/users/{user_id}', {'org_id': '42', 'user_id': '7'})
    """

    def __init__(self, templates: Optional[List[str]] = None):
        self.templates = list(templates or [])
        self._compiled = [(t, self._split(t)) for t in self.templates]

    @staticmethod
    def _split(path: str) -> List[str]:
        return [segment for segment in path.split('/') if segment]

    def match(self, path: str) -> Optional[Tuple[str, Dict[str, str]]]:
        segments = self._split(path)

        for template, parts in self._compiled:
            if len(parts) != len(segments):
                continue

            bindings: Dict[str, str] = {}
            for part, segment in zip(parts, segments):
                placeholder = _PLACEHOLDER.match(part)
                if placeholder:
                    bindings[placeholder.group(1)] = segment
                elif part != segment:
                    break
            else:
                return template, bindings

        return None

    def bindings_for(self, path: str) -> Dict[str, str]:
        """Bindings for the first matching template, or {} when none match."""
        matched = self.match(path)
        return matched[1] if matched else {}

    def resource_for(self, path: str) -> str:
        """
        Resource name for a path: the last static segment of the matching
        template, or the last non-numeric segment of the path itself when no
        template matches.
        """
        matched = self.match(path)
        parts = self._split(matched[0]) if matched else self._split(path)
        static = [p for p in parts if not _PLACEHOLDER.match(p) and not p.isdigit()]
        return static[-1] if static else 'root'
