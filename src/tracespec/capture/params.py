"""
Bracketed form-field handling.

Form and query strings encode nested data with bracketed keys
(user[name]=x, tags[]=a). Capture points expand them into nested dicts
before recording, and the multipart request body flattens them back.
"""

import re
from typing import Any, Dict, Iterable, List, Tuple

_KEY_PARTS = re.compile(r'\[([^\[\]]*)\]')


def split_key(key: str) -> List[str]:
    """
    Split a bracketed key into its parts.

        split_key('user[address][city]') -> ['user', 'address', 'city']
        split_key('tags[]')               -> ['tags', '']
    """
    head, bracket, _ = key.partition('[')
    if not bracket or not key.endswith(']'):
        return [key]
    return [head] + _KEY_PARTS.findall(key[len(head):])


def nest_params(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """
    Expand (key, value) pairs with bracketed keys into nested data.

    A trailing [] collects values into a list; repeated plain keys keep the
    last value.
    """
    result: Dict[str, Any] = {}

    for key, value in items:
        parts = split_key(key)
        is_list = len(parts) > 1 and parts[-1] == ''
        if is_list:
            parts = parts[:-1]

        target = result
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child

        last = parts[-1]
        if is_list:
            existing = target.get(last)
            if not isinstance(existing, list):
                existing = []
                target[last] = existing
            existing.append(value)
        else:
            target[last] = value

    return result


def flatten_keys(data: Dict[str, Any], prefix: List[str] = None) -> List[Tuple[str, Any]]:
    """
    Walk nested dicts depth-first and return (bracketed_key, leaf) pairs.

        flatten_keys({'a': {'b': {'c': 1}}, 'd': 2}) -> [('a[b][c]', 1), ('d', 2)]

    Lists and scalars are leaves.
    """
    prefix = prefix or []
    pairs: List[Tuple[str, Any]] = []

    for key, value in data.items():
        path = prefix + [str(key)]
        if isinstance(value, dict) and value:
            pairs.extend(flatten_keys(value, path))
        else:
            pairs.append((bracket_key(path), value))

    return pairs


def bracket_key(parts: List[str]) -> str:
    """bracket_key(['a', 'b', 'c']) -> 'a[b][c]'"""
    head, rest = parts[0], parts[1:]
    return head + ''.join(f'[{part}]' for part in rest)
