"""
YAML document storage for API descriptions.

Loads and saves the persisted description, resolves where it lives, and
applies the date-quoting guard to the serialized text.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..config import DOCUMENT_EXTENSIONS, TraceConfig

logger = logging.getLogger("tracespec.store")

_QUOTED_DATE = re.compile(r"'(\d{4}-\d{2}-\d{2})'")
_DATE = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")


def quote_dates(text: str) -> str:
    """
    Single-quote every YYYY-MM-DD literal in serialized YAML.

    Existing quotes are stripped first so repeated passes are stable. This
    keeps date-looking example values from being read back as dates.
    """
    text = _QUOTED_DATE.sub(r'\1', text)
    return _DATE.sub(r"'\g<0>'", text)


def dump_yaml(data: Any) -> str:
    """Serialize with keys in insertion order and the date guard applied."""
    text = yaml.safe_dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        explicit_start=True,
    )
    return quote_dates(text)


class _UnguardedLoader(yaml.SafeLoader):
    """SafeLoader that reads YYYY-MM-DD scalars as strings."""


_UnguardedLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != 'tag:yaml.org,2002:timestamp']
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_yaml(text: str) -> Any:
    """
    Parse a saved document.

    The date guard can quote a date inside a longer scalar
    ('2024-01-05 10:00' -> ''2024-01-05' 10:00'). When the text does not
    parse, the guard's quotes are removed again and dates are read as
    strings.
    """
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError:
        return yaml.load(_QUOTED_DATE.sub(r'\1', text), Loader=_UnguardedLoader)


def round_trip(value: Any) -> Any:
    """Value as it reads back after a save/load cycle (value itself if unreadable)."""
    try:
        return parse_yaml(dump_yaml(value))
    except yaml.YAMLError:
        return value


class YamlDocumentStore:
    """
    Reads and writes API description documents.

    Example:
        store = YamlDocumentStore(config)
        location = store.location_for('users')
        document = store.load(location)      # None when missing or corrupt
        store.save(location, document)
    """

    def __init__(self, config: TraceConfig):
        self.config = config

    def location_for(self, primary_tag: str) -> Path:
        """
        Destination file for a tag.

        An output ending in .yaml/.yml is the file itself; anything else is
        a directory (created if missing) holding <tag>.yaml.
        """
        root = Path(self.config.root) if self.config.root else Path.cwd()
        output = root / self.config.output

        if self.config.output.endswith(DOCUMENT_EXTENSIONS):
            return output

        output.mkdir(parents=True, exist_ok=True)
        return output / f"{primary_tag}.yaml"

    def load(self, location: Union[str, Path]) -> Optional[Dict[str, Any]]:
        """
        Load a document.

        Returns:
            The document, or None when the file is missing, unreadable, not
            a mapping, or has no paths
        """
        path = Path(location)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                document = parse_yaml(f.read())
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable document {path}: {e}")
            return None

        if not isinstance(document, dict) or not isinstance(document.get('paths'), dict):
            logger.warning(f"Ignoring document without paths: {path}")
            return None

        return document

    def save(self, location: Union[str, Path], document: Dict[str, Any]) -> Path:
        """Write a document, creating parent directories as needed."""
        path = Path(location)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(dump_yaml(document))

        logger.debug(f"Saved {len(document.get('paths', {}))} paths -> {path}")
        return path
