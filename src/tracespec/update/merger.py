"""
Operation merging logic for API description updates.

Folds one Observation into a persisted API description without losing or
duplicating what earlier runs recorded:

1. New path            -> insert the staged path entry
2. New method on path  -> insert the staged operation with only this response
3. Known path + method -> reconcile responses, parameters and request body
4. Always              -> rewrite the operation's keys in canonical order
"""

import copy
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..capture.recorder import JSON, Observation
from ..store.document_store import round_trip

CANONICAL_KEYS = ('tags', 'summary', 'parameters', 'requestBody', 'responses', 'security')

_EXAMPLE_SUFFIX = re.compile(r'-(\d+)$')


@dataclass
class MergeResult:
    """Result of merging one observation."""
    document: Dict[str, Any]
    changes: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def response_entry(observation: Observation, description: Optional[str]) -> Dict[str, Any]:
    """Responses map holding just the observed status."""
    return {
        observation.status_key: {
            'description': description,
            'headers': {},
            'content': {
                JSON: {
                    'schema': {'type': 'object'},
                    'examples': {
                        'example-0': {
                            'summary': '',
                            'value': observation.response_example,
                        }
                    },
                }
            },
        }
    }


def next_example_name(examples: Dict[str, Any]) -> str:
    """
    Name for a new example: one past the highest numbered suffix.

        next_example_name({'example-0': ..., 'example-1': ...}) -> 'example-2'
        next_example_name({'custom': ...})                       -> 'example-0'
    """
    numbers = []
    for name in examples:
        match = _EXAMPLE_SUFFIX.search(str(name))
        if match:
            numbers.append(int(match.group(1)))
    return f"example-{max(numbers) + 1}" if numbers else 'example-0'


def _fingerprint(value: Any) -> str:
    # Order-insensitive for mappings, and keeps True distinct from 1
    return json.dumps(value, sort_keys=True, default=str)


def _as_dict(value: Any) -> Dict[Any, Any]:
    return value if isinstance(value, dict) else {}


class SpecMerger:
    """
    Merges observations into an API description document.

    The input document is never modified; merge() works on a deep copy and
    returns it in the MergeResult.

    Example:
        merger = SpecMerger(StaticDescriptions())
        result = merger.merge(document, observation, accumulator.path_entry(path))
        store.save(location, result.document)
    """

    def __init__(self, descriptions, envelope: Optional[Dict[str, Any]] = None):
        """
        Args:
            descriptions: Object with describe(status) -> Optional[str]
            envelope: Top-level OpenAPI fields merged into every document
        """
        self.descriptions = descriptions
        self.envelope = envelope or {}

    def responses_for(self, observation: Observation) -> Dict[str, Any]:
        return response_entry(observation, self.descriptions.describe(observation.response_status))

    def merge(
        self,
        document: Optional[Dict[str, Any]],
        observation: Observation,
        staged_entry: Dict[str, Dict[str, Any]]
    ) -> MergeResult:
        """
        Merge an observation into a document.

        Args:
            document: Persisted document, or None when absent or unreadable
            observation: The observation being merged
            staged_entry: Accumulator entry (method -> operation) for the
                observation's templated path

        Returns:
            MergeResult with the new document and a list of what changed
        """
        document = self._prepare(document)
        paths = document['paths']
        path = observation.templated_path
        method = observation.method
        staged = staged_entry.get(method) or observation.operation(self.responses_for(observation))
        changes: List[str] = []

        if not isinstance(paths.get(path), dict):
            # Only this operation: other staged methods may belong to another tag's file
            paths[path] = {method: copy.deepcopy(staged)}
            changes.append('path')

        elif not isinstance(paths[path].get(method), dict):
            operation = {'responses': self.responses_for(observation)}
            if staged.get('parameters'):
                operation['parameters'] = copy.deepcopy(staged['parameters'])
            if staged.get('requestBody'):
                operation['requestBody'] = copy.deepcopy(staged['requestBody'])
            paths[path][method] = operation
            changes.append('method')

        else:
            operation = paths[path][method]
            changes.extend(self._merge_responses(operation, observation))
            changes.extend(self._merge_parameters(operation, staged))
            changes.extend(self._merge_request_body(operation, staged))

        paths[path][method] = self.canonicalize(paths[path][method], observation)

        return MergeResult(document=document, changes=changes)

    def _prepare(self, document: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Deep copy of a usable document, or a fresh one."""
        if isinstance(document, dict) and isinstance(document.get('paths'), dict):
            prepared = copy.deepcopy(document)
            prepared.update(copy.deepcopy(self.envelope))
            return prepared

        fresh = copy.deepcopy(self.envelope)
        fresh['paths'] = {}
        return fresh

    def _merge_responses(self, operation: Dict[str, Any], observation: Observation) -> List[str]:
        """Insert a new status, or append a distinct example under a known one."""
        responses = operation.get('responses')
        if not isinstance(responses, dict) or not responses:
            operation['responses'] = self.responses_for(observation)
            return ['responses']

        responses = {str(code): entry for code, entry in responses.items()}
        operation['responses'] = responses
        status = observation.status_key

        if not isinstance(responses.get(status), dict):
            responses.update(self.responses_for(observation))
            return [f'response {status}']

        return self._merge_example(responses[status], observation.response_example)

    def _merge_example(self, entry: Dict[str, Any], value: Any) -> List[str]:
        content = entry.get('content')
        if not isinstance(content, dict):
            content = entry['content'] = {}

        media = content.get(JSON)
        if not isinstance(media, dict):
            media = content[JSON] = {'schema': {'type': 'object'}}

        examples = media.get('examples')
        if not isinstance(examples, dict):
            examples = media['examples'] = {}

        # Compare against the value as it will read back from storage
        candidates = {_fingerprint(value), _fingerprint(round_trip(value))}
        for example in examples.values():
            if isinstance(example, dict) and _fingerprint(example.get('value')) in candidates:
                return []

        name = next_example_name(examples)
        examples[name] = {'summary': '', 'value': value}
        return [f'example {name}']

    def _merge_parameters(self, operation: Dict[str, Any], staged: Dict[str, Any]) -> List[str]:
        """Append parameters whose names are not yet present. Location is ignored."""
        new_parameters = staged.get('parameters') or []
        existing = operation.get('parameters')

        if not isinstance(existing, list) or not existing:
            if new_parameters:
                operation['parameters'] = copy.deepcopy(new_parameters)
                return ['parameters']
            return []

        known = {p.get('name') for p in existing if isinstance(p, dict)}
        added = []
        for parameter in new_parameters:
            name = parameter.get('name')
            if name not in known:
                existing.append(copy.deepcopy(parameter))
                known.add(name)
                added.append(name)

        return [f'parameter {name}' for name in added]

    def _merge_request_body(self, operation: Dict[str, Any], staged: Dict[str, Any]) -> List[str]:
        """Attach a missing body, otherwise add unseen leaf fields (first write wins)."""
        new_body = staged.get('requestBody')
        if not isinstance(new_body, dict) or not new_body:
            return []

        existing = operation.get('requestBody')
        if not isinstance(existing, dict) or not existing:
            operation['requestBody'] = copy.deepcopy(new_body)
            return ['requestBody']

        content = existing.get('content')
        if not isinstance(content, dict):
            content = existing['content'] = {}

        changes = []
        for media_type, new_media in _as_dict(new_body.get('content')).items():
            old_media = content.get(media_type)
            if not isinstance(old_media, dict):
                content[media_type] = copy.deepcopy(new_media)
                changes.append(f'requestBody {media_type}')
                continue

            new_properties = _as_dict(_as_dict(new_media.get('schema')).get('properties'))
            if not new_properties:
                continue

            schema = old_media.get('schema')
            if not isinstance(schema, dict):
                schema = old_media['schema'] = {'type': 'object'}
            properties = schema.get('properties')
            if not isinstance(properties, dict):
                properties = schema['properties'] = {}

            for name, leaf in new_properties.items():
                if name not in properties:
                    properties[name] = copy.deepcopy(leaf)
                    changes.append(f'field {name}')

        return changes

    @staticmethod
    def canonicalize(operation: Dict[str, Any], observation: Observation) -> Dict[str, Any]:
        """
        Rebuild an operation with keys in canonical order.

        Tags, summary and security come from the latest observation; unknown
        keys are dropped; empty parameters and absent request bodies are
        omitted.
        """
        canonical: Dict[str, Any] = {
            'tags': list(observation.tags),
            'summary': observation.summary,
        }
        if operation.get('parameters'):
            canonical['parameters'] = operation['parameters']
        if operation.get('requestBody'):
            canonical['requestBody'] = operation['requestBody']
        canonical['responses'] = operation.get('responses') or {}
        canonical['security'] = copy.deepcopy(observation.security)
        return canonical
