"""
Run-scoped accumulator of staged operations.

Holds the latest observed Operation for every (templated path, method) seen
during one test run. It is created when the run starts, written by every
exchange, read by the merger, and flushed when the run ends.
"""

import copy
import threading
from typing import Any, Dict, Optional


class Accumulator:
    """
    Mapping templated path -> method -> staged Operation.

    All access goes through one lock so that a test runner executing
    requests on several threads cannot interleave stage/read pairs.
    """

    def __init__(self):
        self._paths: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.lock = threading.RLock()
        self.exchanges = 0

    def stage(self, path: str, method: str, operation: Dict[str, Any]) -> None:
        """Record the latest operation for path/method, replacing any previous one."""
        with self.lock:
            self._paths.setdefault(path, {})[method] = copy.deepcopy(operation)
            self.exchanges += 1

    def operation(self, path: str, method: str) -> Optional[Dict[str, Any]]:
        """Copy of the staged operation, or None."""
        with self.lock:
            staged = self._paths.get(path, {}).get(method)
            return copy.deepcopy(staged) if staged is not None else None

    def path_entry(self, path: str) -> Dict[str, Dict[str, Any]]:
        """Copy of every staged method for a path."""
        with self.lock:
            return copy.deepcopy(self._paths.get(path, {}))

    def flush(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Discard all staged operations and return what was held."""
        with self.lock:
            staged, self._paths = self._paths, {}
            return staged

    def __len__(self) -> int:
        with self.lock:
            return sum(len(methods) for methods in self._paths.values())

    def __contains__(self, path: str) -> bool:
        with self.lock:
            return path in self._paths
