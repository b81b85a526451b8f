"""
TraceSpec session.

A session lives for one test run. It owns the accumulator and runs the
record -> merge -> persist steps for every captured exchange. Failures are
logged and swallowed so that recording never breaks the request or test it
observes.
"""

import logging
from pathlib import Path
from typing import Optional

from .capture.recorder import Exchange, Observation, TraceRecorder
from .config import TraceConfig
from .store.document_store import YamlDocumentStore
from .update.accumulator import Accumulator
from .update.descriptions import description_source
from .update.merger import MergeResult, SpecMerger

logger = logging.getLogger("tracespec.session")


class TraceSession:
    """
    Records exchanges into the configured API description.

    Example:
        session = TraceSession.from_env()
        session.record(Exchange(path='/users/7', method='GET', status=200,
                                path_params={'id': '7'}, resource='users',
                                response_body=b'{"id": 7}'))
        session.close()
    """

    def __init__(
        self,
        config: TraceConfig,
        accumulator: Optional[Accumulator] = None,
        store: Optional[YamlDocumentStore] = None,
        recorder: Optional[TraceRecorder] = None,
        merger: Optional[SpecMerger] = None
    ):
        self.config = config.validate()
        self.accumulator = accumulator or Accumulator()
        self.store = store or YamlDocumentStore(config)
        self.recorder = recorder or TraceRecorder(config)
        self.merger = merger or SpecMerger(
            description_source(config),
            envelope=config.envelope() if config.with_config else None
        )
        self.errors = 0
        self.closed = False

    @classmethod
    def from_env(cls) -> 'TraceSession':
        return cls(TraceConfig.from_env())

    @property
    def enabled(self) -> bool:
        return self.config.enabled and not self.closed

    def record(self, exchange: Exchange) -> Optional[MergeResult]:
        """
        Record one exchange and persist the updated document.

        Returns:
            The MergeResult, or None when disabled or when recording failed
        """
        if not self.enabled:
            return None

        try:
            with self.accumulator.lock:
                observation = self.recorder.record(exchange)
                return self.apply(observation)
        except Exception as e:
            # Never fail the request being observed
            self.errors += 1
            logger.error(
                f"Failed to record {exchange.method} {exchange.path}: {e}",
                exc_info=True
            )
            return None

    def apply(self, observation: Observation) -> MergeResult:
        """Stage an observation, merge it into its document and save."""
        path = observation.templated_path
        operation = observation.operation(self.merger.responses_for(observation))
        self.accumulator.stage(path, observation.method, operation)

        location = self.location(observation)
        document = self.store.load(location)
        if document is None:
            logger.info(f"Creating API description {location}")

        result = self.merger.merge(document, observation, self.accumulator.path_entry(path))
        self.store.save(location, result.document)

        if result.changes:
            logger.info(
                f"{observation.method.upper()} {path} [{observation.status_key}]: "
                f"{', '.join(result.changes)}"
            )
        else:
            logger.debug(f"{observation.method.upper()} {path}: no changes")

        return result

    def location(self, observation: Observation) -> Path:
        primary_tag = observation.tags[0] if observation.tags else 'default'
        return self.store.location_for(primary_tag or 'default')

    def close(self) -> int:
        """Flush the accumulator at the end of the run. Returns operations flushed."""
        staged = self.accumulator.flush()
        self.closed = True
        count = sum(len(methods) for methods in staged.values())
        if count:
            logger.info(f"Recorded {count} operations ({self.errors} errors)")
        return count
