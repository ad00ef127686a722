"""Per-check pipeline: read, validate, probe, classify, log, persist, alert."""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from uptime_worker.core.alerts import AlertDispatcher
from uptime_worker.core.check_logger import CheckLogger
from uptime_worker.core.classifier import classify
from uptime_worker.core.errors import CheckValidationError, PersistenceError, RecordNotFoundError
from uptime_worker.core.metrics import MetricsCollector
from uptime_worker.core.persister import StatePersister
from uptime_worker.core.probe import ProbeExecutor
from uptime_worker.core.validator import validate_check_data
from uptime_worker.schemas.check import CheckOutcome, CheckRecord, CheckState
from uptime_worker.storage.records import RecordStore
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


def epoch_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class PipelineResult:
    """What one pass of the pipeline did for a check."""
    record: CheckRecord
    outcome: CheckOutcome
    state: CheckState
    alert_warranted: bool
    time_of_check: int
    logged: bool = False
    persisted: bool = False
    alerted: bool = False


class CheckPipeline:
    """
    Runs one check from its stored record to its alert.

    The probe entry is logged whatever happens afterwards. The alert is
    only sent once the new state is durably stored, so users are never
    told about a state the store does not reflect.
    """

    def __init__(
        self,
        store: RecordStore,
        probe: ProbeExecutor,
        persister: StatePersister,
        dispatcher: AlertDispatcher,
        check_logger: CheckLogger,
        category: str = "checks",
        clock: Callable[[], int] = epoch_millis,
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize check pipeline.

        Args:
            store: Record store holding check definitions
            probe: Probe executor
            persister: Writes the new state back
            dispatcher: Sends state-change alerts
            check_logger: Appends probe log entries
            category: Record store category of checks
            clock: Returns the current time in epoch milliseconds
            metrics: Optional metrics collector
        """
        self.store = store
        self.probe = probe
        self.persister = persister
        self.dispatcher = dispatcher
        self.check_logger = check_logger
        self.category = category
        self.clock = clock
        self.metrics = metrics

    def _skip(self, reason: str) -> None:
        if self.metrics:
            self.metrics.record_skip(reason)

    async def run(self, check_id: str) -> Optional[PipelineResult]:
        """
        Read a check by id and process it.

        Returns:
            PipelineResult or None if the record could not be read or was
            rejected
        """
        try:
            raw = await self.store.read(self.category, check_id)
        except RecordNotFoundError:
            logger.warning("Check disappeared before it could be read", extra={"check_id": check_id})
            self._skip("not_found")
            return None
        except PersistenceError as e:
            logger.error(
                "Error reading one of the check's data",
                extra={"check_id": check_id, "error": str(e)}
            )
            self._skip("read_error")
            return None

        return await self.process(raw)

    async def process(self, raw) -> Optional[PipelineResult]:
        """
        Validate and process a raw check record.

        Returns:
            PipelineResult or None if the record was rejected
        """
        try:
            record = validate_check_data(raw)
        except CheckValidationError as e:
            logger.warning(
                "One of the checks is not properly formatted, skipping it",
                extra={"check_id": e.check_id, "invalid_fields": e.invalid_fields}
            )
            self._skip("invalid")
            return None

        started = time.monotonic()
        outcome = await self.probe.execute(record)
        state, alert_warranted = classify(record, outcome)
        time_of_check = self.clock()

        if self.metrics:
            self.metrics.record_probe(state, time.monotonic() - started)

        result = PipelineResult(
            record=record,
            outcome=outcome,
            state=state,
            alert_warranted=alert_warranted,
            time_of_check=time_of_check
        )

        result.logged = await self.check_logger.log(
            record, outcome, state, alert_warranted, time_of_check
        )

        try:
            updated = await self.persister.persist(record, state, time_of_check)
        except PersistenceError as e:
            logger.error(
                "Error trying to save updates to one of the checks, alert skipped",
                extra={"check_id": record.id, "state": state, "error": str(e)}
            )
            return result
        result.persisted = True

        if alert_warranted:
            result.alerted = await self.dispatcher.dispatch(updated)
        else:
            logger.debug(
                "Check outcome has not changed, no alert needed",
                extra={"check_id": record.id, "state": state}
            )

        return result
