"""Derives the new up/down state and the alert decision for a probe."""

from typing import NamedTuple

from uptime_worker.schemas.check import CheckOutcome, CheckRecord, CheckState


class Classification(NamedTuple):
    state: CheckState
    alert_warranted: bool


def classify(record: CheckRecord, outcome: CheckOutcome) -> Classification:
    """
    Classify a probe outcome against the check's previous state.
    
    A check is up only when the probe got a response whose code is one of
    the check's success codes; any error means down, whatever the response
    code says. An alert is warranted only when the check has been probed
    before and its state changed, so a newly registered check never alerts
    on its first probe.
    
    Args:
        record: The check as it was before this probe
        outcome: What the probe observed
        
    Returns:
        Classification: New state and whether to alert
    """
    is_up = (
        outcome.error is None
        and outcome.response_code is not None
        and outcome.response_code in record.success_codes
    )
    state: CheckState = "up" if is_up else "down"
    
    alert_warranted = record.last_check is not None and record.state != state
    
    return Classification(state=state, alert_warranted=alert_warranted)
