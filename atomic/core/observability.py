"""Transaction metrics emitted as structured JSON log lines.

Every event is one ``INFO`` record on the ``atomic.core.observability``
logger, so a log shipper can turn them into counters and histograms.
"""

import json
import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from atomic.core.config import settings

logger = logging.getLogger(__name__)


def log_metric(
    event_type: str,
    value: Optional[float] = None,
    labels: Optional[Dict[str, str]] = None,
    **kwargs: Any,
) -> None:
    """
    Write one metric event.

    Args:
        event_type: 'counter_increment', 'histogram_record' or a custom kind
        value: numeric sample, omitted from the record when None
        labels: metric dimensions, e.g. the executor class name
        **kwargs: extra top-level fields
    """
    record: Dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
        "event_type": event_type,
        "instance_id": os.getenv("INSTANCE_ID", "unknown"),
        "service": settings.PROJECT_NAME,
    }
    if value is not None:
        record["value"] = value
    if labels:
        record["labels"] = labels
    record.update(kwargs)

    # Exceptions and other objects in kwargs are logged via str()
    logger.info(json.dumps(record, default=str))


def log_counter_increment(
    name: str, labels: Optional[Dict[str, str]] = None, **kwargs: Any
) -> None:
    log_metric("counter_increment", counter_name=name, labels=labels, **kwargs)


def log_histogram_record(
    name: str, value: float, labels: Optional[Dict[str, str]] = None, **kwargs: Any
) -> None:
    log_metric(
        "histogram_record", value=value, histogram_name=name, labels=labels, **kwargs
    )


def log_transaction_event(event: str, executor: str, **kwargs: Any) -> None:
    """Count a transaction lifecycle event: open, reuse or failed."""
    log_counter_increment(
        f"transaction_{event}", labels={"executor": executor}, **kwargs
    )


@contextmanager
def record_duration(name: str, executor: str) -> Iterator[None]:
    """Record the wall time of the block in milliseconds, even if it raises."""
    started = time.monotonic()
    try:
        yield
    finally:
        log_histogram_record(
            name,
            (time.monotonic() - started) * 1000,
            labels={"executor": executor},
        )
