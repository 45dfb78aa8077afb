"""Workflow names and a batch counter workflow that continues as new."""

from __future__ import annotations

import socket
import uuid
from dataclasses import dataclass

from .local_csv import LOCAL_CSV_SOURCE
from .sinks import MONGO_SINK, NOOP_SINK

APPLICATION_NAME = "processBatchTaskGroup"
CLOUD_CSV_SOURCE = "cloud-csv-source"


def _host_name() -> str:
    try:
        host = socket.gethostname()
    except OSError:
        host = ""
    return host or str(uuid.uuid4())


HOST_ID = f"{_host_name()}_{APPLICATION_NAME}"

PROCESS_LOCAL_CSV_MONGO_WORKFLOW_ALIAS = "process-local-csv-mongo-workflow-alias"
PROCESS_CLOUD_CSV_MONGO_WORKFLOW_ALIAS = "process-cloud-csv-mongo-workflow-alias"
PROCESS_LOCAL_CSV_NOOP_WORKFLOW_ALIAS = "process-local-csv-noop-workflow-alias"
PROCESS_CLOUD_CSV_NOOP_WORKFLOW_ALIAS = "process-cloud-csv-noop-workflow-alias"
FETCH_NEXT_LOCAL_CSV_SOURCE_BATCH_ALIAS = f"fetch-next-{LOCAL_CSV_SOURCE}-batch-alias"
FETCH_NEXT_CLOUD_CSV_SOURCE_BATCH_ALIAS = f"fetch-next-{CLOUD_CSV_SOURCE}-batch-alias"
WRITE_NEXT_NOOP_SINK_BATCH_ALIAS = f"write-next-{NOOP_SINK}-batch-alias"
WRITE_NEXT_MONGO_SINK_BATCH_ALIAS = f"write-next-{MONGO_SINK}-batch-alias"

CONTINUE_AS_NEW_FOR_BATCH_WORKFLOW = "ContinueAsNewForBatch"
ERR_PROCESS_CONTINUE_AS_NEW_WKFL = "error running continue as new workflow"


@dataclass
class ContinueAsNewForBatchInput:
    """State carried from one run of the batch counter workflow to the next."""

    counter: int = 0
    run_count: int = 0


class ContinueAsNew(Exception):
    """Signals that a workflow should start a fresh run with the given input."""

    def __init__(
        self,
        workflow_type: str,
        request: ContinueAsNewForBatchInput,
        event_limit: int,
        total_count: int,
    ) -> None:
        super().__init__(f"continue as new: {workflow_type}")
        self.workflow_type = workflow_type
        self.request = request
        self.event_limit = event_limit
        self.total_count = total_count


def continue_as_new_for_batch(
    request: ContinueAsNewForBatchInput, event_limit: int, total_count: int
) -> ContinueAsNewForBatchInput:
    """Run one pass: advance the counter by at most ``event_limit`` steps.

    Raises :class:`ContinueAsNew` while the counter is below ``total_count``;
    returns the request once it has reached it.
    """
    request.run_count += 1
    if request.counter < total_count:
        request.counter += min(event_limit, total_count - request.counter)

    if request.counter < total_count:
        raise ContinueAsNew(
            CONTINUE_AS_NEW_FOR_BATCH_WORKFLOW, request, event_limit, total_count
        )
    return request


def run_continue_as_new(
    request: ContinueAsNewForBatchInput, event_limit: int, total_count: int
) -> ContinueAsNewForBatchInput:
    """Chain runs of :func:`continue_as_new_for_batch` until one completes."""
    if event_limit <= 0 and request.counter < total_count:
        raise ValueError(f"{ERR_PROCESS_CONTINUE_AS_NEW_WKFL}: event limit must be positive")
    while True:
        try:
            return continue_as_new_for_batch(request, event_limit, total_count)
        except ContinueAsNew as step:
            request, event_limit, total_count = (
                step.request,
                step.event_limit,
                step.total_count,
            )