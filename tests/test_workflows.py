import pytest

from batchflow.workflows import (
    CONTINUE_AS_NEW_FOR_BATCH_WORKFLOW,
    ContinueAsNew,
    ContinueAsNewForBatchInput,
    continue_as_new_for_batch,
    run_continue_as_new,
)


def test_continue_as_new_zero_start_raises():
    start = ContinueAsNewForBatchInput(counter=0, run_count=0)
    with pytest.raises(ContinueAsNew) as info:
        continue_as_new_for_batch(start, 5, 25)
    err = info.value
    assert err.workflow_type == CONTINUE_AS_NEW_FOR_BATCH_WORKFLOW
    assert err.workflow_type == "ContinueAsNewForBatch"
    assert err.request.counter == 5
    assert err.request.run_count == 1
    assert (err.event_limit, err.total_count) == (5, 25)


def test_continue_as_new_completes_in_one_run():
    out = continue_as_new_for_batch(ContinueAsNewForBatchInput(), 5, 3)
    assert out == ContinueAsNewForBatchInput(counter=3, run_count=1)


def test_continue_as_new_integration_completes():
    out = run_continue_as_new(ContinueAsNewForBatchInput(counter=0, run_count=0), 5, 27)
    assert out.counter == 27
    assert out.run_count == 6


@pytest.mark.parametrize(
    "limit, total, runs",
    [(5, 25, 5), (1, 3, 3), (10, 0, 1), (30, 27, 1)],
)
def test_run_continue_as_new_counts(limit, total, runs):
    out = run_continue_as_new(ContinueAsNewForBatchInput(), limit, total)
    assert out.counter == total
    assert out.run_count == runs


def test_run_continue_as_new_rejects_zero_limit():
    with pytest.raises(ValueError):
        run_continue_as_new(ContinueAsNewForBatchInput(), 0, 4)