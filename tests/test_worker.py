from __future__ import annotations

import threading

from ghircbot.engine.worker import FAILURE_LINE, BackgroundWorker


def _wait_for(worker: BackgroundWorker, count: int) -> list[tuple[str, list[str]]]:
    results: list[tuple[str, list[str]]] = []
    for _ in range(200):
        results.extend(worker.drain())
        if len(results) >= count:
            return results
        threading.Event().wait(0.01)
    raise AssertionError(f"expected {count} results, got {results}")


def test_results_are_queued_per_channel() -> None:
    worker = BackgroundWorker(max_workers=2)
    try:
        worker.submit("#a", lambda: ["one"])
        worker.submit("#b", lambda: ("two", "three"))
        results = _wait_for(worker, 2)
    finally:
        worker.shutdown()

    assert sorted(results) == [("#a", ["one"]), ("#b", ["two", "three"])]


def test_failing_job_reports_a_generic_line(caplog) -> None:
    def boom() -> list[str]:
        raise RuntimeError("network down")

    worker = BackgroundWorker(max_workers=1)
    try:
        worker.submit("#a", boom)
        results = _wait_for(worker, 1)
    finally:
        worker.shutdown()

    assert results == [("#a", [FAILURE_LINE])]
    assert any(r.message == "Background job failed" for r in caplog.records)


def test_drain_without_results_is_empty() -> None:
    worker = BackgroundWorker()
    try:
        assert worker.drain() == []
    finally:
        worker.shutdown()
