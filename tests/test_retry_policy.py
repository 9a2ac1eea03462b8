from __future__ import annotations

import pytest

from bankin.scraper import retry_policy


@pytest.fixture
def event_recorder(monkeypatch: pytest.MonkeyPatch) -> list[tuple[str, dict]]:
    events: list[tuple[str, dict]] = []

    def _record(event_phase: str, **fields: object) -> None:
        events.append((event_phase, fields))

    monkeypatch.setattr(retry_policy, "_scraper_event", _record)
    return events


@pytest.mark.parametrize(
    "attempt, expected, kind",
    [
        (1, True, "retryable"),
        (3, True, "retryable"),
        (4, False, "capped"),
        (9, False, "capped"),
    ],
)
def test_capped_retry_limits(
    attempt: int, expected: bool, kind: str, event_recorder: list[tuple[str, dict]]
) -> None:
    result = retry_policy.decide_transient_retry(attempt, 3, page_index=7)
    assert result is expected
    assert len(event_recorder) == 1
    phase, fields = event_recorder[0]
    assert phase == "state"
    assert fields["phase"] == "retry_decision"
    assert fields["error_code"] == "transient_alert"
    assert fields["attempt"] == attempt
    assert fields["max_attempts"] == 3
    assert fields["page_index"] == 7
    assert fields["will_retry"] is expected
    assert fields["kind"] == kind


@pytest.mark.parametrize("max_attempts", [0, -1])
def test_non_positive_cap_never_stops(max_attempts: int, event_recorder: list[tuple[str, dict]]) -> None:
    assert retry_policy.decide_transient_retry(10_000, max_attempts) is True
    _, fields = event_recorder[0]
    assert fields["kind"] == "unbounded"
    assert fields["will_retry"] is True
