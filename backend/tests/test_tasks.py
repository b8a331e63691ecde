from datetime import datetime, timezone

import pytest

from traincore.services.tasks import resolve_completed_at

EARLIER = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 5, 2, 9, 0, tzinfo=timezone.utc)


def test_entering_completed_stamps_now():
    assert resolve_completed_at("IN_PROGRESS", "COMPLETED", None, NOW) == NOW


def test_staying_completed_keeps_original_stamp():
    assert resolve_completed_at("COMPLETED", "COMPLETED", EARLIER, NOW) == EARLIER


@pytest.mark.parametrize("new_status", ["NOT_STARTED", "IN_PROGRESS"])
def test_leaving_completed_clears_stamp(new_status):
    assert resolve_completed_at("COMPLETED", new_status, EARLIER, NOW) is None


def test_new_completed_task_is_stamped():
    assert resolve_completed_at(None, "COMPLETED", None, NOW) == NOW


def test_unknown_status_rejected():
    with pytest.raises(ValueError):
        resolve_completed_at("NOT_STARTED", "DONE", None, NOW)
