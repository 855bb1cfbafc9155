"""
Unit Tests: Scheduler and Cloud Function Handlers

Test cases:
- Sweep job registration and interval
- Sweep job failure handling
- Firestore event unpacking for each trigger
"""

from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace

from apscheduler.schedulers.background import BackgroundScheduler

from sidebet import triggers
from sidebet.config import SchedulerConfig, Settings
from sidebet.notifications import NotificationDispatcher
from sidebet.scheduler import build_scheduler, closing_soon_job
from sidebet.storage import MemoryStore


class _Snapshot:
    def __init__(self, data):
        self._data = data

    def to_dict(self):
        return self._data


def _event(data, **params):
    return SimpleNamespace(data=data, params=params)


def test_build_scheduler_registers_sweep(tmp_path: Path) -> None:
    settings = Settings(data_dir=tmp_path, scheduler=SchedulerConfig(closing_soon_sweep_minutes=15))
    dispatcher = NotificationDispatcher(MemoryStore())

    scheduler = build_scheduler(settings, dispatcher, scheduler_cls=BackgroundScheduler)
    jobs = scheduler.get_jobs()

    assert [job.id for job in jobs] == ["closing-soon-sweep"]
    assert jobs[0].trigger.interval == timedelta(minutes=15)
    assert jobs[0].args == (dispatcher,)


def test_closing_soon_job_swallows_sweep_failure() -> None:
    class FailingDispatcher:
        def sweep_closing_soon(self):
            raise RuntimeError("firestore unavailable")

    closing_soon_job(FailingDispatcher())


def test_bet_updated_event() -> None:
    store = MemoryStore({"users": {"a": {"displayName": "Ann"}}})
    dispatcher = NotificationDispatcher(store)
    change = SimpleNamespace(
        before=_Snapshot({"status": "OPEN"}),
        after=_Snapshot(
            {
                "title": "Derby",
                "status": "CLOSED",
                "participants": ["a", "b"],
                "winnerId": "a",
                "perUserWager": 4,
            }
        ),
    )

    result = triggers._handle_bet_updated(_event(change, betId="bet1"), dispatcher)

    assert result.sent == 2
    assert {n.type for n in result.notifications} == {"WON", "LOST"}


def test_created_events() -> None:
    dispatcher = NotificationDispatcher(MemoryStore())

    friend = triggers._handle_friend_request_created(
        _event(_Snapshot({"senderId": "a", "receiverId": "b"}), requestId="fr1"), dispatcher
    )
    challenge = triggers._handle_bet_created(
        _event(_Snapshot({"title": "Pool", "betTheme": "friend", "friendId": "b", "creatorId": "a"}), betId="h2h"),
        dispatcher,
    )
    payment = triggers._handle_settlement_created(
        _event(_Snapshot({"requesterId": "a", "payerId": "b", "amount": 3}), settlementId="s1"),
        dispatcher,
    )

    assert [friend.sent, challenge.sent, payment.sent] == [1, 1, 1]


def test_deleted_snapshot_is_skipped() -> None:
    dispatcher = NotificationDispatcher(MemoryStore())

    result = triggers._handle_settlement_created(_event(None, settlementId="s1"), dispatcher)

    assert result.skipped_reason == "no data"
