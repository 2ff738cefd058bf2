from __future__ import annotations

import asyncio

from signaling.errors import CallNotFoundError
from signaling.history import CallHistoryRecorder
from signaling.sessions import CallSessionStore


class FakeRepository:
    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.calls: list[tuple[str, str]] = []

    async def start_call(self, call_id: str, **kwargs) -> None:
        if self.fail_with:
            raise self.fail_with
        self.calls.append(("start", call_id))

    async def end_call(self, call_id: str, **kwargs) -> None:
        if self.fail_with:
            raise self.fail_with
        self.calls.append(("end", call_id))


def _run(coro):
    return asyncio.run(coro)


def _session():
    return CallSessionStore().create("a", "b")


def test_recorder_writes_start_then_end_in_order():
    repo = FakeRepository()
    recorder = CallHistoryRecorder(repo)
    session = _session()

    async def _record():
        await asyncio.gather(recorder.call_started(session), recorder.call_ended(session))

    _run(_record())
    assert repo.calls == [("start", session.call_id), ("end", session.call_id)]


def test_recorder_swallows_repository_failures():
    recorder = CallHistoryRecorder(FakeRepository(fail_with=RuntimeError("database is down")))
    session = _session()

    _run(recorder.call_started(session))
    _run(recorder.call_ended(session))


def test_recorder_tolerates_missing_start_record():
    recorder = CallHistoryRecorder(FakeRepository(fail_with=CallNotFoundError()))

    _run(recorder.call_ended(_session()))


def test_disabled_recorder_never_touches_repository():
    repo = FakeRepository()
    recorder = CallHistoryRecorder(repo, enabled=False)
    session = _session()

    _run(recorder.call_started(session))
    _run(recorder.call_ended(session))
    assert repo.calls == []
