import asyncio

from splatbin.services.reaper_service import ReaperScheduler
from splatbin.services.upload_service import TextPayload


def upload(services, text, hours=None):
    return services.uploads.submit(TextPayload(text), expiration_hint=hours).record


def test_reaper_removes_only_expired_uploads(services, clock):
    short = upload(services, "short", hours=1)
    long = upload(services, "long", hours=48)
    forever = upload(services, "forever")

    clock.advance(hours=2)
    report = services.reaper.run_once()

    assert report.scanned == 1
    assert report.reaped == [short.id]
    assert report.failed == []
    assert not services.metadata.exists(short.id)
    assert not services.content.exists(short.stored_name)
    for record in (long, forever):
        assert services.metadata.exists(record.id)
        assert services.content.exists(record.stored_name)


def test_reaper_does_not_delete_before_expiry(services, clock):
    record = upload(services, "not yet", hours=1)

    clock.advance(minutes=59, seconds=59)
    report = services.reaper.run_once()

    assert report.scanned == 0
    assert services.metadata.exists(record.id)


def test_second_run_is_a_no_op(services, clock):
    upload(services, "a", hours=1)
    upload(services, "b", hours=1)
    clock.advance(hours=1)

    first = services.reaper.run_once()
    remaining = sorted(p.name for p in services.content.root.iterdir())
    second = services.reaper.run_once()

    assert len(first.reaped) == 2
    assert second.scanned == 0
    assert second.reaped == []
    assert sorted(p.name for p in services.content.root.iterdir()) == remaining == []


def test_reaper_tolerates_missing_file(services, clock):
    record = upload(services, "manually removed", hours=1)
    services.content.delete(record.stored_name)
    clock.advance(hours=1)

    report = services.reaper.run_once()

    assert report.reaped == [record.id]
    assert report.missing_files == [record.id]
    assert not services.metadata.exists(record.id)


def test_one_failure_does_not_stop_the_scan(services, clock, monkeypatch):
    bad = upload(services, "bad", hours=1)
    good = upload(services, "good", hours=1)
    clock.advance(hours=1)

    original_delete = services.content.delete

    def flaky_delete(stored_name):
        if stored_name == bad.stored_name:
            raise PermissionError("read-only")
        return original_delete(stored_name)

    monkeypatch.setattr(services.content, "delete", flaky_delete)
    report = services.reaper.run_once()

    assert report.failed == [bad.id]
    assert report.reaped == [good.id]
    assert services.metadata.exists(bad.id)

    # 下次执行时会重新处理
    monkeypatch.setattr(services.content, "delete", original_delete)
    retry = services.reaper.run_once()
    assert retry.reaped == [bad.id]
    assert not services.metadata.exists(bad.id)


def test_scheduler_tick_runs_reaper(services, clock):
    record = upload(services, "tick", hours=1)
    clock.advance(hours=1)
    scheduler = ReaperScheduler(services.reaper, interval_seconds=3600)

    report = asyncio.run(scheduler.tick())

    assert report.reaped == [record.id]


def test_scheduler_tick_survives_errors(services, monkeypatch):
    def broken(now=None):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(services.reaper, "run_once", broken)
    scheduler = ReaperScheduler(services.reaper, interval_seconds=3600)

    assert asyncio.run(scheduler.tick()) is None


def test_scheduler_start_and_stop(services, clock):
    record = upload(services, "background", hours=1)
    clock.advance(hours=1)
    scheduler = ReaperScheduler(services.reaper, interval_seconds=3600)

    async def scenario():
        scheduler.start()
        assert scheduler.running
        for _ in range(100):
            if not services.metadata.exists(record.id):
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

    asyncio.run(scenario())

    assert not scheduler.running
    assert not services.metadata.exists(record.id)
