import asyncio

import pytest

from conftest import GROUP_ID, WEEK1_MON, WEEK1_WED, WEEK2_MON, WEEK2_WED, WINDOW_END

from src.edu_center.edu_center.core.enums import AttendanceStatus
from src.edu_center.edu_center.core.exceptions import ValidationError
from src.edu_center.edu_center.ledger.session import LedgerSession


@pytest.fixture
def session(loader, reconciler):
    s = LedgerSession(loader=loader, reconciler=reconciler, group_id=GROUP_ID, window_start=WEEK1_MON, window_end=WINDOW_END)
    assert asyncio.run(s.open()).ok
    return s


def test_edit_commit_cycle(store, session):
    session.begin_edit()
    session.set_cell(1, WEEK1_MON, "present")
    session.set_cell(2, WEEK1_MON, "absent")

    result = asyncio.run(session.commit())

    assert result.ok
    assert not session.editing
    assert session.matrix.get(1, WEEK1_MON).status == AttendanceStatus.PRESENT
    assert store.status_of(2, WEEK1_MON) == AttendanceStatus.ABSENT


def test_failed_reload_keeps_previous_matrix(store, session):
    store.add(1, WEEK1_MON, AttendanceStatus.PRESENT)
    asyncio.run(session.reload())
    previous = session.matrix
    store.fail_fetch = True

    result = asyncio.run(session.reload())

    assert not result.ok
    assert session.last_error
    assert session.matrix is previous


def test_changing_window_drops_edit_and_reloads(session):
    session.begin_edit()
    session.set_cell(1, WEEK1_MON, "present")

    result = asyncio.run(session.change_window(WEEK2_MON, WINDOW_END))

    assert result.ok
    assert not session.editing
    assert session.matrix.dates == (WEEK2_MON, WEEK2_WED)


def test_failed_window_change_keeps_window_and_grid_together(store, session):
    previous = session.matrix
    store.fail_fetch = True

    result = asyncio.run(session.change_window(WEEK2_MON, WEEK2_WED))

    assert not result.ok
    assert session.matrix is previous
    assert (session.window_start, session.window_end) == (session.matrix.window_start, session.matrix.window_end)
    assert (session.window_start, session.window_end) == (WEEK1_MON, WINDOW_END)


def test_commit_after_failed_window_change_stays_on_previous_window(store, session):
    store.fail_fetch = True
    asyncio.run(session.change_window(WEEK2_MON, WEEK2_WED))
    store.fail_fetch = False

    session.begin_edit()
    session.set_cell(1, WEEK1_MON, "present")
    result = asyncio.run(session.commit())

    assert result.ok
    assert session.matrix.dates == (WEEK1_MON, WEEK1_WED, WEEK2_MON, WEEK2_WED)
    assert session.matrix.get(1, WEEK1_MON).status == AttendanceStatus.PRESENT


def test_failed_group_change_keeps_previous_group(roster, session):
    roster.fail = True

    result = asyncio.run(session.change_group(GROUP_ID + 1))

    assert not result.ok
    assert session.group_id == GROUP_ID
    assert session.matrix.group_id == GROUP_ID


def test_reversed_window_is_an_empty_grid(session):
    result = asyncio.run(session.change_window(WINDOW_END, WEEK1_MON))

    assert result.ok
    assert session.matrix.dates == ()
    assert session.statistics().total == 0


def test_cancel_edit_leaves_store_untouched(store, session):
    session.begin_edit()
    session.set_cell(1, WEEK1_MON, "present")

    session.cancel_edit()

    assert store.writes == []
    with pytest.raises(ValidationError):
        asyncio.run(session.commit())


def test_begin_edit_twice_is_rejected(session):
    session.begin_edit()

    with pytest.raises(ValidationError):
        session.begin_edit()


def test_statistics_follow_the_grid(store, session):
    store.add(1, WEEK1_MON, AttendanceStatus.PRESENT)
    store.add(2, WEEK1_MON, AttendanceStatus.LATE)
    store.add(3, WEEK1_WED, AttendanceStatus.ABSENT)
    asyncio.run(session.reload())

    stats = session.statistics()

    assert (stats.total, stats.present, stats.late, stats.absent) == (3, 1, 1, 1)
    assert stats.rate == 66.7


def test_closed_session_rejects_work(session):
    session.close()

    with pytest.raises(ValidationError):
        session.begin_edit()
