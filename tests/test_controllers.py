from __future__ import annotations

import pytest
from flask import Flask

from conftest import GROUP_ID, WEEK1_MON, WEEK1_WED, WINDOW_END

from src.edu_center.edu_center.container import Container
from src.edu_center.edu_center.core.enums import AttendanceStatus
from src.edu_center.edu_center.ledger.controller import register as register_ledger
from src.edu_center.edu_center.statistics.controller import register as register_statistics
from src.edu_center.edu_center.statistics.service import StatisticsService

WINDOW = {"start": WEEK1_MON.isoformat(), "end": WINDOW_END.isoformat()}


@pytest.fixture
def client(schedules, roster, store, loader, reconciler):
    container = Container(
        conn=None,
        schedules_repo=schedules,
        students_repo=roster,
        attendance_repo=store,
        matrix_loader=loader,
        reconciler=reconciler,
        statistics_service=StatisticsService(store),
    )
    app = Flask(__name__)
    app.config["TESTING"] = True
    register_ledger(app, container)
    register_statistics(app, container)
    return app.test_client()


def test_ledger_view_returns_grid_and_stats(client, store):
    store.add(1, WEEK1_MON, AttendanceStatus.PRESENT)

    resp = client.get(f"/api/groups/{GROUP_ID}/ledger", query_string=WINDOW)

    assert resp.status_code == 200
    ledger = resp.get_json()["ledger"]
    assert ledger["dates"][0] == WEEK1_MON.isoformat()
    assert [r["student_id"] for r in ledger["rows"]] == [3, 1, 2]
    assert ledger["statistics"]["attendance_rate"] == 100.0


def test_ledger_view_rejects_bad_dates(client):
    resp = client.get(f"/api/groups/{GROUP_ID}/ledger", query_string={"start": "yesterday"})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_ledger_view_reports_load_failure(client, store):
    store.fail_fetch = True

    resp = client.get(f"/api/groups/{GROUP_ID}/ledger", query_string=WINDOW)

    assert resp.status_code == 503


def test_commit_applies_cells(client, store):
    body = {
        **WINDOW,
        "collapse": True,
        "cells": [
            {"student_id": 1, "date": WEEK1_MON.isoformat(), "value": "present"},
            {"student_id": 2, "date": WEEK1_WED.isoformat(), "value": "absent"},
        ],
    }

    resp = client.post(f"/api/groups/{GROUP_ID}/ledger/commit", json=body)

    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["applied_count"] == 2
    assert payload["failed_ops"] == []
    assert store.status_of(2, WEEK1_WED) == AttendanceStatus.ABSENT


def test_commit_with_failures_returns_multi_status(client, store):
    rid = store.add(1, WEEK1_MON, AttendanceStatus.PRESENT)
    store.failing_ids.add(rid)
    body = {**WINDOW, "cells": [{"student_id": 1, "date": WEEK1_MON.isoformat(), "value": "late"}]}

    resp = client.post(f"/api/groups/{GROUP_ID}/ledger/commit", json=body)

    assert resp.status_code == 207
    payload = resp.get_json()
    assert payload["failed_ops"][0]["kind"] == "update"
    assert payload["matrix"] is not None


def test_commit_rejects_cells_off_the_grid(client, store):
    body = {**WINDOW, "cells": [{"student_id": 1, "date": "2026-02-03", "value": "present"}]}

    resp = client.post(f"/api/groups/{GROUP_ID}/ledger/commit", json=body)

    assert resp.status_code == 400
    assert store.writes == []


def test_export_returns_xlsx(client):
    resp = client.get(f"/api/groups/{GROUP_ID}/ledger.xlsx", query_string=WINDOW)

    assert resp.status_code == 200
    assert "attachment" in resp.headers["Content-Disposition"]
    assert resp.data[:2] == b"PK"


def test_stats_requires_exactly_one_scope(client):
    assert client.get("/api/attendance/stats").status_code == 400
    assert client.get("/api/attendance/stats", query_string={"group_id": 1, "course_id": 2}).status_code == 400


def test_stats_by_group(client, store):
    store.add(1, WEEK1_MON, AttendanceStatus.PRESENT)
    store.add(2, WEEK1_MON, AttendanceStatus.ABSENT)

    resp = client.get("/api/attendance/stats", query_string={"group_id": GROUP_ID})

    assert resp.status_code == 200
    assert resp.get_json()["stats"] == {
        "total": 2,
        "present": 1,
        "absent": 1,
        "late": 0,
        "excused": 0,
        "attendance_rate": 50.0,
    }


def test_course_breakdown_endpoint(client, store):
    store.add(1, WEEK1_MON, AttendanceStatus.LATE)

    resp = client.get("/api/attendance/stats/courses")

    payload = resp.get_json()
    assert payload["overall"]["total"] == 1
    assert payload["by_course"][0]["course_name"] == "English B1"


def test_student_monthly_endpoint(client, store):
    store.add(1, WEEK1_MON, AttendanceStatus.PRESENT)

    resp = client.get("/api/students/1/attendance/monthly", query_string={"from": "2026-01", "to": "2026-02"})

    months = resp.get_json()["months"]
    assert months["2026-01"]["total"] == 0
    assert months["2026-02"]["attendance_rate"] == 100.0


def test_commit_reads_string_false_as_full_mode(client, store):
    body = {**WINDOW, "collapse": "false", "cells": [{"student_id": 1, "date": WEEK1_MON.isoformat(), "value": "late"}]}

    resp = client.post(f"/api/groups/{GROUP_ID}/ledger/commit", json=body)

    assert resp.status_code == 200
    assert store.status_of(1, WEEK1_MON) == AttendanceStatus.LATE


@pytest.mark.parametrize(
    "body",
    [
        {**WINDOW, "collapse": "sometimes", "cells": []},
        {**WINDOW, "cells": ["not-a-cell"]},
        {**WINDOW, "cells": {"student_id": 1}},
        ["not", "an", "object"],
    ],
)
def test_commit_rejects_malformed_body(client, store, body):
    resp = client.post(f"/api/groups/{GROUP_ID}/ledger/commit", json=body)

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False
    assert store.writes == []
