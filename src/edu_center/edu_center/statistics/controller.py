from __future__ import annotations

import asyncio

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_key, parse_iso_date, parse_month, today_local
from ..common.validators import require_positive_id
from ..container import Container
from ..core.exceptions import LoadError, ValidationError
from .scope import ByCourse, ByGroup, ByStudent, Scope


def register(app: Flask, container: Container) -> None:
    def _optional_date(name: str):
        value = request.args.get(name)
        return parse_iso_date(value) if value else None

    def _month_range(args) -> tuple[str, str]:
        current = month_key(today_local())
        start_month = args.get("from") or current
        end_month = args.get("to") or start_month
        # validates format
        parse_month(start_month)
        parse_month(end_month)
        return start_month, end_month

    def _scope_from_args() -> Scope:
        args = request.args
        given = [k for k in ("group_id", "course_id", "student_id") if args.get(k)]
        if len(given) != 1:
            raise ValidationError("Pass exactly one of group_id, course_id, student_id")

        key = given[0]
        scope_id = require_positive_id(args.get(key), key)
        if key == "group_id":
            return ByGroup(scope_id, start=_optional_date("start"), end=_optional_date("end"))
        if key == "course_id":
            return ByCourse(scope_id, start=_optional_date("start"), end=_optional_date("end"))
        start_month, end_month = _month_range(args)
        return ByStudent(scope_id, start_month=start_month, end_month=end_month)

    def _error(message: str, status: int):
        return jsonify({"success": False, "message": message}), status

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats():
        try:
            scope = _scope_from_args()
            snapshot = asyncio.run(container.statistics_service.snapshot(scope))
        except ValidationError as e:
            return _error(str(e), 400)
        except LoadError as e:
            return _error(str(e), 503)
        return jsonify({"success": True, "stats": snapshot.to_dict()})

    @app.route("/api/attendance/stats/courses", methods=["GET"], endpoint="attendance_stats_courses")
    def attendance_stats_courses():
        try:
            breakdown = asyncio.run(
                container.statistics_service.course_breakdown(start=_optional_date("start"), end=_optional_date("end"))
            )
        except ValidationError as e:
            return _error(str(e), 400)
        except LoadError as e:
            return _error(str(e), 503)

        return jsonify(
            {
                "success": True,
                "overall": breakdown.overall.to_dict(),
                "by_course": [
                    {"course_id": c.course_id, "course_name": c.course_name, **c.snapshot.to_dict()}
                    for c in breakdown.by_course
                ],
            }
        )

    @app.route(
        "/api/students/<int:student_id>/attendance/monthly",
        methods=["GET"],
        endpoint="student_attendance_monthly",
    )
    def student_attendance_monthly(student_id: int):
        try:
            start_month, end_month = _month_range(request.args)
            months = asyncio.run(
                container.statistics_service.monthly_breakdown(
                    student_id=student_id,
                    start_month=start_month,
                    end_month=end_month,
                )
            )
        except ValidationError as e:
            return _error(str(e), 400)
        except LoadError as e:
            return _error(str(e), 503)

        return jsonify({"success": True, "months": {m: s.to_dict() for m, s in months.items()}})
