from __future__ import annotations

import asyncio
import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import current_week_window, parse_iso_date
from ..common.validators import require_positive_id
from ..container import Container
from ..core.exceptions import ValidationError
from .export import export_matrix_xlsx
from .reconciler import CommitResult
from .session import LedgerSession

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _window(source) -> tuple:
        default_start, default_end = current_week_window()
        start_s = source.get("start")
        end_s = source.get("end")
        start = parse_iso_date(start_s) if start_s else default_start
        end = parse_iso_date(end_s) if end_s else default_end
        return start, end

    def _flag(value, field_name: str) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "1", "false", "0", ""):
            return value.strip().lower() in ("true", "1")
        raise ValidationError(f"{field_name} must be a boolean")

    def _cells(body: dict) -> list[dict]:
        cells = body.get("cells") or []
        if not isinstance(cells, list) or not all(isinstance(c, dict) for c in cells):
            raise ValidationError("cells must be a list of objects")
        return cells

    def _error(message: str, status: int):
        return jsonify({"success": False, "message": message}), status

    async def _load(group_id: int, start, end) -> LedgerSession:
        session = container.new_ledger_session(group_id, window_start=start, window_end=end)
        await session.open()
        return session

    @app.route("/api/groups/<int:group_id>/ledger", methods=["GET"], endpoint="ledger_view")
    def ledger_view(group_id: int):
        try:
            start, end = _window(request.args)
        except ValidationError as e:
            return _error(str(e), 400)

        session = asyncio.run(_load(group_id, start, end))
        if session.last_error:
            return _error(session.last_error, 503)

        payload = session.matrix.to_dict()
        payload["statistics"] = session.statistics().to_dict()
        return jsonify({"success": True, "ledger": payload})

    @app.route("/api/groups/<int:group_id>/ledger/commit", methods=["POST"], endpoint="ledger_commit")
    def ledger_commit(group_id: int):
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            return _error("Request body must be a JSON object", 400)

        async def _commit() -> tuple[LedgerSession, CommitResult | None]:
            start, end = _window(body)
            collapse = _flag(body.get("collapse"), "collapse")
            cells = _cells(body)
            session = await _load(group_id, start, end)
            if session.last_error:
                return session, None

            session.begin_edit(collapse=collapse)
            for cell in cells:
                session.set_cell(
                    require_positive_id(cell.get("student_id"), "student_id"),
                    parse_iso_date(cell.get("date")),
                    cell.get("value"),
                )
            return session, await session.commit()

        try:
            session, result = asyncio.run(_commit())
        except ValidationError as e:
            return _error(str(e), 400)

        if result is None:
            return _error(session.last_error or "Ledger load failed", 503)

        if result.failed_ops:
            logger.warning("Ledger commit for group %s left %d failed operations", group_id, len(result.failed_ops))
        return jsonify(result.to_dict()), (200 if result.ok else 207)

    @app.route("/api/groups/<int:group_id>/ledger.xlsx", methods=["GET"], endpoint="ledger_export")
    def ledger_export(group_id: int):
        try:
            start, end = _window(request.args)
        except ValidationError as e:
            return _error(str(e), 400)

        session = asyncio.run(_load(group_id, start, end))
        if session.last_error:
            return _error(session.last_error, 503)

        filename = f"attendance_group{group_id}_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.xlsx"
        return app.response_class(
            export_matrix_xlsx(session.matrix),
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
