"""Example: drive the attendance ledger through the service layer (no Flask).

Opens the current week's ledger for a group, marks everyone present on the
first session date and commits.
"""

import asyncio
import importlib
import sys

from config import get_settings_module

from src.edu_center.edu_center.container import build_container


async def mark_first_session_present(group_id: int) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    session = container.new_ledger_session(group_id)
    loaded = await session.open()
    if not loaded.ok:
        print("load failed:", loaded.error)
        return
    if not session.matrix.dates:
        print("no sessions this week")
        return

    edit = session.begin_edit(collapse=True)
    edit.set_column(session.matrix.dates[0], "present", overwrite=False)
    result = await session.commit()

    print(f"applied={result.applied_count} failed={len(result.failed_ops)}")
    print(session.statistics().to_dict())


if __name__ == "__main__":
    asyncio.run(mark_first_session_present(int(sys.argv[1]) if len(sys.argv) > 1 else 1))
