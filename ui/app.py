"""REST backend for the habit tracker.

Every request loads the state from the workspace, applies one operation and
writes it back (see ``tracker.operations``). Reads of /status and /habits
settle streaks first, so callers never observe stale streaks.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Body, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from tracker import operations
from tracker.errors import HabitError, MalformedImportError

logger = logging.getLogger("tracker.ui")

app = FastAPI(title="Habit Tracker", version="1.0.0")

STATUS_BY_KIND = {
    "validation": 400,
    "malformed_import": 400,
    "insufficient_funds": 400,
    "not_found": 404,
    "duplicate_key": 409,
    "already_done_today": 409,
    "io_error": 500,
}

EXPORT_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "compat": "text/csv",
}


@app.exception_handler(HabitError)
async def habit_error_handler(request: Request, exc: HabitError) -> JSONResponse:
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


@app.get("/status")
def api_status() -> dict[str, Any]:
    """XP, freeze tokens and longest streak (after settling streaks)."""
    return operations.status()


@app.get("/habits")
def api_list_habits(q: str = "") -> dict[str, Any]:
    """All habits keyed by short name (after settling streaks)."""
    return operations.list_all(query=q)


@app.get("/habits/{short}")
def api_get_habit(short: str) -> dict[str, Any]:
    return operations.get(short)


@app.post("/habits")
def api_create_habit(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    """Create a habit from ``{short, name, period, count}``."""
    return operations.add(
        short_name=str(payload.get("short", "") or ""),
        name=str(payload.get("name", "") or ""),
        period=payload.get("period") or "daily",
        count=payload.get("count"),
    )


@app.put("/habits/{short}/done")
def api_mark_done(short: str) -> dict[str, Any]:
    """Mark a habit done today; awards XP and updates the streak."""
    return operations.done(short)


@app.delete("/habits/{short}")
def api_delete_habit(short: str) -> dict[str, Any]:
    return operations.delete(short)


@app.post("/freeze")
def api_buy_freeze() -> dict[str, Any]:
    """Buy one freeze token for 50 XP."""
    return operations.purchase()


@app.post("/import")
def api_import(payload: dict[str, Any] = Body(...)) -> dict[str, Any]:
    """Replace all habits with ``{habits: {...}}``. Resets XP to 0 and freezes to 1."""
    return operations.import_habits(payload.get("habits"))


@app.post("/import/text")
async def api_import_text(request: Request) -> dict[str, Any]:
    """Replace all habits from a raw JSON or CSV document."""
    raw = await request.body()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise MalformedImportError("Import must be UTF-8 text") from None
    return await run_in_threadpool(operations.import_text, text)


@app.post("/clear")
def api_clear() -> dict[str, Any]:
    return operations.clear()


@app.get("/export")
def api_export(fmt: str = Query("json", alias="format")) -> PlainTextResponse:
    body = operations.export(fmt)
    return PlainTextResponse(body, media_type=EXPORT_MEDIA_TYPES[fmt])


def main() -> None:
    import uvicorn

    from tracker.logs import setup_logging
    from tracker.workspace import init_workspace, load_settings

    root = init_workspace()
    settings = load_settings(root)
    setup_logging(settings, root)
    logger.info("Habit tracker backend serving %s on %s:%d", root, settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
