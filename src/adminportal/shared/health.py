from time import perf_counter

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health(request: Request):
    database = request.app.state.database
    t0 = perf_counter()
    try:
        async with database.session_factory() as s:
            await s.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "checks": {"db": "SELECT 1 failed"}, "error": type(e).__name__},
        )
    return {"ok": True, "checks": {"db_select_1_ms": int((perf_counter() - t0) * 1000)}}
