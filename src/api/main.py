import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.routers import auth, batch, daily_tasks, extraction, google_tasks, ops
from mindlyst.errors import MindlystError
from storage import db
from storage.google_auth import GoogleAuthStore
from storage.task_store import DailyTaskStore

# Logging configuration
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Mindlyst")

app.include_router(extraction.router)
app.include_router(batch.router)
app.include_router(google_tasks.router)
app.include_router(daily_tasks.router)
app.include_router(auth.router)
app.include_router(ops.router)


@app.exception_handler(MindlystError)
async def mindlyst_error_handler(request: Request, exc: MindlystError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content={"detail": exc.to_dict()})


@app.on_event("startup")
async def startup() -> None:
    if not db.is_configured():
        logger.warning("DATABASE_URL not set; daily tasks and Google sign-in are disabled")
        return

    try:
        await db.init_db_pool()
        await db.init_schema()
    except Exception as e:
        # keep serving extraction; the stores stay unavailable
        logger.error(f"Database unavailable, starting without persistence: {e}")
        return

    state.google_auth_store = GoogleAuthStore()
    state.daily_task_store = DailyTaskStore()
    logger.info("Persistence initialized")


@app.on_event("shutdown")
async def shutdown() -> None:
    # in-flight Google Tasks calls are not awaited; their batches die with the process
    await db.close_db_pool()
