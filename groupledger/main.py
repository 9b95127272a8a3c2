import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from groupledger.api.v1.routes.activity import router as activity_router
from groupledger.api.v1.routes.expense import router as expense_router
from groupledger.api.v1.routes.group import router as group_router
from groupledger.api.v1.routes.payment import router as payment_router
from groupledger.api.v1.routes.settlement import router as settlement_router
from groupledger.api.v1.routes.system import router as system_router
from groupledger.core.config import settings
from groupledger.core.db_check import wait_for_db
from groupledger.core.exceptions import LedgerError
from groupledger.core.logging import configure_logging
from groupledger.db.base import init_models
from groupledger.db.session import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL, echo_sql=settings.DB_ECHO)
    await wait_for_db(retries=settings.DB_CONNECT_RETRIES)
    if settings.CREATE_TABLES:
        await init_models(engine)
    yield
    await engine.dispose()


app = FastAPI(title="GroupLedger Backend", lifespan=lifespan)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.warning("%s %s rejected: %s (%s)", request.method, request.url.path, exc.detail, exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.detail},
    )


@app.get("/")
async def root():
    return {"message": "GroupLedger Backend is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(group_router, prefix="/api/v1/groups")
app.include_router(expense_router, prefix="/api/v1/expenses")
app.include_router(payment_router, prefix="/api/v1/payments")
app.include_router(settlement_router, prefix="/api/v1/settlements")
app.include_router(activity_router, prefix="/api/v1/activities")
