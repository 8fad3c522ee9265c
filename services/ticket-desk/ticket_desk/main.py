import logging
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text
from sqlalchemy.orm import Session
from ticket_desk.api.deps import get_coordinator, get_store
from ticket_desk.api.tickets import router as tickets_router
from ticket_desk.api.views import router as views_router
from ticket_desk.core.config import settings
from ticket_desk.core.db import Base, engine, get_db
from ticket_desk.core.logging import configure_logging
from ticket_desk.core.seed import seed_store
from ticket_desk.models.storage import StorageEntry  # noqa: F401  registers the table

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    Base.metadata.create_all(bind=engine)
    if settings.SEED_ON_STARTUP and seed_store(get_store()):
        get_coordinator().reset()
    logger.info("%s started, storage backend=%s", settings.PROJECT_NAME, settings.STORAGE_BACKEND)
    yield

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Single-user ticket desk: ticket store plus synchronized Home, List and Detail views.",
    version="1.0.0",
    lifespan=lifespan,
)

@app.middleware("http")
async def add_correlation_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response

@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage failure: %s", exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Service Unavailable: Storage failure", "request_id": getattr(request.state, "request_id", None)},
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error", "request_id": getattr(request.state, "request_id", None)},
    )

@app.get("/health", tags=["system"])
def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except SQLAlchemyError:
        db_status = "error"
    return {"status": "ok", "database": db_status}

app.include_router(tickets_router)
app.include_router(views_router)
