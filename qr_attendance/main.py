import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from qr_attendance import __version__, config
from qr_attendance.api import admin, auth, student, teacher
from qr_attendance.database.session import SessionLocal
from qr_attendance.exceptions import AttendanceError
from qr_attendance.services import CredentialStore, SessionManager
from qr_attendance.utils import utcnow

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# ----------------------------------------Background cleanup--------------------------------------------
def purge_expired_records():
    """Reaps expired OTP rows and clears the active flag on expired sessions."""
    db = SessionLocal()
    try:
        purged = CredentialStore(db, notifier=None).purge_expired()
        expired = SessionManager(db).expire_stale()
        if purged or expired:
            logger.info(f"Cleanup: {purged} expired OTP rows, {expired} expired sessions")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Cleanup job failed: {e}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if config.ENABLE_SCHEDULER:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            purge_expired_records,
            "interval",
            minutes=config.CLEANUP_INTERVAL_MINUTES,
            id="purge_expired_records",
        )
        scheduler.start()
        logger.info("Cleanup scheduler started")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)


# ----------------------------------------FastAPI App Init--------------------------------------------
app = FastAPI(title="Smart Attendance System API", version=__version__, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth.router)
app.include_router(student.router)
app.include_router(teacher.router)
app.include_router(admin.router)


# ----------------------------------------Error handling--------------------------------------------
@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if exc.status_code == 404 and message == "Not Found":
        message = "Route not found"
    return JSONResponse(status_code=exc.status_code, content={"error": message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": "Database unavailable. Please try again."},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ----------------------------------------Routes--------------------------------------------
@app.get("/health")
def health():
    return {
        "status": "OK",
        "timestamp": utcnow().isoformat(),
        "version": __version__,
        "email": "Configured" if config.EMAIL_USER else "Not Configured",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
