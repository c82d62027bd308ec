import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medtrack.api.routes import router
from medtrack.config import Settings
from medtrack.db.database import Database
from medtrack.domain.errors import (
    InvalidMedicineError,
    InvalidScheduleError,
    MedicineNotFoundError,
    MissingIdentityError,
    ReminderNotFoundError,
    ScheduleNotFoundError,
)
from medtrack.scheduler.reminder import Notifier, setup_scheduler
from medtrack.services import MedicineService, ReminderService, ScheduleService

logger = logging.getLogger(__name__)

_ERROR_STATUS = {
    InvalidScheduleError: 400,
    InvalidMedicineError: 400,
    MissingIdentityError: 400,
    ReminderNotFoundError: 404,
    ScheduleNotFoundError: 404,
    MedicineNotFoundError: 404,
}


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Build the FastAPI application and wire its services.

    Args:
        settings: Runtime settings (read from the environment by default)
        database: Storage handle (built from settings.database_url by default)
        notifier: Delivery coroutine for due reminders (logs by default)

    Returns:
        Configured FastAPI app
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    database = database or Database(settings.database_url, echo=settings.database_echo)

    app = FastAPI(title="MedTrack")

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    reminder_service = ReminderService(database, settings.reminder_backend)
    app.state.settings = settings
    app.state.database = database
    app.state.medicine_service = MedicineService(database, settings.reminder_backend)
    app.state.schedule_service = ScheduleService(database, settings.reminder_backend)
    app.state.reminder_service = reminder_service
    app.state.reminder_scheduler = setup_scheduler(
        reminder_service, notifier, settings.early_reminder_minutes
    )

    app.include_router(router)

    for error_class, status_code in _ERROR_STATUS.items():
        app.add_exception_handler(error_class, _error_handler(status_code))

    @app.on_event("startup")
    async def startup_event():
        """Initialize database and start scheduler on startup."""
        await database.init()
        app.state.reminder_scheduler.start()
        logger.info(f"MedTrack started with the {settings.reminder_backend} reminder backend")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Shutdown scheduler and close the database on application shutdown."""
        app.state.reminder_scheduler.shutdown()
        await database.close()

    return app


def _error_handler(status_code: int):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handle


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=level
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger("medtrack").setLevel(level)


def run():
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("medtrack.main:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
