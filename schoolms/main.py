import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schoolms.api.v1.admissions.router import router as admissions_router
from schoolms.api.v1.attendance.router import router as attendance_router
from schoolms.api.v1.classes.router import router as classes_router
from schoolms.api.v1.exams.router import router as exams_router
from schoolms.api.v1.fee_collections.router import router as fee_collections_router
from schoolms.api.v1.fees.router import router as fees_router
from schoolms.api.v1.master_data.router import router as master_data_router
from schoolms.api.v1.students.router import router as students_router
from schoolms.api.v1.subjects.router import router as subjects_router
from schoolms.api.v1.teachers.router import router as teachers_router
from schoolms.core.config import settings
from schoolms.core.logging import configure_logging
from schoolms.db.session import init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        await init_models()
    logger.info("%s started (schedule conflict enforcement: %s)", settings.app_name, settings.enforce_schedule_conflicts)
    yield


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

    # CORS: allow the portal to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    for router in (
        students_router,
        teachers_router,
        classes_router,
        subjects_router,
        master_data_router,
        attendance_router,
        exams_router,
        fees_router,
        fee_collections_router,
        admissions_router,
    ):
        app.include_router(router, prefix=settings.api_v1_prefix)

    @app.get(f"{settings.api_v1_prefix}/health", tags=["health"])
    async def health() -> dict:
        return {"success": True, "status": "ok"}

    return app


app = create_app()
