"""
Site Audit Service - Main Application

FastAPI intake for website audits. Requests create a PENDING audit record and
queue a job; the Celery worker (worker.py) drives a headless browser and
Lighthouse against the URL and moves the audit to COMPLETED or FAILED.
"""

from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from config import require_database_url, require_queue_url, settings
from core.celery import celery_app
from core.database import create_db_engine, create_session_factory, dispose_engine
from core.logging_config import setup_logging
from core.queue import AuditJobQueue
from core.store import AuditRecordStore
from services.audit_service import AuditService

# Load environment variables
load_dotenv()


def build_audit_service() -> tuple:
    """
    Build the intake service from settings.

    Returns:
        (AuditService, engine, queue)

    Raises:
        ConfigurationError: If the queue or datastore endpoint is missing
    """
    require_queue_url()
    engine = create_db_engine(
        require_database_url(), create_tables=settings.DATABASE_CREATE_TABLES
    )
    store = AuditRecordStore(create_session_factory(engine))
    queue = AuditJobQueue(celery_app)
    return AuditService(store, queue), engine, queue


def create_app(audit_service: Optional[AuditService] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.LOG_LEVEL)
        engine = queue = None
        if audit_service is None:
            app.state.audit_service, engine, queue = build_audit_service()
        else:
            app.state.audit_service = audit_service
        try:
            yield
        finally:
            if queue is not None:
                queue.close()
            dispose_engine(engine)

    app = FastAPI(title="Site Audit Service", lifespan=lifespan)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60)
