"""
Centralized configuration for the Site Audit worker
Queue, record store, browser and Lighthouse settings read from the environment
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Worker and intake settings.
    Endpoints are optional here and checked by the require_* helpers at startup.
    """

    # ======================
    # Redis / Queue Configuration
    # ======================
    REDIS_URL: Optional[str] = Field(
        default=None,
        description="Redis connection URL used as the job queue transport"
    )
    CELERY_BROKER_URL: Optional[str] = Field(
        default=None,
        description="Celery broker URL (defaults to REDIS_URL if not set)"
    )
    CELERY_RESULT_BACKEND: Optional[str] = Field(
        default=None,
        description="Celery result backend URL (defaults to the broker if not set)"
    )
    CELERY_RESULT_EXPIRES: int = Field(
        default=86400,  # 24 hours
        description="Seconds an audit outcome stays in the result backend"
    )
    AUDIT_QUEUE_NAME: str = Field(
        default="audit",
        description="Queue that carries audit jobs"
    )

    # ======================
    # Database Configuration
    # ======================
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL of the audit record store"
    )
    DATABASE_CREATE_TABLES: bool = Field(
        default=True,
        description="Create missing tables when a process starts"
    )

    # ======================
    # Task Configuration
    # ======================
    TASK_TIME_LIMIT: int = Field(
        default=300,  # 5 minutes
        description="Seconds before the process running an audit job is killed"
    )
    TASK_SOFT_TIME_LIMIT: int = Field(
        default=240,  # 4 minutes
        description="Seconds before SoftTimeLimitExceeded is raised inside an audit job"
    )
    TASK_DEFAULT_RETRY_DELAY: int = Field(
        default=60,
        description="Seconds between attempts of a failed audit job"
    )
    TASK_MAX_RETRIES: int = Field(
        default=3,
        description="Retries of a failed audit job before it is given up"
    )

    # ======================
    # Worker Configuration
    # ======================
    WORKER_CONCURRENCY: int = Field(
        default=2,
        ge=1,
        description="Jobs processed at once per worker (each job runs up to two browsers)"
    )
    WORKER_PREFETCH_MULTIPLIER: int = Field(
        default=1,
        description="Tasks to prefetch per worker process"
    )
    WORKER_MAX_TASKS_PER_CHILD: int = Field(
        default=20,
        description="Max tasks before a worker process is replaced"
    )

    # ======================
    # Browser / Scraper Configuration
    # ======================
    VIEWPORT_WIDTH: int = Field(
        default=1280,
        description="Scraper page viewport width in pixels"
    )
    VIEWPORT_HEIGHT: int = Field(
        default=800,
        description="Scraper page viewport height in pixels (also the fold line)"
    )
    NAVIGATION_TIMEOUT_MS: int = Field(
        default=30000,
        description="Page navigation timeout in milliseconds"
    )
    SCREENSHOTS_DIR: str = Field(
        default="screenshots",
        description="Directory (relative to the working directory) for screenshots"
    )

    # ======================
    # Lighthouse Configuration
    # ======================
    LIGHTHOUSE_BIN: str = Field(
        default="lighthouse",
        description="Lighthouse CLI executable"
    )
    LIGHTHOUSE_TIMEOUT: int = Field(
        default=120,
        description="Max seconds a Lighthouse run may take"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def celery_broker(self) -> Optional[str]:
        """Get Celery broker URL, defaulting to REDIS_URL if not set"""
        return self.CELERY_BROKER_URL or self.REDIS_URL

    @property
    def celery_backend(self) -> Optional[str]:
        """Get Celery result backend URL, defaulting to the broker if not set"""
        return self.CELERY_RESULT_BACKEND or self.celery_broker

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# Global settings instance
settings = Settings()


# ======================
# Convenience Functions
# ======================

def require_queue_url(config: Optional[Settings] = None) -> str:
    """Get the queue transport URL or fail with ConfigurationError"""
    url = (config or settings).celery_broker
    if not url:
        raise ConfigurationError(
            "REDIS_URL environment variable is not set"
        )
    return url


def require_database_url(config: Optional[Settings] = None) -> str:
    """Get the record store URL or fail with ConfigurationError"""
    url = (config or settings).DATABASE_URL
    if not url:
        raise ConfigurationError(
            "DATABASE_URL environment variable is not set"
        )
    return url
