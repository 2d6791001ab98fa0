"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from kajishare.config import settings
from kajishare.database import Base, engine
from kajishare.errors import DomainError, domain_error_handler

# Import routers
from kajishare.routers import sessions, users, groups, memberships, tasks, assignments, evaluations

# Import all models so Base.metadata knows about them
from kajishare.models.user import User                    # noqa: F401
from kajishare.models.group import Group, Membership      # noqa: F401
from kajishare.models.task import Task                    # noqa: F401
from kajishare.models.assignment import Assignment        # noqa: F401
from kajishare.models.evaluation import Evaluation        # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="KajiShare",
    description="Household task sharing — groups, tasks, assignments and peer evaluations",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(DomainError, domain_error_handler)

# Register routers
app.include_router(sessions.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
app.include_router(groups.router, prefix="/api/v1/groups", tags=["Groups"])
app.include_router(memberships.router, prefix="/api/v1/memberships", tags=["Memberships"])
app.include_router(tasks.router, prefix="/api/v1", tags=["Tasks"])
app.include_router(assignments.router, prefix="/api/v1", tags=["Assignments"])
app.include_router(evaluations.router, prefix="/api/v1/evaluations", tags=["Evaluations"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
