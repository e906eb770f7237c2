"""Health check: process liveness, database reachability and the admission lock in use."""

from fastapi import APIRouter
from pydantic import BaseModel

from app.database import check_db_connection, engine
from app.settings import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    environment: str
    database: str
    dialect: str
    # "advisory" when admissions are also serialized across processes
    admission_lock: str
    version: str = "1.0.0"


@router.get("/health", response_model=HealthResponse, include_in_schema=False)
def health_check() -> HealthResponse:
    """
    Always 200 while the process is up. status is "degraded" when the
    database cannot be reached, since no booking can be admitted then.
    """
    db_ok = check_db_connection()
    dialect = engine.dialect.name
    return HealthResponse(
        status="ok" if db_ok else "degraded",
        environment=settings.environment,
        database="connected" if db_ok else "unreachable",
        dialect=dialect,
        admission_lock="advisory" if dialect == "postgresql" else "in-process",
    )
