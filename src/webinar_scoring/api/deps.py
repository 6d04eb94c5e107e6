"""API dependencies - database session and background session factory"""
from typing import Annotated, Callable
from fastapi import Depends
from sqlalchemy.orm import Session

from src.webinar_scoring.database import get_db, SessionLocal


def get_session_factory() -> Callable[[], Session]:
    """Session factory for work that outlives the request, e.g. background recalculation"""
    return SessionLocal


DbSession = Annotated[Session, Depends(get_db)]
SessionFactory = Annotated[Callable[[], Session], Depends(get_session_factory)]
