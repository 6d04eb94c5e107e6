"""Lookups against the webinar and registration stores"""
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.webinar_scoring.errors import NotFoundError
from src.webinar_scoring.models.webinar import Webinar
from src.webinar_scoring.models.registration import Registration


@dataclass(frozen=True)
class AttendanceFlags:
    attended: bool
    watched_replay: bool


def get_webinar(db: Session, webinar_id: int) -> Webinar:
    webinar = db.get(Webinar, webinar_id)
    if webinar is None:
        raise NotFoundError(f"Webinar not found: {webinar_id}")
    return webinar


def get_tenant_id(db: Session, webinar_id: int) -> str:
    tenant_id = db.execute(
        select(Webinar.tenant_id).where(Webinar.id == webinar_id)
    ).scalar_one_or_none()
    if tenant_id is None:
        raise NotFoundError(f"Webinar not found: {webinar_id}")
    return tenant_id


def get_registration(db: Session, registration_id: int) -> Registration:
    registration = db.get(Registration, registration_id)
    if registration is None:
        raise NotFoundError(f"Registration not found: {registration_id}")
    return registration


def get_attendance_flags(db: Session, registration_id: int) -> AttendanceFlags:
    row = db.execute(
        select(Registration.attended, Registration.watched_replay)
        .where(Registration.id == registration_id)
    ).first()
    if row is None:
        raise NotFoundError(f"Registration not found: {registration_id}")
    return AttendanceFlags(attended=bool(row.attended), watched_replay=bool(row.watched_replay))


def list_registration_ids(db: Session, webinar_id: int) -> list[int]:
    return list(db.execute(
        select(Registration.id)
        .where(Registration.webinar_id == webinar_id)
        .order_by(Registration.id)
    ).scalars().all())
