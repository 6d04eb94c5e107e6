"""Per-tenant scoring configuration endpoints"""
from fastapi import APIRouter

from src.webinar_scoring.api.deps import DbSession
from src.webinar_scoring.schemas.scoring_config import ScoringConfigUpdate, ScoringConfigResponse
from src.webinar_scoring.services.scoring_config import (
    get_scoring_config,
    merge_with_defaults,
    upsert_scoring_config,
    reset_scoring_config,
)

router = APIRouter(prefix="/api/tenants", tags=["Scoring Config"])


def _config_response(tenant_id: str, config) -> dict:
    return {
        **merge_with_defaults(tenant_id, config).to_dict(),
        "has_overrides": config is not None,
    }


@router.get("/{tenant_id}/scoring-config", response_model=ScoringConfigResponse)
def read_scoring_config(tenant_id: str, db: DbSession):
    """Effective point values, defaults filled in"""
    return _config_response(tenant_id, get_scoring_config(db, tenant_id))


@router.put("/{tenant_id}/scoring-config", response_model=ScoringConfigResponse)
def update_scoring_config(tenant_id: str, request: ScoringConfigUpdate, db: DbSession):
    config = upsert_scoring_config(db, tenant_id, request.model_dump(exclude_unset=True))
    return _config_response(tenant_id, config)


@router.delete("/{tenant_id}/scoring-config", response_model=ScoringConfigResponse)
def delete_scoring_config(tenant_id: str, db: DbSession):
    reset_scoring_config(db, tenant_id)
    return _config_response(tenant_id, None)
