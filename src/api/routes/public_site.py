"""
Public site info route.

Exposes the public, non-secret part of the system config. Responses are
subject to the config-driven cache policy applied by the middleware.
"""

from typing import Any

from fastapi import APIRouter, Depends

from src.api.deps import get_config_service
from src.components.settings import SystemConfigService

router = APIRouter()


@router.get("/site", summary="Public site info")
def get_site(
    service: SystemConfigService = Depends(get_config_service),
) -> dict[str, Any]:
    config = service.get()
    return {"name": config.name, "domain": config.domain}
