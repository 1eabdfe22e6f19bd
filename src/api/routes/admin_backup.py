"""
Admin backup route.

Downloads the persisted system config record as JSON. Access is gated by
the backup HTTP Basic credentials stored in the record itself.
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from src.api.deps import get_config_service
from src.components.delivery import backup_auth_ok
from src.components.settings import SystemConfigService

logger = logging.getLogger(__name__)

router = APIRouter()

BACKUP_FILENAME = "system_config.json"


@router.get("/config", summary="Download config backup")
def download_config_backup(
    request: Request,
    service: SystemConfigService = Depends(get_config_service),
) -> Response:
    config = service.get()
    if not backup_auth_ok(config, request.headers.get("authorization")):
        logger.warning("Rejected backup download from %s", request.client.host if request.client else "-")
        return JSONResponse(
            {"detail": "Backup credentials required"},
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": 'Basic realm="backup"'},
        )

    return Response(
        content=json.dumps(config.to_record(), indent=2, sort_keys=True),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="{BACKUP_FILENAME}"',
            "Cache-Control": "no-store",
        },
    )
