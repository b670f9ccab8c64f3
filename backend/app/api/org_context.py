import uuid

from fastapi import HTTPException, Request, status

from app.infra.logging import update_log_context
from app.settings import settings

ORG_HEADER = "X-Org-Id"


async def require_org_context(request: Request) -> uuid.UUID:
    """Resolve the tenant for budget, project and finance routes.

    Authentication lives in front of this service; the gateway forwards the
    tenant as ``X-Org-Id``. Outside prod the configured default org is used when
    the header is absent.
    """
    header_value = request.headers.get(ORG_HEADER)
    if header_value:
        try:
            org_id = uuid.UUID(header_value)
        except (ValueError, AttributeError):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized") from None
    elif settings.testing or settings.app_env == "dev":
        org_id = settings.default_org_id
    else:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    request.state.current_org_id = org_id
    update_log_context(org_id=str(org_id))
    return org_id
