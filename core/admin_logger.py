import logging

from fastapi import Depends, Request

from security.auth import verify_super_admin_session
from security.principal import SuperAdminPrincipal

audit_logger = logging.getLogger("audit.super_admin")


async def log_what_super_admin_does(
    request: Request,
    principal: SuperAdminPrincipal = Depends(verify_super_admin_session),
) -> SuperAdminPrincipal:
    endpoint = request.scope.get("endpoint")
    endpoint_name = endpoint.__name__ if endpoint else "unknown"
    audit_logger.info(
        "super_admin=%s method=%s route=%s function=%s",
        principal.id,
        request.method,
        request.url.path,
        endpoint_name,
    )
    return principal
