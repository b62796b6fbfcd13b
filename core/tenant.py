"""
Tenant resolution

Every table is partitioned by the organization mail (``orgmail``). The
resolver turns the incoming request into that identifier so routers can pass
it explicitly to the services.
"""
from fastapi import Request

from core.config import settings
from core.exceptions import ValidationError


def resolve_org_mail(header_value: str = None, default: str = None) -> str:
    """Pick the tenant from the header value, falling back to the configured default."""
    org_mail = (header_value or "").strip() or (default or "").strip()
    if not org_mail:
        raise ValidationError("Organization could not be resolved", field=settings.TENANT_HEADER)
    return org_mail


def get_org_mail(request: Request) -> str:
    """FastAPI dependency returning the tenant of the current request."""
    return resolve_org_mail(
        request.headers.get(settings.TENANT_HEADER),
        settings.DEFAULT_ORG_MAIL
    )
