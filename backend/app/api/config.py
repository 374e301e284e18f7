# This small API file exposes read-only configuration details to the
# dashboard: product name, branding, and which features are switched on.
# Nothing here is secret, so the endpoint is public.

from fastapi import APIRouter

from app.core.config import get_branding, settings

router = APIRouter(tags=["config"])


@router.get("/config")
def get_config():
    """Return public app configuration for the dashboard."""
    return {
        "appName": settings.APP_NAME,
        "appUrl": settings.APP_URL,
        "branding": get_branding(settings),
        "features": {
            "webhooks": settings.ENABLE_WEBHOOKS,
        },
        "challenge": {
            "dnsSubdomain": settings.DNS_CHALLENGE_SUBDOMAIN,
            "filePath": settings.FILE_CHALLENGE_PATH,
            "tokenPrefix": settings.VERIFICATION_TOKEN_PREFIX,
        },
    }
