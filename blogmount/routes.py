import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from blogmount.models import HealthStatus, ServiceIndex
from blogmount.mount.route import get_mount_proxy
from blogmount.vars import SERVICE_NAME

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.get("/", response_model=ServiceIndex)
async def index():
    config = get_mount_proxy().config
    return ServiceIndex(
        message="Blog Mount Proxy Server",
        status="healthy",
        endpoints=[f"{p}/*" for p in config.route_prefixes] + ["/health"],
    )


@router.get("/health", response_model=HealthStatus)
async def health():
    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=SERVICE_NAME,
    )
