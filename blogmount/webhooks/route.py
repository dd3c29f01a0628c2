import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from blogmount import vars as env
from blogmount.webhooks.verify import SIGNATURE_HEADER, verify_signature

router = APIRouter(prefix="/webhooks")
logger = logging.getLogger("uvicorn.error")


@router.post("/app/uninstalled")
async def app_uninstalled(request: Request):
    body = await request.body()
    if not verify_signature(env.WEBHOOK_SECRET, body, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("[Webhook] Rejected app/uninstalled: invalid signature")
        return JSONResponse(status_code=401, content={"error": "Invalid webhook signature"})
    logger.info("[Webhook] App uninstalled webhook received")
    return PlainTextResponse("OK")
