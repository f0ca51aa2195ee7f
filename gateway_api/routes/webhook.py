"""Media server callback route (nginx-rtmp on_publish, SRS http_hooks)."""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from gateway_api.dependencies import get_store
from gateway_api.webhooks import WebhookAction, WebhookDecodeError, decode_request
from stream_registry.store import StreamStore

logger = logging.getLogger(__name__)

router = APIRouter()

# SRS treats a body of "0" as success
SUCCESS_BODY = "0"


def _unauthorized() -> PlainTextResponse:
    return PlainTextResponse("401 Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/auth", response_class=PlainTextResponse)
async def media_server_auth(request: Request, store: StreamStore = Depends(get_store)):
    """Authorize a publish/play callback and track live state.

    Publish events are authenticated and mark the stream active. Unpublish
    events mark the stream inactive without re-checking the token. Other
    events are authenticated only.

    Args:
        request: Raw callback request, JSON (SRS) or form data (nginx).
        store: Stream store.

    Returns:
        PlainTextResponse: "0" with 200 on success, 401 otherwise.
    """
    body = await request.body()
    try:
        event = decode_request(request.headers.get("content-type", ""), body)
    except WebhookDecodeError as e:
        logger.warning(f"Failed to parse callback data: {e}")
        return _unauthorized()

    target = f"{event.application}/{event.name}"

    if event.action is WebhookAction.UNPUBLISH:
        # The session is ending; the name/application are trusted as sent
        store.set_inactive(event.application, event.name)
        logger.info(f"{event.raw_action} {target} ok")
        return PlainTextResponse(SUCCESS_BODY)

    ok, stream_id = store.authenticate(event.application, event.name, event.token)
    if not ok:
        logger.info(f"{event.raw_action} {stream_id} {target} unauthorized")
        return _unauthorized()

    if event.action is WebhookAction.PUBLISH:
        store.set_active(stream_id)

    logger.info(f"{event.raw_action} {stream_id} {target} ok")
    return PlainTextResponse(SUCCESS_BODY)
