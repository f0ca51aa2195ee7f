"""Media server webhook decoding.

Two wire shapes are accepted and both normalize to a WebhookEvent:

- SRS: JSON object ``{action, ip, vhost, app, tcUrl, stream, param}`` where
  ``param`` is a query string such as ``?auth=secret``
- nginx-rtmp / srtrelay: form-encoded ``app, name, auth, call``
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)

SRS_FIELDS = ("action", "ip", "vhost", "app", "tcUrl", "stream", "param")


class WebhookDecodeError(ValueError):
    """Raised when a webhook body is empty or malformed."""


class WebhookAction(str, Enum):
    """What a media server callback asks for."""

    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    OTHER = "other"

    @classmethod
    def from_wire(cls, value: str) -> "WebhookAction":
        """Map nginx (``publish``) and SRS (``on_publish``) spellings."""
        normalized = value[3:] if value.startswith("on_") else value
        if normalized == "publish":
            return cls.PUBLISH
        if normalized == "unpublish":
            return cls.UNPUBLISH
        return cls.OTHER


@dataclass(frozen=True)
class WebhookEvent:
    """Normalized media server callback.

    Attributes:
        application: Application the stream belongs to
        name: Stream name
        token: Auth token presented by the client
        action: Normalized action
        raw_action: Action string as sent by the media server
    """

    application: str
    name: str
    token: str
    action: WebhookAction
    raw_action: str = ""


def _first(values: dict, key: str) -> str:
    found = values.get(key)
    return found[0] if found else ""


def _decode_text(body: bytes) -> str:
    if not body:
        raise WebhookDecodeError("empty body")
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookDecodeError(f"body is not UTF-8: {e}") from e


def decode_srs_body(body: bytes) -> WebhookEvent:
    """Decode an SRS http_hooks JSON callback.

    Args:
        body: Raw request body

    Returns:
        Normalized WebhookEvent

    Raises:
        WebhookDecodeError: If the body is empty, not JSON, or has non-string fields
    """
    text = _decode_text(body)
    logger.debug(f"SRS request: {text}")

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise WebhookDecodeError(f"invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise WebhookDecodeError("JSON body must be an object")

    for field in SRS_FIELDS:
        value = payload.get(field, "")
        if not isinstance(value, str):
            raise WebhookDecodeError(f"field {field!r} must be a string")

    param = payload.get("param", "")
    if param.startswith("?"):
        param = param[1:]
    query = parse_qs(param, keep_blank_values=True)

    action = payload.get("action", "")
    return WebhookEvent(
        application=payload.get("app", ""),
        name=payload.get("stream", ""),
        token=_first(query, "auth"),
        action=WebhookAction.from_wire(action),
        raw_action=action,
    )


def decode_nginx_form(body: bytes) -> WebhookEvent:
    """Decode an nginx-rtmp / srtrelay form-encoded callback.

    Args:
        body: Raw application/x-www-form-urlencoded body

    Returns:
        Normalized WebhookEvent

    Raises:
        WebhookDecodeError: If the body is empty or not valid form data
    """
    text = _decode_text(body)

    try:
        params = parse_qs(text, keep_blank_values=True, strict_parsing=True)
    except ValueError as e:
        raise WebhookDecodeError(f"invalid form body: {e}") from e

    action = _first(params, "call")
    event = WebhookEvent(
        application=_first(params, "app"),
        name=_first(params, "name"),
        token=_first(params, "auth"),
        action=WebhookAction.from_wire(action),
        raw_action=action,
    )
    logger.debug(f"Nginx request: {event.application} {event.name} {event.raw_action}")
    return event


def decode_request(content_type: str, body: bytes) -> WebhookEvent:
    """Pick the decoder from the request's Content-Type.

    ``application/json`` goes to the SRS decoder, everything else is treated
    as nginx-rtmp form data.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json":
        return decode_srs_body(body)
    return decode_nginx_form(body)
