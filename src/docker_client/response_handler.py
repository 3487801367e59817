"""
Daemon response classification

Every response is checked here before its body is decoded:

    404        -> NotFound (body is not decoded)
    500        -> ServerFault (message taken from the body when possible)
    200..399   -> success
    otherwise  -> APIError
"""

import json
import logging
from typing import Any

from .exceptions import APIError, Malformed, NotFound, ServerFault

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Image or container not found."
SERVER_FAULT_MESSAGE = "Docker daemon reported an internal error."


def _read_text(response) -> str:
    try:
        return response.read().decode('utf-8', errors='replace').strip()
    except OSError as e:
        logger.debug(f"Could not read error body: {e}")
        return ''


def _server_message(text: str) -> str:
    if not text:
        return SERVER_FAULT_MESSAGE
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict) and data.get('message'):
        return str(data['message'])
    return text


def classify(response, context: str = ''):
    """
    Raise the matching DaemonError for an unsuccessful response

    Args:
        response: Object with ``status`` and ``read()``
        context: Request line used in error messages
    """
    status = response.status
    suffix = f" ({context})" if context else ''

    if status == 404:
        raise NotFound(f"{NOT_FOUND_MESSAGE}{suffix}", status_code=status)

    if status == 500:
        message = _server_message(_read_text(response))
        raise ServerFault(f"{message}{suffix}", status_code=status)

    if 200 <= status < 400:
        return

    text = _read_text(response)
    raise APIError(
        f"Docker API error {status}{suffix}: {text}",
        response=response,
        status_code=status
    )


def decode_json(raw: bytes, context: str = '') -> Any:
    """
    Decode a JSON success body

    Raises:
        Malformed: Body is not valid JSON
    """
    if not raw:
        return None
    try:
        return json.loads(raw.decode('utf-8'))
    except (ValueError, UnicodeDecodeError) as e:
        suffix = f" ({context})" if context else ''
        raise Malformed(f"Invalid JSON in daemon response{suffix}: {e}") from e
