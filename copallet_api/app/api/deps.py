"""
Helpers shared by the endpoint modules.

Services signal domain failures with ``ValueError``; ``http_error``
turns such an error into the matching HTTP response.
"""

import logging

from fastapi import HTTPException, status

from copallet_api.app.core.errors import AccessDenied


logger = logging.getLogger(__name__)


def http_error(exc: ValueError) -> HTTPException:
    """Map a service ``ValueError`` to an ``HTTPException``.

    * ``AccessDenied`` -> 403
    * ``... not found`` -> 404
    * ``... already exists`` -> 409
    * anything else -> 400
    """
    detail = str(exc)
    lowered = detail.lower()
    if isinstance(exc, AccessDenied):
        code = status.HTTP_403_FORBIDDEN
    elif "not found" in lowered:
        code = status.HTTP_404_NOT_FOUND
    elif "already exists" in lowered:
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    logger.debug("Request failed with %s: %s", code, detail)
    return HTTPException(status_code=code, detail=detail)
