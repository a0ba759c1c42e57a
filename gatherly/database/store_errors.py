"""
Translation of Supabase/PostgREST failures into service errors.

The store surfaces a generic failure for constraint violations and for
connectivity loss; callers only ever see Conflict, NotFound or Unavailable.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

import httpx
from postgrest.exceptions import APIError

from gatherly.core.errors import Conflict, NotFound, ServiceError, Unavailable

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def translate_api_error(exc: APIError, source: str) -> ServiceError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    if code == UNIQUE_VIOLATION:
        logger.info("Unique constraint rejected write in %s: %s", source, message)
        return Conflict("Resource already exists", source)
    if code == FOREIGN_KEY_VIOLATION:
        logger.info("Foreign key rejected write in %s: %s", source, message)
        return NotFound("Referenced resource does not exist", source)
    logger.error("Store error in %s (code=%s): %s", source, code, message)
    return Unavailable("Store request failed", source)


@contextmanager
def store_call(source: str) -> Iterator[None]:
    """Run one or more store calls, translating store failures for `source`."""
    try:
        yield
    except ServiceError:
        raise
    except APIError as e:
        raise translate_api_error(e, source) from e
    except (httpx.HTTPError, ConnectionError, TimeoutError) as e:
        logger.error("Store unreachable in %s: %s", source, e)
        raise Unavailable("Store unreachable", source) from e
