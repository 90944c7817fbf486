"""Record store boundary.

Uniqueness violations (``IntegrityError``) are left to the caller, which maps
them onto duplicate errors. Any other database failure becomes
``StorageUnavailableError``, which is not an ``ElectionError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from django.db import DatabaseError, IntegrityError

from elections.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


@contextmanager
def storage_boundary(operation: str) -> Iterator[None]:
    """Context manager (and decorator) translating record store failures."""
    try:
        yield
    except IntegrityError:
        raise
    except DatabaseError as exc:
        logger.exception("Record store failure during %s", operation)
        raise StorageUnavailableError(f"Storage unavailable during {operation}.") from exc
