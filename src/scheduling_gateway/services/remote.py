from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from ..data import CalendarRequestError
from ..domain import Forbidden, GatewayError, MissingCalendarReference

logger = logging.getLogger(__name__)


@contextmanager
def calendar_errors(
    calendar_id: str,
    *,
    not_found: Optional[Callable[[], GatewayError]] = None,
) -> Iterator[None]:
    """Translate remote calendar statuses into gateway errors.

    403 always becomes ``Forbidden``. 404 becomes ``not_found()`` when given,
    otherwise ``MissingCalendarReference``. Anything else propagates.
    """

    try:
        yield
    except CalendarRequestError as exc:
        logger.warning("Calendar %s rejected request: %s", calendar_id, exc)
        if exc.status_code == 403:
            raise Forbidden(details={"calendar_id": calendar_id}) from exc
        if exc.status_code == 404:
            if not_found is not None:
                raise not_found() from exc
            raise MissingCalendarReference(
                f"Calendar {calendar_id} does not exist",
                details={"calendar_id": calendar_id},
            ) from exc
        raise
