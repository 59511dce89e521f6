from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status

from golfbrain.courses.catalog import CourseNotFound
from golfbrain.rounds.lifecycle import (
    IncompleteHoleError,
    RoundNotFound,
    RoundStateError,
)
from golfbrain.rounds.sequencer import ShotNotFound

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map domain exceptions raised inside the block to HTTP errors."""

    try:
        yield
    except IncompleteHoleError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": str(exc),
                "holeNumber": exc.hole_number,
                "missingShotIds": exc.missing_shot_ids,
            },
        ) from exc
    except CourseNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="course not found"
        ) from exc
    except RoundNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="round not found"
        ) from exc
    except ShotNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="shot not found"
        ) from exc
    except RoundStateError as exc:
        logger.info("rejected round action", extra={"reason": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


__all__ = ["translate_errors"]
