from __future__ import annotations

from typing import List

from .catalog import build_holes
from .models import Course

# Fixed epoch so the built-in courses serialise identically on every load.
_DEMO_CREATED_AT = 1_700_000_000_000


def _seed_demo_courses() -> List[Course]:
    demo_links = Course(
        id="demo-links",
        name="Demo Links",
        holes=build_holes(
            pars="4 3 5 4 4 3 4 5 4 4 4 3 5 4 4 3 4 5",
            stroke_indices="7 15 3 11 1 17 9 5 13 8 2 16 4 12 10 18 6 14",
            distances=(
                "395 165 520 380 430 150 360 540 410 "
                "400 440 175 505 370 390 140 420 530"
            ),
        ),
        created_at=_DEMO_CREATED_AT,
    )

    demo_parkland = Course(
        id="demo-parkland",
        name="Demo Parkland",
        holes=build_holes(
            pars="4 4 3 5 4 4 3 4 5 4 3 4 5 4 4 3 4 5",
            stroke_indices="5 9 17 1 13 3 15 11 7 6 18 2 8 12 4 16 10 14",
        ),
        created_at=_DEMO_CREATED_AT,
    )

    return [demo_links, demo_parkland]


DEMO_COURSE_IDS = ("demo-links", "demo-parkland")


def demo_courses() -> List[Course]:
    """Return fresh copies of the built-in courses."""

    return _seed_demo_courses()


def ensure_demo_courses(courses: List[Course]) -> List[Course]:
    """Prepend any built-in course missing from ``courses``."""

    present = {course.id for course in courses}
    missing = [course for course in demo_courses() if course.id not in present]
    return missing + list(courses)


__all__ = ["DEMO_COURSE_IDS", "demo_courses", "ensure_demo_courses"]
