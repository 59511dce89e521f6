"""Course and hole catalog."""

from .catalog import (
    CourseNotFound,
    CourseValidationError,
    build_holes,
    new_course,
    parse_number_list,
    updated_course,
    validate_course,
)
from .models import Course, Hole
from .store import demo_courses, ensure_demo_courses

__all__ = [
    "Course",
    "Hole",
    "CourseNotFound",
    "CourseValidationError",
    "build_holes",
    "new_course",
    "parse_number_list",
    "updated_course",
    "validate_course",
    "demo_courses",
    "ensure_demo_courses",
]
