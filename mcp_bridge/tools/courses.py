"""Sample course catalog tools."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..base import BaseTool
from ..registry import ToolRegistry
from .._logging import get_logger

logger = get_logger(__name__)


class Course(BaseModel):
    title: str
    url: str


DEFAULT_COURSES = (
    Course(title="计算机网络", url="https://youtu.be/31KTdfRH6nY"),
    Course(title="几何代数", url="https://youtu.be/UgX5lgv4uVM"),
)


class CourseCatalog:
    """In-memory course list shared by the course tools."""

    def __init__(self, courses: Optional[List[Course]] = None) -> None:
        self._courses = list(DEFAULT_COURSES if courses is None else courses)

    def all(self) -> List[Course]:
        return list(self._courses)

    def find(self, title: str) -> Optional[Course]:
        return next((course for course in self._courses if course.title == title), None)


class GetCoursesInput(BaseModel):
    pass


class GetCourseInput(BaseModel):
    title: str = Field(..., description="课程标题")


class GetCoursesTool(BaseTool):
    name = "dv_get_courses"
    description = "获取全部的课程信息"
    input_model = GetCoursesInput

    def __init__(self, catalog: CourseCatalog) -> None:
        self._catalog = catalog

    def _execute(self, payload: GetCoursesInput) -> List[dict]:
        return [course.model_dump() for course in self._catalog.all()]


class GetCourseTool(BaseTool):
    name = "dv_get_course"
    description = "获取课程名称获取课程的完整信息"
    input_model = GetCourseInput

    def __init__(self, catalog: CourseCatalog) -> None:
        self._catalog = catalog

    def _execute(self, payload: GetCourseInput) -> Optional[dict]:
        course = self._catalog.find(payload.title)
        if course is None:
            logger.info("Course not found", title=payload.title)
            return None
        return course.model_dump()


def register_tools(registry: ToolRegistry, catalog: Optional[CourseCatalog] = None) -> None:
    catalog = catalog or CourseCatalog()
    registry.register(GetCoursesTool(catalog))
    registry.register(GetCourseTool(catalog))
