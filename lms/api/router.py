from fastapi import APIRouter
from lms.api.routes import (
    auth,
    users,
    courses,
    chapters,
    lessons,
    questions,
    materials,
    enrollments,
    progress,
    settings,
    dashboard,
    public,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(chapters.router, prefix="/chapters", tags=["chapters"])
api_router.include_router(lessons.router, prefix="/lessons", tags=["lessons"])
api_router.include_router(questions.router, prefix="/questions", tags=["questions"])
api_router.include_router(materials.router, prefix="/materials", tags=["materials"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["enrollments"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
