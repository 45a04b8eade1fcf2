from fastapi import APIRouter

from showcase.api import auth, projects, stats, uploads

router = APIRouter(prefix="/api")

router.include_router(auth.router)
router.include_router(projects.router)
router.include_router(stats.router)
router.include_router(uploads.router)
