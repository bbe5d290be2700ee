from fastapi import APIRouter

from .transcripts import router as transcripts_router
from .summaries import router as summaries_router

router = APIRouter()
router.include_router(transcripts_router)
router.include_router(summaries_router)
