from fastapi import APIRouter
from app.api import works, chapters, catalog, community

api_router = APIRouter()
api_router.include_router(works.router, tags=["works"])
api_router.include_router(chapters.router, tags=["chapters"])
api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(community.router, tags=["community"])
