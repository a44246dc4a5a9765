"""API router -- aggregates all endpoint routers."""

from fastapi import APIRouter

from thesis_archive.api import author_visits, health, keywords, page_visits

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(keywords.router, tags=["keywords"])
api_router.include_router(page_visits.router, prefix="/page-visits", tags=["page-visits"])
api_router.include_router(author_visits.router, prefix="/author-visits", tags=["author-visits"])
