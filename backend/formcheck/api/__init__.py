"""API routes."""

from fastapi import APIRouter

from formcheck.api import analyzers, exercises

api_router = APIRouter()

api_router.include_router(exercises.router, prefix="/exercises", tags=["Exercises"])
api_router.include_router(analyzers.router, prefix="/analyzers", tags=["Analyzers"])
