"""
Top‑level router for version 1 of the API.

This router aggregates the domain‑specific routers under a unified
prefix.  When new endpoints are added, update this file to include
their routers.
"""

from fastapi import APIRouter

from .endpoints import webhooks

router = APIRouter()

router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
