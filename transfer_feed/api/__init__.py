from fastapi import APIRouter

from transfer_feed.api.routers import transfers


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(transfers.router, prefix="/transfers", tags=["transfers"])
    return router


__all__ = [
    "create_api_router",
]
