"""API v1 router aggregator.

All v1 endpoint routers are included here and mounted at /api/v1.
"""

from fastapi import APIRouter

from accountkit.api.v1 import access_tokens, accounts, public_key

router = APIRouter()

router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
router.include_router(access_tokens.router, tags=["access-tokens"])
router.include_router(public_key.router, prefix="/public-key", tags=["public-key"])
