"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from storerating.api.v1.endpoints import auth, dashboard, health, ratings, stores, users

api_router = APIRouter()

# Auth (login, register, password change)
api_router.include_router(auth.router)

# Admin-managed accounts
api_router.include_router(users.router)

# Store catalog and ratings
api_router.include_router(stores.router)
api_router.include_router(ratings.router)

# Dashboards and health
api_router.include_router(dashboard.router)
api_router.include_router(health.router)
