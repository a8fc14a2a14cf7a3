"""
Rating endpoints — upsert, listings and deletion.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.api.v1.deps import get_current_identity, get_db, require
from storerating.models.rating import Rating
from storerating.schemas.common import DeleteResponse
from storerating.schemas.rating import (RatingRead, RatingSubmit,
                                        RatingSubmitResponse, RatingWithStore,
                                        RatingWithUser)
from storerating.services import ratings as ledger
from storerating.services.access import Action, ensure_allowed
from storerating.services.credentials import Identity
from storerating.services.stores import get_store

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post(
    "",
    response_model=RatingSubmitResponse,
    responses={201: {"model": RatingSubmitResponse}},
)
async def submit_rating(
    body: RatingSubmit,
    response: Response,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> RatingSubmitResponse:
    """Rate a store, replacing the caller's earlier rating of it if any.

    Answers 201 for a first rating and 200 when an existing one was replaced.
    """
    store = await get_store(db, body.store_id)
    ensure_allowed(identity, Action.SUBMIT_RATING, store)

    rating = await ledger.submit(db, identity.id, store.id, body.rating)
    if ledger.was_created(rating):
        response.status_code = status.HTTP_201_CREATED
        message = "Rating submitted successfully"
    else:
        message = "Rating updated successfully"
    return RatingSubmitResponse(message=message, rating=RatingRead.model_validate(rating))


@router.get("/store/{store_id}", response_model=list[RatingWithUser])
async def ratings_for_store(
    store_id: int,
    db: AsyncSession = Depends(get_db),
    _identity: Identity = Depends(require(Action.VIEW_STORE_RATINGS)),
) -> list[Rating]:
    return await ledger.list_by_store(db, store_id)


@router.get("/user/{user_id}", response_model=list[RatingWithStore])
async def ratings_by_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> list[Rating]:
    """A user's own ratings; admins may read anyone's."""
    ensure_allowed(identity, Action.VIEW_USER_RATINGS, user_id)
    return await ledger.list_by_user(db, user_id)


@router.delete("/{rating_id}", response_model=DeleteResponse)
async def delete_rating(
    rating_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> DeleteResponse:
    rating = await ledger.get(db, rating_id)
    ensure_allowed(identity, Action.DELETE_RATING, rating)
    await ledger.remove(db, rating.id)
    return DeleteResponse(success=True, message="Rating deleted successfully")
