"""FastAPI routes for word counts."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wordcount.models import WordCount
from wordcount.store import StoreError, WordCountStore

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


# Pydantic models for API
class RecordWordRequest(BaseModel):
    word: str = Field(min_length=1)


def get_store(request: Request) -> WordCountStore:
    """Get the word store built at startup for dependency injection."""
    return request.app.state.store


@router.post("/words")
async def record_word(
    payload: RecordWordRequest,
    store: WordCountStore = Depends(get_store)
) -> JSONResponse:
    """Record one observation of a word."""
    try:
        await store.record(payload.word)
    except StoreError:
        logger.warning("Record failed for %r, storage unavailable", payload.word)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable"
        )

    return JSONResponse(content="ok")


@router.get("/words", response_model=List[WordCount])
async def list_words(store: WordCountStore = Depends(get_store)):
    """Get counts for every word observed so far."""
    try:
        return await store.fetch_all()
    except StoreError:
        logger.warning("Listing words failed, storage unavailable")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable"
        )


@router.get("/words/{word:path}", response_model=WordCount)
async def get_word(word: str, store: WordCountStore = Depends(get_store)):
    """Get the count for a single word."""
    try:
        found = await store.fetch_one(word)
    except StoreError:
        logger.warning("Fetch failed for %r, storage unavailable", word)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable"
        )

    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Word not found")
    return found
