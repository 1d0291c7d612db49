"""Identifier minting and decoding routes."""

from typing import Optional

from fastapi import APIRouter, Query

from core.errors import InvalidFormat
from pikaid.codec import generate, is_valid, parse
from pikaid.engine import get_converter

router = APIRouter(prefix="/api/v1/ids", tags=["ids"])

MAX_BATCH = 1000

# Set by app.py
_resolve = get_converter


def init(resolve=get_converter):
    """Initialize with the app's converter resolver."""
    global _resolve
    _resolve = resolve


@router.post("")
async def mint(count: Optional[int] = Query(None, ge=1, le=MAX_BATCH)):
    """Generate one identifier, or a batch when count is given."""
    converter = _resolve()
    if count is None:
        return {"id": generate(converter)}
    return {"ids": [generate(converter) for _ in range(count)]}


@router.get("/{candidate}")
async def decode(candidate: str):
    """Decode an identifier into timestamp and randomness."""
    if not is_valid(candidate):
        raise InvalidFormat(candidate=candidate)
    parsed = parse(candidate, _resolve())
    return {"id": candidate, **parsed.to_dict()}


@router.get("/{candidate}/valid")
async def validate(candidate: str):
    """Report whether the candidate is a well-formed identifier."""
    return {"id": candidate, "valid": is_valid(candidate)}
