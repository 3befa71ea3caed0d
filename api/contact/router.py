"""
Contact form endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import schemas, service

router = APIRouter()


@router.post("/api/contact")
async def contact(request: schemas.ContactRequest) -> schemas.ContactResponse:
    return await service.send_contact_message(request)
