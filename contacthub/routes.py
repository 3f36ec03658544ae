"""
HTTP routes for the contact manager API.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile

from contacthub.accounts import AccountService
from contacthub.auth import get_current_user_id
from contacthub.contacts import ContactService, PhotoUpload, parse_tags
from contacthub.dependencies import get_account_service, get_contact_service
from contacthub.errors import ContactNotFound, EmailAlreadyRegistered, InvalidCredentials
from contacthub.export import EXPORT_FILENAME, contacts_to_csv
from contacthub.schemas import (
    ActivityResponse,
    ContactResponse,
    ContactUpdateRequest,
    HealthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@router.post("/register", response_model=MessageResponse)
async def register(
    payload: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
):
    try:
        await accounts.register(payload.name, payload.email, payload.password)
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="Email already registered")
    return MessageResponse(message="User registered")


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    try:
        token = await accounts.login(payload.email, payload.password)
    except InvalidCredentials:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenResponse(token=token)


@router.get("/contacts", response_model=list[ContactResponse])
async def list_contacts(
    user_id: str = Depends(get_current_user_id),
    contacts: ContactService = Depends(get_contact_service),
):
    return [ContactResponse(**c.as_dict()) for c in await contacts.list_contacts(user_id)]


@router.post("/contacts", response_model=ContactResponse)
async def create_contact(
    name: str = Form(..., min_length=1),
    email: str = Form(...),
    tags: str | None = Form(None),
    photo: UploadFile | None = File(None),
    user_id: str = Depends(get_current_user_id),
    contacts: ContactService = Depends(get_contact_service),
):
    upload = None
    # Browsers send an empty part when no file was picked.
    if photo is not None and photo.filename:
        upload = PhotoUpload(data=await photo.read(), filename=photo.filename)
    contact = await contacts.create_contact(
        user_id,
        name=name,
        email=email,
        tags=parse_tags(tags) or [],
        photo=upload,
    )
    return ContactResponse(**contact.as_dict())


@router.get("/contacts/export")
async def export_contacts(
    user_id: str = Depends(get_current_user_id),
    contacts: ContactService = Depends(get_contact_service),
):
    body = contacts_to_csv(await contacts.list_contacts(user_id))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.put("/contacts/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: str,
    payload: ContactUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    contacts: ContactService = Depends(get_contact_service),
):
    try:
        contact = await contacts.update_contact(
            contact_id,
            user_id,
            name=payload.name,
            email=payload.email,
            # An empty tag string leaves the tags unchanged, like an absent one.
            tags=None if payload.tags == "" else parse_tags(payload.tags),
        )
    except ContactNotFound:
        raise HTTPException(status_code=404, detail="Contact not found")
    return ContactResponse(**contact.as_dict())


@router.delete("/contacts/{contact_id}", response_model=MessageResponse)
async def delete_contact(
    contact_id: str,
    user_id: str = Depends(get_current_user_id),
    contacts: ContactService = Depends(get_contact_service),
):
    await contacts.delete_contact(contact_id, user_id)
    return MessageResponse(message="Contact deleted")


@router.get("/activity", response_model=list[ActivityResponse])
async def list_activity(
    user_id: str = Depends(get_current_user_id),
    contacts: ContactService = Depends(get_contact_service),
):
    return [
        ActivityResponse(**a.as_dict()) for a in await contacts.list_activities(user_id)
    ]
