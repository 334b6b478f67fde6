"""
Contact API — Contact Route Handlers
======================================

What:  CRUD endpoints under /api/contacts.
Why:   The whole public surface of the service lives here.
How:   Each handler validates its body schema, makes exactly one ContactStore
       call (none when validation fails) and maps the StoreResult status to a
       response:

           OK         → 200 / 201 with the contact
           NOT_FOUND  → 404 {"message": "Contact not found"}
           CONFLICT   → 400 {"message": "Email already exists"}
           INVALID    → 400 {"message": "Name and email cannot be empty"}

       Unclassified failures are raised by the store as DatabaseError and
       answered by the centralized handlers in main.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from contacts_api.schemas.contact import (
    ContactCreate,
    ContactResponse,
    ContactUpdate,
    ErrorResponse,
    MessageResponse,
)
from contacts_api.services.contact_store import ContactStore, StoreResult, StoreStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contacts", tags=["Contacts"])

CONTACT_NOT_FOUND = "Contact not found"
REQUIRED_FIELDS_MISSING = "Name and email are required"
REQUIRED_FIELDS_BLANK = "Name and email cannot be empty"
EMAIL_EXISTS = "Email already exists"
CONTACT_DELETED = "Contact deleted"

NOT_FOUND_RESPONSE = {404: {"description": CONTACT_NOT_FOUND, "model": MessageResponse}}
SERVER_ERROR_RESPONSE = {500: {"description": "Server error", "model": ErrorResponse}}


def get_contact_store(request: Request) -> ContactStore:
    """
    FastAPI dependency returning the store built at startup.

    The handle lives on `app.state`; handlers only read it.
    """
    return request.app.state.contact_store


def message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def failure_response(result: StoreResult) -> JSONResponse:
    """Translate a non-OK StoreResult into its fixed HTTP response."""
    if result.status is StoreStatus.NOT_FOUND:
        return message_response(404, CONTACT_NOT_FOUND)
    if result.status is StoreStatus.CONFLICT:
        return message_response(400, EMAIL_EXISTS)
    if result.status is StoreStatus.INVALID:
        return message_response(400, REQUIRED_FIELDS_BLANK)
    raise ValueError(f"No response mapping for store status {result.status!r}")


@router.get(
    "",
    response_model=List[ContactResponse],
    responses=SERVER_ERROR_RESPONSE,
    summary="List all contacts, newest first",
)
async def list_contacts(store: ContactStore = Depends(get_contact_store)):
    contacts = await store.list_all()
    return [ContactResponse.model_validate(contact) for contact in contacts]


@router.get(
    "/{contact_id}",
    response_model=ContactResponse,
    responses={**NOT_FOUND_RESPONSE, **SERVER_ERROR_RESPONSE},
    summary="Get a single contact by ID",
)
async def get_contact(
    contact_id: str,
    store: ContactStore = Depends(get_contact_store),
):
    """
    Fetch one contact.

    `contact_id` is taken as an opaque string; malformed ids simply do not
    resolve and produce the same 404 as unknown ones.
    """
    result = await store.get_by_id(contact_id)
    if not result.ok:
        return failure_response(result)
    return ContactResponse.model_validate(result.value)


@router.post(
    "",
    status_code=201,
    response_model=ContactResponse,
    responses={
        400: {"description": "Missing fields or duplicate email", "model": MessageResponse},
        **SERVER_ERROR_RESPONSE,
    },
    summary="Create a contact",
)
async def create_contact(
    payload: Optional[ContactCreate] = None,
    store: ContactStore = Depends(get_contact_store),
):
    """
    Create a contact from `{name, email, phone?}`.

    name and email are checked here, before the store is touched. A request
    without a body is treated like an empty object.
    """
    payload = payload or ContactCreate()
    if not payload.has_required_fields():
        logger.info("Rejected contact create: name or email missing")
        return message_response(400, REQUIRED_FIELDS_MISSING)

    result = await store.create(name=payload.name, email=payload.email, phone=payload.phone)
    if not result.ok:
        return failure_response(result)
    return ContactResponse.model_validate(result.value)


UPDATE_ROUTE = dict(
    response_model=ContactResponse,
    responses={
        400: {"description": "Blank required field or duplicate email", "model": MessageResponse},
        **NOT_FOUND_RESPONSE,
        **SERVER_ERROR_RESPONSE,
    },
    summary="Update a contact (partial)",
)


@router.put("/{contact_id}", **UPDATE_ROUTE)
@router.patch("/{contact_id}", **UPDATE_ROUTE)
async def update_contact(
    contact_id: str,
    payload: Optional[ContactUpdate] = None,
    store: ContactStore = Depends(get_contact_store),
):
    """
    Replace any subset of name/email/phone.

    PUT and PATCH behave identically. Fields left out of the body keep their
    values; id and createdAt in the body are ignored.
    """
    fields = payload.supplied_fields() if payload is not None else {}
    result = await store.update_by_id(contact_id, fields)
    if not result.ok:
        return failure_response(result)
    return ContactResponse.model_validate(result.value)


@router.delete(
    "/{contact_id}",
    response_model=MessageResponse,
    responses={**NOT_FOUND_RESPONSE, **SERVER_ERROR_RESPONSE},
    summary="Delete a contact",
)
async def delete_contact(
    contact_id: str,
    store: ContactStore = Depends(get_contact_store),
):
    result = await store.delete_by_id(contact_id)
    if not result.ok:
        return failure_response(result)
    return MessageResponse(message=CONTACT_DELETED)
