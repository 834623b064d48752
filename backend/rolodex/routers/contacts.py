"""Contact routes module."""

import logging
import uuid
from typing import Any
from typing import List

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Response
from fastapi import status
from sqlalchemy.orm import Session

from rolodex.database import get_db
from rolodex.errors import InternalError
from rolodex.errors import NotFoundError
from rolodex.errors import ValidationError
from rolodex.schemas.schemas import ContactEditView
from rolodex.schemas.schemas import ContactSummary
from rolodex.services.contact_service import ContactService
from rolodex.services.contact_service import get_contact_service

# Set up logging
logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "An internal error occurred while processing your request."

router = APIRouter(tags=["contacts"])


def _internal_error() -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=INTERNAL_ERROR_DETAIL)


@router.get("/", response_model=List[ContactSummary])
@router.get("", response_model=List[ContactSummary])
def read_contacts(db: Session = Depends(get_db), service: ContactService = Depends(get_contact_service)):
    """Get all contacts ordered by first name"""
    try:
        return service.list_contacts(db)
    except InternalError:
        raise _internal_error()


# Declared before "/{contact_id}" so "new" is not parsed as an id.
@router.get("/new", response_model=ContactEditView)
def new_contact(service: ContactService = Depends(get_contact_service)):
    """Return an empty edit form pre-populated with the title options"""
    return service.new_contact_scaffold()


@router.get("/{contact_id}", response_model=ContactEditView)
def read_contact(
    contact_id: uuid.UUID,
    db: Session = Depends(get_db),
    service: ContactService = Depends(get_contact_service),
):
    """Get a contact with its email addresses and addresses for editing"""
    try:
        return service.get_contact_for_edit(db, str(contact_id))
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except InternalError:
        raise _internal_error()


@router.post("/", status_code=status.HTTP_200_OK)
@router.post("", status_code=status.HTTP_200_OK)
async def save_contact(
    payload: Any = Body(...),
    db: Session = Depends(get_db),
    service: ContactService = Depends(get_contact_service),
):
    """Create a contact or replace an existing one.

    The body is validated by the service so field errors come back as a 400
    with ``{"detail": {"field": ["message", ...]}}``.  Success returns an
    empty body; clients re-fetch the list.
    """
    try:
        await service.save_contact(db, payload)
    except ValidationError as exc:
        logger.warning("Model state is invalid. Errors: %s", exc.errors)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.errors)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except InternalError:
        raise _internal_error()

    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{contact_id}", status_code=status.HTTP_200_OK)
async def delete_contact(
    contact_id: uuid.UUID,
    db: Session = Depends(get_db),
    service: ContactService = Depends(get_contact_service),
):
    """Delete a contact together with its email addresses and addresses.

    Deleting an unknown id is the caller's mistake and answers 400.
    """
    try:
        await service.delete_contact(db, str(contact_id))
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Contact not found")
    except InternalError:
        raise _internal_error()

    return Response(status_code=status.HTTP_200_OK)
