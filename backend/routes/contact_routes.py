from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_claims
from backend.auth.jwt_handler import Claims
from backend.core.errors import NotFoundError, StorageUnavailableError
from backend.database import get_db
from backend.models.contact import EmergencyContact

router = APIRouter(tags=['contacts'])

CONTACT_TYPES = ('emergency', 'personal')


class ContactRequest(BaseModel):
    name: str
    phone: str
    type: str = 'personal'
    description: str | None = None

    @field_validator('name', 'phone')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field is required.')
        return normalized

    @field_validator('type')
    @classmethod
    def validate_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in CONTACT_TYPES:
            raise ValueError(f'Type must be one of: {", ".join(CONTACT_TYPES)}.')
        return normalized


class ContactResponse(BaseModel):
    id: int
    name: str
    phone: str
    type: str
    description: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


def get_owned_contact(contact_id: int, owner_id: int, db: Session) -> EmergencyContact:
    contact = db.query(EmergencyContact).filter(
        EmergencyContact.id == contact_id,
        EmergencyContact.owner_id == owner_id,
    ).first()
    if contact is None:
        raise NotFoundError('Contact not found')
    return contact


@router.get('', response_model=list[ContactResponse])
def list_contacts(
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        return db.query(EmergencyContact).filter(
            EmergencyContact.owner_id == claims.id,
        ).order_by(EmergencyContact.created_at.desc(), EmergencyContact.id.desc()).all()
    except SQLAlchemyError as exc:
        raise StorageUnavailableError() from exc


@router.post('', response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def create_contact(
    data: ContactRequest,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        contact = EmergencyContact(owner_id=claims.id, **data.model_dump())
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailableError() from exc


@router.put('/{contact_id}', response_model=ContactResponse)
def update_contact(
    contact_id: int,
    data: ContactRequest,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        contact = get_owned_contact(contact_id, claims.id, db)
        for field_name, value in data.model_dump().items():
            setattr(contact, field_name, value)
        db.commit()
        db.refresh(contact)
        return contact
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailableError() from exc


@router.delete('/{contact_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        contact = get_owned_contact(contact_id, claims.id, db)
        db.delete(contact)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailableError() from exc
