from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_claims, require_roles
from backend.auth.jwt_handler import Claims
from backend.auth.roles import Role
from backend.core.errors import NotFoundError, StorageUnavailableError
from backend.database import get_db
from backend.models.resource import Resource

router = APIRouter(tags=['resources'])

RESOURCE_STATUSES = ('pending', 'approved', 'in_transit', 'delivered', 'cancelled')
MAX_DESCRIPTION_LENGTH = 1000


class CreateResourceRequest(BaseModel):
    type: str
    quantity: int = 1
    location: str
    description: str | None = None

    @field_validator('type', 'location')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field is required.')
        return normalized

    @field_validator('quantity')
    @classmethod
    def validate_quantity(cls, value: int) -> int:
        if value < 1:
            raise ValueError('Quantity must be at least 1.')
        return value

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if len(normalized) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')
        return normalized or None


class UpdateResourceStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in RESOURCE_STATUSES:
            raise ValueError(f'Status must be one of: {", ".join(RESOURCE_STATUSES)}.')
        return normalized


class ResourceResponse(BaseModel):
    id: int
    type: str
    quantity: int
    location: str
    description: str | None = None
    status: str
    provided_by_id: int | None = None
    provided_by_name: str | None = None
    timestamp: datetime

    class Config:
        from_attributes = True


@router.get('', response_model=list[ResourceResponse])
def list_resources(
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        return db.query(Resource).order_by(Resource.timestamp.desc(), Resource.id.desc()).all()
    except SQLAlchemyError as exc:
        raise StorageUnavailableError() from exc


@router.post('', response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
def create_resource_request(
    data: CreateResourceRequest,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        resource = Resource(
            type=data.type,
            quantity=data.quantity,
            location=data.location,
            description=data.description,
            status='pending',
            provided_by_id=claims.id,
            provided_by_name=claims.name,
        )
        db.add(resource)
        db.commit()
        db.refresh(resource)
        return resource
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailableError() from exc


@router.patch('/{resource_id}/status', response_model=ResourceResponse)
def update_resource_status(
    resource_id: int,
    data: UpdateResourceStatusRequest,
    db: Session = Depends(get_db),
    claims: Claims = Depends(require_roles(Role.ADMIN, Role.EMERGENCY_RESPONDER)),
):
    try:
        resource = db.query(Resource).filter(Resource.id == resource_id).first()
        if resource is None:
            raise NotFoundError('Resource not found')

        resource.status = data.status
        db.commit()
        db.refresh(resource)
        return resource
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailableError() from exc


@router.get('/user/{user_id}', response_model=list[ResourceResponse])
def list_user_resource_requests(
    user_id: int,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        return (
            db.query(Resource)
            .filter(Resource.provided_by_id == user_id)
            .order_by(Resource.timestamp.desc(), Resource.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise StorageUnavailableError() from exc
