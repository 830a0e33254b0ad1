from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_claims
from backend.auth.jwt_handler import Claims
from backend.core.errors import NotFoundError, StorageUnavailableError
from backend.database import get_db
from backend.models.report import DisasterReport

router = APIRouter(tags=['reports'])

SEVERITIES = ('low', 'medium', 'high', 'critical')


def parse_location(value: str) -> tuple[float, float]:
    """Parse the ``"lat,lng"`` strings the dashboard map plots."""
    parts = [part.strip() for part in value.split(',')]
    if len(parts) != 2:
        raise ValueError('Location must be formatted as "lat,lng".')
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise ValueError('Location must be formatted as "lat,lng".') from exc
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValueError('Location is out of range.')
    return lat, lng


class CreateReportRequest(BaseModel):
    disaster_type: str
    location: str
    description: str | None = None
    severity: str = 'medium'

    @field_validator('disaster_type')
    @classmethod
    def validate_disaster_type(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Disaster type is required.')
        return normalized

    @field_validator('location')
    @classmethod
    def validate_location(cls, value: str) -> str:
        lat, lng = parse_location(value)
        return f'{lat},{lng}'

    @field_validator('severity')
    @classmethod
    def validate_severity(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SEVERITIES:
            raise ValueError(f'Severity must be one of: {", ".join(SEVERITIES)}.')
        return normalized


class ReportResponse(BaseModel):
    id: int
    disaster_type: str
    location: str
    description: str | None = None
    severity: str
    reporter_id: int | None = None
    reporter_name: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


@router.post('', response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
def create_report(
    data: CreateReportRequest,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        report = DisasterReport(
            disaster_type=data.disaster_type,
            location=data.location,
            description=data.description,
            severity=data.severity,
            reporter_id=claims.id,
            reporter_name=claims.name,
        )
        db.add(report)
        db.commit()
        db.refresh(report)
        return report
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageUnavailableError() from exc


@router.get('', response_model=list[ReportResponse])
def list_reports(
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        return db.query(DisasterReport).order_by(
            DisasterReport.created_at.desc(),
            DisasterReport.id.desc(),
        ).all()
    except SQLAlchemyError as exc:
        raise StorageUnavailableError() from exc


@router.get('/{report_id}', response_model=ReportResponse)
def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    claims: Claims = Depends(get_current_claims),
):
    try:
        report = db.query(DisasterReport).filter(DisasterReport.id == report_id).first()
    except SQLAlchemyError as exc:
        raise StorageUnavailableError() from exc
    if report is None:
        raise NotFoundError('Report not found')
    return report
