import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from backend.core import config
from backend.core.errors import AppError, InternalError
from backend.database import Base, engine, ensure_user_schema
from backend.models import contact, report, resource, user  # noqa: F401  (register tables)
from backend.routes import auth_routes, contact_routes, proximity_routes, report_routes, resource_routes

logging.basicConfig(level=config.LOG_LEVEL, format='%(levelname)s:%(name)s:%(message)s')

logger = logging.getLogger(__name__)

app = FastAPI(title='Disaster Management API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request'
    first = errors[0]
    message = str(first.get('msg', 'Invalid value')).removeprefix('Value error, ')
    location = [str(part) for part in first.get('loc', ()) if part not in ('body', 'query', 'path')]
    if location:
        return f"{'.'.join(location)}: {message}"
    return message


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error('%s %s failed: %s', request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={'error': exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={'error': describe_validation_error(exc)})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return JSONResponse(status_code=500, content={'error': InternalError.default_message})


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_user_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Disaster Management API Running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(proximity_routes.router, prefix='/api/emergency-centers')
app.include_router(resource_routes.router, prefix='/api/resources')
app.include_router(report_routes.router, prefix='/api/reports')
app.include_router(contact_routes.router, prefix='/api/contacts')
