"""
FastAPI backend: REST API for the contacts directory.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field, field_validator

from api.settings import BACKEND_SQL, Settings, load_settings
from rolodex.application import ContactService, Invalid, Pagination
from rolodex.application.ports import ContactChecks, ContactRepository
from rolodex.domain import (
    AuthError,
    Contact,
    ContactId,
    ExternalValidationError,
    InvalidPageError,
    NewContact,
    NotFoundError,
    ParsingError,
    StorageError,
)
from rolodex.domain.entities import PHONE_NO_MAX, PHONE_NO_MIN
from rolodex.infrastructure import (
    BasicAuthVerifier,
    ContactValidator,
    CredentialStore,
    InMemoryContactRepository,
    PhoneNumberVerifier,
    SqlContactRepository,
    create_sql_engine,
    ensure_contacts_table,
    parse_phone_no,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

MAX_JSON_PAYLOAD_SIZE = 1024 * 16

PAGE_NO_KEY = "page_no"
PAGE_SIZE_KEY = "page_size"


# --- request / response bodies ---


def _coerce_phone_no(value):
    """Accept phone numbers as integers or as human-entered text ("+49 170 1234567")."""
    if isinstance(value, str):
        parsed = parse_phone_no(value)
        if parsed is None:
            raise ValueError("phone_no is not a valid phone number")
        return parsed
    return value


class ContactBody(BaseModel):
    name: str
    phone_no: int = Field(ge=PHONE_NO_MIN, le=PHONE_NO_MAX)
    email: str

    @field_validator("phone_no", mode="before")
    @classmethod
    def _phone_no(cls, value):
        return _coerce_phone_no(value)

    def to_new_contact(self) -> NewContact:
        return NewContact(name=self.name, phone_no=self.phone_no, email=self.email)


class UpdateContactBody(ContactBody):
    # Clients may send the full record back; the id in the path wins.
    id: int | None = None


class UpdateEmailBody(BaseModel):
    email: str


class UpdatePhoneNoBody(BaseModel):
    phone_no: int = Field(ge=PHONE_NO_MIN, le=PHONE_NO_MAX)

    @field_validator("phone_no", mode="before")
    @classmethod
    def _phone_no(cls, value):
        return _coerce_phone_no(value)


class ContactOut(BaseModel):
    id: int
    name: str
    phone_no: int
    email: str

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactOut":
        return cls(
            id=contact.id.value,
            name=contact.name,
            phone_no=contact.phone_no,
            email=contact.email,
        )


# --- wiring ---


def _build_repository(settings: Settings, app: FastAPI) -> ContactRepository:
    if settings.backend == BACKEND_SQL:
        engine = create_sql_engine(settings.database_url)
        ensure_contacts_table(engine)
        app.state.engine = engine
        logger.info("Using SQL contacts repository")
        return SqlContactRepository(engine)
    logger.info("Using in-memory contacts repository")
    # Same not-found behaviour as the SQL backend, so the API answers 404 on both.
    return InMemoryContactRepository(raise_on_missing=True)


def _build_validator(settings: Settings) -> ContactValidator:
    if not settings.phone_validation_enabled:
        return ContactValidator()
    return ContactValidator(
        PhoneNumberVerifier(settings.apilayer_key, base_url=settings.apilayer_base_url)
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.engine = None
    try:
        if app.state.service is None:
            settings = app.state.settings or load_settings()
            app.state.service = ContactService(
                _build_repository(settings, app), _build_validator(settings)
            )
            if settings.auth_enabled:
                store = CredentialStore.from_file(settings.api_users_file)
                app.state.auth_verifier = BasicAuthVerifier(store)
        if app.state.auth_verifier is None:
            logger.warning("Basic auth disabled: mutating routes are public")
        yield
    finally:
        if getattr(app.state, "engine", None) is not None:
            app.state.engine.dispose()


# --- dependencies ---


def get_service(request: Request) -> ContactService:
    service = request.app.state.service
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialised")
    return service


def require_basic_auth(
    request: Request,
    authorization: str | None = Header(None),
) -> None:
    """Reject the request unless it carries valid Basic credentials (when auth is on)."""
    verifier: BasicAuthVerifier | None = request.app.state.auth_verifier
    if verifier is None:
        return
    if authorization is None:
        raise HTTPException(
            status_code=401,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Basic"},
        )
    if not verifier.verify_basic_auth(authorization):
        raise HTTPException(
            status_code=401,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )


def _raise_if_invalid(result) -> None:
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)


# --- REST: health ---

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contacts ---


@router.get("/contacts", response_model=list[ContactOut])
def list_contacts(
    page_no: str | None = Query(None, alias=PAGE_NO_KEY),
    page_size: str | None = Query(None, alias=PAGE_SIZE_KEY),
    service: ContactService = Depends(get_service),
):
    pagination = Pagination.from_query(page_no, page_size)
    contacts = service.list_contacts(pagination.page_no, pagination.page_size)
    return [ContactOut.from_contact(c) for c in contacts]


@router.get("/contacts/{contact_id}", response_model=ContactOut)
def get_contact(contact_id: int, service: ContactService = Depends(get_service)):
    contact = service.get_contact(ContactId(contact_id))
    if contact is None:
        raise HTTPException(status_code=404, detail=f"No contact with id {contact_id}")
    return ContactOut.from_contact(contact)


@router.post(
    "/contacts",
    response_model=ContactOut,
    dependencies=[Depends(require_basic_auth)],
)
def create_contact(body: ContactBody, service: ContactService = Depends(get_service)):
    result = service.create_contact(body.to_new_contact())
    _raise_if_invalid(result)
    return ContactOut.from_contact(result)


@router.put(
    "/contacts/{contact_id}",
    status_code=204,
    dependencies=[Depends(require_basic_auth)],
)
def update_contact(
    contact_id: int,
    body: UpdateContactBody,
    service: ContactService = Depends(get_service),
):
    _raise_if_invalid(service.update_contact(ContactId(contact_id), body.to_new_contact()))
    return Response(status_code=204)


@router.post(
    "/contacts-update-email/{contact_id}",
    status_code=204,
    dependencies=[Depends(require_basic_auth)],
)
def update_contact_email(
    contact_id: int,
    body: UpdateEmailBody,
    service: ContactService = Depends(get_service),
):
    _raise_if_invalid(service.update_email(ContactId(contact_id), body.email))
    return Response(status_code=204)


@router.post(
    "/contacts-update-phone-no/{contact_id}",
    status_code=204,
    dependencies=[Depends(require_basic_auth)],
)
def update_contact_phone_no(
    contact_id: int,
    body: UpdatePhoneNoBody,
    service: ContactService = Depends(get_service),
):
    _raise_if_invalid(service.update_phone_no(ContactId(contact_id), body.phone_no))
    return Response(status_code=204)


@router.delete(
    "/contacts/{contact_id}",
    status_code=204,
    dependencies=[Depends(require_basic_auth)],
)
def delete_contact(contact_id: int, service: ContactService = Depends(get_service)):
    service.delete_contact(ContactId(contact_id))
    return Response(status_code=204)


# --- error mapping ---


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ParsingError)
    async def parsing_error(request: Request, exc: ParsingError):
        return JSONResponse(status_code=400, content={"detail": str(exc), "value": exc.value})

    @app.exception_handler(InvalidPageError)
    async def invalid_page(request: Request, exc: InvalidPageError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AuthError)
    async def auth_error(request: Request, exc: AuthError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError):
        logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Storage error"})

    @app.exception_handler(ExternalValidationError)
    async def external_validation_error(request: Request, exc: ExternalValidationError):
        logger.warning("Phone verification rejected request: %s", exc)
        return JSONResponse(status_code=502, content={"detail": str(exc)})


# --- app ---


def create_app(
    settings: Settings | None = None,
    *,
    repository: ContactRepository | None = None,
    validator: ContactChecks | None = None,
    credential_store: CredentialStore | None = None,
) -> FastAPI:
    """Build the API. Components passed in are used as-is; missing ones are built from settings at startup."""
    app = FastAPI(title="Rolodex API", lifespan=lifespan)
    app.state.settings = settings
    app.state.service = None
    app.state.auth_verifier = None
    if repository is not None:
        app.state.service = ContactService(repository, validator or ContactValidator())
    if credential_store is not None:
        app.state.auth_verifier = BasicAuthVerifier(credential_store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_headers=["content-type", "authorization"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )

    @app.middleware("http")
    async def limit_body_and_log(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit():
            if int(content_length) > MAX_JSON_PAYLOAD_SIZE:
                logger.info("%s %s 413", request.method, request.url.path)
                return JSONResponse(status_code=413, content={"detail": "Payload too large"})
        response = await call_next(request)
        logger.info("%s %s %s", request.method, request.url.path, response.status_code)
        return response

    _register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
