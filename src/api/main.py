"""
FastAPI backend: one GET endpoint per account/room function, plus the signup hook.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
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
from dataclasses import dataclass

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from neo4j import GraphDatabase

from api.envelope import (
    STATUS_BAD_REQUEST,
    STATUS_ERROR,
    STATUS_FORBIDDEN,
    make_response,
    respond,
)
from api.presenters import present_account, present_room, present_suggestion
from api.schemas import AccountChanges, FriendChangesBody, UserCreatedBody, parse_changes
from pingpal.application import (
    AccountService,
    DocumentStore,
    FriendService,
    IdentityVerifier,
    Invalid,
    NotFound,
    RoomService,
    StoreError,
    SuggestionService,
)
from pingpal.application.account_service import DEFAULT_AVATAR_BASE_URL
from pingpal.infrastructure import (
    DocumentAccountRepository,
    DocumentRoomRepository,
    InMemoryDocumentStore,
    JwtIdentityVerifier,
    Neo4jDocumentStore,
    PhoneNormalizer,
    ensure_document_constraint,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

HOOK_SECRET_HEADER = "X-Hook-Secret"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _get_driver():
    uri = _env("NEO4J_URI", "bolt://localhost:7687")
    user = _env("NEO4J_USER", "neo4j")
    password = _env("NEO4J_PASSWORD", "password")
    return GraphDatabase.driver(uri, auth=(user, password))


@dataclass
class Services:
    accounts: AccountService
    friends: FriendService
    suggestions: SuggestionService
    rooms: RoomService


def build_services(store: DocumentStore, identity: IdentityVerifier) -> Services:
    """Wire use cases to a store. Tests pass an InMemoryDocumentStore."""
    account_repo = DocumentAccountRepository(store)
    room_repo = DocumentRoomRepository(store)
    return Services(
        accounts=AccountService(
            account_repo,
            identity,
            normalize_phone=PhoneNormalizer(_env("PHONE_DEFAULT_REGION")),
            avatar_base_url=_env("AVATAR_BASE_URL") or DEFAULT_AVATAR_BASE_URL,
        ),
        friends=FriendService(account_repo),
        suggestions=SuggestionService(account_repo),
        rooms=RoomService(room_repo, account_repo),
    )


def _build_store(app: FastAPI) -> DocumentStore:
    backend = _env("STORE_BACKEND", "neo4j").lower()
    if backend == "memory":
        logger.warning("STORE_BACKEND=memory: data is lost on restart")
        return InMemoryDocumentStore()
    if backend != "neo4j":
        raise RuntimeError(f"Unsupported STORE_BACKEND: {backend}")
    if getattr(app.state, "driver", None) is None:
        app.state.driver = _get_driver()
        ensure_document_constraint(app.state.driver)
    return Neo4jDocumentStore(app.state.driver)


def _build_identity() -> IdentityVerifier:
    secret = _env("AUTH_JWT_SECRET")
    if not secret:
        raise RuntimeError("AUTH_JWT_SECRET not set in backend environment")
    return JwtIdentityVerifier(secret, _env("AUTH_JWT_ALGORITHM", "HS256"))


def get_services(app: FastAPI) -> Services:
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(_build_store(app), _build_identity())
    return app.state.services


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = getattr(app.state, "driver", None)
    app.state.services = getattr(app.state, "services", None)
    try:
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()
            app.state.driver = None


app = FastAPI(title="Pingpal API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure for %s %s: %s", request.method, request.url.path, exc)
    return make_response(STATUS_ERROR, None, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(str(err["loc"][-1]) for err in exc.errors() if err.get("loc"))
    return make_response(STATUS_BAD_REQUEST, None, f"Invalid parameters: {fields}")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception for %s %s", request.method, request.url.path)
    return make_response(STATUS_ERROR, None, "Internal Server Error")


def _missing(message: str):
    return respond(Invalid(reason=message))


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- accounts ---


@app.get("/account-accountCreate")
def account_create(
    request: Request,
    email: str | None = None,
    password: str | None = None,
    label: str | None = None,
    phone: str | None = None,
):
    result = get_services(request.app).accounts.create_account(email, password, label, phone)
    return respond(result, lambda created: {"account_id": created.account_id})


@app.get("/account-accountChange")
def account_change(
    request: Request, account_id: str | None = None, changes: str | None = None
):
    if not account_id:
        return _missing("Account id not provided.")
    parsed = parse_changes(changes, AccountChanges)
    if isinstance(parsed, Invalid):
        return respond(parsed)
    return respond(
        get_services(request.app).accounts.edit_account(account_id, parsed.to_changes())
    )


@app.get("/account-accountInfo")
def account_info(
    request: Request,
    account_id: str | None = None,
    rooms: bool = False,
    flags: bool = False,
    friends: bool = False,
    invites: bool = False,
):
    if not account_id:
        return _missing("Account id not provided.")
    services = get_services(request.app)
    account = services.accounts.get_account(account_id)
    if isinstance(account, NotFound):
        return respond(account)
    account_rooms = services.rooms.accessible_rooms(account_id) if rooms else None
    return respond(
        account,
        lambda a: present_account(
            a, flags=flags, friends=friends, invites=invites, rooms=account_rooms
        ),
    )


@app.get("/account-accountLogin")
def account_login(request: Request, token: str | None = None):
    result = get_services(request.app).accounts.login(token)
    return respond(result, lambda auth: {"account_id": auth.account_id})


@app.get("/account-accountGetSuggestions")
def account_get_suggestions(request: Request, account_id: str | None = None):
    if not account_id:
        return _missing("Account id not provided.")
    result = get_services(request.app).suggestions.compute(account_id)
    return respond(result, lambda suggestions: [present_suggestion(s) for s in suggestions])


@app.get("/account-accountFind")
def account_find(request: Request, email: str | None = None, label: str | None = None):
    result = get_services(request.app).accounts.find_account(email=email, label=label)
    return respond(result, present_account)


@app.get("/account-accountList")
def account_list(request: Request, volume: int | None = None):
    accounts = get_services(request.app).accounts.list_accounts(volume)
    return respond(accounts, lambda items: [present_account(a) for a in items])


# --- friends and invites ---


@app.get("/account-accountUpdateContact")
def account_update_contact(
    request: Request,
    account_id: str | None = None,
    friend_id: str | None = None,
    changes: str | None = None,
):
    if not account_id:
        return _missing("Account id not provided.")
    if not friend_id:
        return _missing("Friend id not provided.")
    parsed = parse_changes(changes, FriendChangesBody)
    if isinstance(parsed, Invalid):
        return respond(parsed)
    return respond(
        get_services(request.app).friends.update_friend(
            account_id, friend_id, parsed.to_changes()
        )
    )


@app.get("/account-accountAddContact")
def account_add_contact(
    request: Request, account_id: str | None = None, friend_id: str | None = None
):
    if not account_id:
        return _missing("Account id not provided.")
    if not friend_id:
        return _missing("Friend id not provided.")
    return respond(get_services(request.app).friends.add_friend(account_id, friend_id))


@app.get("/account-accountDeleteContact")
def account_delete_contact(
    request: Request, account_id: str | None = None, friend_id: str | None = None
):
    if not account_id:
        return _missing("Account id not provided.")
    if not friend_id:
        return _missing("Contact id not provided.")
    return respond(get_services(request.app).friends.delete_friend(account_id, friend_id))


@app.get("/account-accountInviteFriend")
def account_invite_friend(
    request: Request, account_id: str | None = None, friend_id: str | None = None
):
    if not account_id:
        return _missing("Account id not provided.")
    if not friend_id:
        return _missing("Friend id not provided.")
    result = get_services(request.app).friends.send_invite(account_id, friend_id)
    return respond(result, lambda sent: {"invite_id": sent.invite_id})


@app.get("/account-accountAnswerInvite")
def account_answer_invite(
    request: Request,
    account_id: str | None = None,
    friend_id: str | None = None,
    invite_id: str | None = None,
    accept: bool | None = None,
):
    if not account_id:
        return _missing("Account id not provided.")
    if not friend_id:
        return _missing("Friend id not provided.")
    if not invite_id:
        return _missing("Invite id not provided.")
    if accept is None:
        return _missing("Answer not provided.")
    return respond(
        get_services(request.app).friends.answer_invite(
            account_id, friend_id, invite_id, accept
        )
    )


# --- private storage ---


@app.get("/account-accountStorageGet")
def account_storage_get(
    request: Request, account_id: str | None = None, key: str | None = None
):
    if not account_id:
        return _missing("Account id not provided.")
    result = get_services(request.app).accounts.storage_get(account_id, key)
    return respond(result, lambda stored: stored.value)


@app.get("/account-accountStorageSet")
def account_storage_set(
    request: Request,
    account_id: str | None = None,
    key: str | None = None,
    value: str | None = None,
):
    if not account_id:
        return _missing("Account id not provided.")
    return respond(get_services(request.app).accounts.storage_set(account_id, key, value))


# --- rooms ---


@app.get("/room-roomList")
def room_list(request: Request, volume: int | None = None):
    rooms = get_services(request.app).rooms.list_rooms(volume)
    return respond(rooms, lambda items: [present_room(r) for r in items])


@app.get("/room-roomInfo")
def room_info(request: Request, room_id: str | None = None, accounts: bool = False):
    if not room_id:
        return _missing("Room id not provided.")
    result = get_services(request.app).rooms.room_info(room_id, with_accounts=accounts)
    return respond(result, lambda details: present_room(details.room, details.accounts))


@app.get("/room-checkRoomAccess")
def check_room_access(
    request: Request, account_id: str | None = None, room_id: str | None = None
):
    if not account_id:
        return _missing("Account id not provided.")
    if not room_id:
        return _missing("Room id not provided.")
    result = get_services(request.app).rooms.check_access(account_id, room_id)
    return respond(result, lambda access: {"hasAccess": access.has_access})


# --- identity provider hook ---


@app.post("/hooks/user-created")
def user_created(
    body: UserCreatedBody,
    request: Request,
    x_hook_secret: str | None = Header(None, alias=HOOK_SECRET_HEADER),
):
    """Create the account record when the identity provider reports a signup."""
    secret = _env("HOOK_SECRET")
    if secret and (x_hook_secret or "").strip() != secret:
        return make_response(STATUS_FORBIDDEN, None, "Invalid hook secret.")
    logger.info("Signup hook for %s", body.uid)
    result = get_services(request.app).accounts.initialize_account(
        body.uid, body.email, body.display_name, body.photo_url
    )
    return respond(result, lambda created: {"account_id": created.account_id})
