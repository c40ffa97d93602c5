"""Unit tests for RoomService and the document repositories behind it."""

from pingpal.application import NotFound, RoomService
from pingpal.application.dto import RoomAccess, RoomDetails
from pingpal.application.ports import ROOMS
from pingpal.domain import Account, AccountContact
from pingpal.infrastructure import (
    DocumentAccountRepository,
    DocumentRoomRepository,
    InMemoryDocumentStore,
)


def _service() -> RoomService:
    store = InMemoryDocumentStore()
    accounts = DocumentAccountRepository(store)
    for account_id in ("ann", "bob"):
        accounts.save(Account(id=account_id, contact=AccountContact(email=f"{account_id}@example.com")))
    store.put(ROOMS, "lobby", {"label": "Lobby", "access": ["bob", "ann", "ghost"]})
    store.put(ROOMS, "den", {"label": "Den", "access": ["bob"]})
    return RoomService(DocumentRoomRepository(store), accounts)


def test_list_rooms_with_volume() -> None:
    service = _service()
    assert [r.id for r in service.list_rooms()] == ["lobby", "den"]
    assert [r.id for r in service.list_rooms(1)] == ["lobby"]


def test_room_info_without_accounts() -> None:
    details = _service().room_info("lobby")
    assert isinstance(details, RoomDetails)
    assert details.room.label == "Lobby"
    assert details.room.id == "lobby"
    assert details.accounts is None


def test_room_info_hydrates_existing_accounts_in_access_order() -> None:
    details = _service().room_info("lobby", with_accounts=True)
    assert [a.id for a in details.accounts] == ["bob", "ann"]


def test_room_info_unknown_room() -> None:
    assert isinstance(_service().room_info("attic"), NotFound)


def test_check_access() -> None:
    service = _service()
    assert service.check_access("ann", "lobby") == RoomAccess(has_access=True)
    assert service.check_access("ann", "den") == RoomAccess(has_access=False)
    assert isinstance(service.check_access("ann", "attic"), NotFound)


def test_accessible_rooms() -> None:
    service = _service()
    assert [r.id for r in service.accessible_rooms("bob")] == ["lobby", "den"]
    assert [r.id for r in service.accessible_rooms("ann")] == ["lobby"]
    assert service.accessible_rooms("nobody") == []
