"""Room listing, lookup and access checks."""

from pingpal.application.dto import NotFound, RoomAccess, RoomDetails
from pingpal.application.ports import AccountRepository, RoomRepository
from pingpal.domain import Room


class RoomService:
    def __init__(self, rooms: RoomRepository, accounts: AccountRepository) -> None:
        self._rooms = rooms
        self._accounts = accounts

    def list_rooms(self, volume: int | None = None) -> list[Room]:
        rooms = self._rooms.list_all()
        if volume and volume > 0:
            return rooms[:volume]
        return rooms

    def room_info(
        self, room_id: str, *, with_accounts: bool = False
    ) -> RoomDetails | NotFound:
        """Return the room; with_accounts resolves its access list to accounts."""
        room = self._rooms.get_by_id(room_id)
        if room is None:
            return NotFound(reason="Room not found.")
        if not with_accounts:
            return RoomDetails(room=room)
        return RoomDetails(room=room, accounts=self._accounts.list_by_ids(room.access))

    def check_access(self, account_id: str, room_id: str) -> RoomAccess | NotFound:
        room = self._rooms.get_by_id(room_id)
        if room is None:
            return NotFound(reason="Room not found.")
        return RoomAccess(has_access=account_id in room.access)

    def accessible_rooms(self, account_id: str) -> list[Room]:
        return self._rooms.list_accessible_by(account_id)
