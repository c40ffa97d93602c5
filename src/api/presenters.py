"""Shape domain objects into response payloads."""

from pingpal.domain import Account, Room, Suggestion


def present_account(
    account: Account,
    *,
    flags: bool = True,
    friends: bool = True,
    invites: bool = True,
    rooms: list[Room] | None = None,
) -> dict:
    """Account document plus id. Storage is never included."""
    data = {"id": account.id, **account.to_document()}
    del data["storage"]
    if not flags:
        del data["flags"]
    if not friends:
        del data["friends"]
    if not invites:
        del data["invites"]
    if rooms is not None:
        data["rooms"] = [present_room(r) for r in rooms]
    return data


def present_room(room: Room, accounts: list[Account] | None = None) -> dict:
    data = {"id": room.id, **room.to_document()}
    if accounts is not None:
        data["accounts"] = [present_account(a) for a in accounts]
    return data


def present_suggestion(suggestion: Suggestion) -> dict:
    return {"type": suggestion.type.value, "account_id": suggestion.account_id}
