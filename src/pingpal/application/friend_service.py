"""Friend list and invite handshake between two accounts."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from pingpal.application.dto import (
    Conflict,
    Done,
    FriendChanges,
    Invalid,
    InviteSent,
    NotFound,
)
from pingpal.application.merge import FRIEND_POLICY, merge_changes
from pingpal.application.ports import AccountRepository
from pingpal.domain import Account, Friend, Invite, InviteStatus
from pingpal.domain.entities import parse_timestamp, utcnow

logger = logging.getLogger(__name__)


def _with_status(account: Account, invite_id: str, status: InviteStatus) -> Account:
    invites = tuple(
        replace(i, status=status) if i.id == invite_id else i for i in account.invites
    )
    return replace(account, invites=invites)


def _with_friend(account: Account, friend_id: str) -> Account:
    if account.friend(friend_id) is not None:
        return account
    return replace(account, friends=account.friends + (Friend(account_id=friend_id),))


class FriendService:
    """
    Invites are created in pairs: the inviter keeps a "waiting" copy, the invitee a
    "pending" one, both sharing the same id. Answering moves both copies to the same
    terminal status and, on acceptance, makes the two accounts friends of each other.
    Every change touching two accounts is written with one atomic save_all.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
        new_id: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._accounts = accounts
        self._clock = clock
        self._new_id = new_id

    def send_invite(
        self, inviter_id: str, invitee_id: str
    ) -> InviteSent | Invalid | NotFound | Conflict:
        if inviter_id == invitee_id:
            return Invalid(reason="Cannot invite yourself.")

        inviter = self._accounts.get_by_id(inviter_id)
        if inviter is None:
            return NotFound(reason="Account not found.")
        if inviter.friend(invitee_id) is not None:
            return Conflict(reason="Friend already added.")

        invitee = self._accounts.get_by_id(invitee_id)
        if invitee is None:
            return NotFound(reason="Friend account not found.")

        for invite in inviter.invites:
            if invite.account_id == invitee_id and not invite.status.is_terminal:
                return Conflict(reason="Invite already sent.")
        for invite in invitee.invites:
            if invite.account_id == inviter_id and not invite.status.is_terminal:
                return Conflict(reason="Invite already received.")

        invite_id = self._new_id()
        created_at = self._clock()
        inviter = replace(
            inviter,
            invites=inviter.invites
            + (Invite(invite_id, invitee_id, created_at, InviteStatus.WAITING),),
        )
        invitee = replace(
            invitee,
            invites=invitee.invites
            + (Invite(invite_id, inviter_id, created_at, InviteStatus.PENDING),),
        )
        self._accounts.save_all([inviter, invitee])
        logger.info("Invite %s sent from %s to %s", invite_id, inviter_id, invitee_id)
        return InviteSent(invite_id=invite_id)

    def answer_invite(
        self, responder_id: str, other_id: str, invite_id: str, accept: bool
    ) -> Done | Invalid | NotFound:
        """Accept or reject an invite. Either party may answer with its own view."""
        if responder_id == other_id:
            return Invalid(reason="Cannot answer an invite from yourself.")
        responder = self._accounts.get_by_id(responder_id)
        if responder is None:
            return NotFound(reason="Account not found.")
        other = self._accounts.get_by_id(other_id)
        if other is None:
            return NotFound(reason="Friend account not found.")

        own_copy = responder.invite(invite_id)
        other_copy = other.invite(invite_id)
        if own_copy is None or other_copy is None:
            return NotFound(reason="Invite not found.")

        if own_copy.status.is_terminal and other_copy.status.is_terminal:
            return Done()

        status = InviteStatus.RESOLVED if accept else InviteStatus.REJECTED
        responder = _with_status(responder, invite_id, status)
        other = _with_status(other, invite_id, status)
        if accept:
            responder = _with_friend(responder, other_id)
            other = _with_friend(other, responder_id)

        self._accounts.save_all([responder, other])
        logger.info("Invite %s %s by %s", invite_id, status.value, responder_id)
        return Done()

    def add_friend(
        self, account_id: str, friend_id: str
    ) -> Done | Invalid | NotFound | Conflict:
        """Add friend_id to account_id's list only. The other side is not touched."""
        if account_id == friend_id:
            return Invalid(reason="Cannot add yourself as a friend.")
        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")
        if account.friend(friend_id) is not None:
            return Conflict(reason="Friend already added.")

        self._accounts.save(_with_friend(account, friend_id))
        return Done()

    def update_friend(
        self, account_id: str, friend_id: str, changes: FriendChanges
    ) -> Done | Invalid | NotFound:
        if changes.is_empty():
            return Invalid(reason="No changes provided.")

        sparse: dict = {}
        if changes.favorite is not None:
            sparse["favorite"] = bool(changes.favorite)
        if changes.last_contacted is not None:
            try:
                sparse["last_contacted"] = parse_timestamp(
                    changes.last_contacted
                ).isoformat()
            except (TypeError, ValueError):
                return Invalid(reason="Last contacted date is invalid.")

        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")
        if not account.friends:
            return NotFound(reason="Got no friends yet.")
        current = account.friend(friend_id)
        if current is None:
            return NotFound(reason="Friend not found.")

        updated = Friend.from_document(
            merge_changes(current.to_document(), sparse, FRIEND_POLICY)
        )
        friends = tuple(
            updated if f.account_id == friend_id else f for f in account.friends
        )
        self._accounts.save(replace(account, friends=friends))
        return Done()

    def delete_friend(self, account_id: str, friend_id: str) -> Done | NotFound:
        """Remove friend_id from the list. Removing an absent friend succeeds."""
        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")
        if account.friend(friend_id) is None:
            return Done()

        friends = tuple(f for f in account.friends if f.account_id != friend_id)
        self._accounts.save(replace(account, friends=friends))
        return Done()
