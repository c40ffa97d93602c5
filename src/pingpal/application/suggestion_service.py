"""Re-engagement suggestions derived from how recently friends were contacted."""

import logging
from collections.abc import Callable
from datetime import datetime

from pingpal.application.dto import NotFound
from pingpal.application.ports import AccountRepository
from pingpal.domain import Suggestion, SuggestionType
from pingpal.domain.entities import utcnow

logger = logging.getLogger(__name__)

# A friend becomes a suggestion once more than this many whole days have passed.
LONG_NOT_MESSAGED_DAYS = 4


def elapsed_days(now: datetime, then: datetime) -> int:
    """Whole days between then and now, fractional days truncated."""
    return (now - then).days


class SuggestionService:
    def __init__(
        self,
        accounts: AccountRepository,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._accounts = accounts
        self._clock = clock

    def compute(self, account_id: str) -> list[Suggestion] | NotFound:
        """Walk the friend list in order.

        The scan stops at the first friend whose account cannot be resolved and
        returns the suggestions gathered up to that point.
        """
        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")

        suggestions: list[Suggestion] = []
        now = self._clock()
        for friend in account.friends:
            friend_account = self._accounts.get_by_id(friend.account_id)
            if friend_account is None:
                logger.warning(
                    "Friend %s of %s not found, suggestions truncated",
                    friend.account_id,
                    account_id,
                )
                break
            if friend.last_contacted is None:
                suggestions.append(
                    Suggestion(SuggestionType.NEVER_MESSAGED, friend_account.id)
                )
            elif elapsed_days(now, friend.last_contacted) > LONG_NOT_MESSAGED_DAYS:
                suggestions.append(
                    Suggestion(SuggestionType.LONG_NOT_MESSAGED, friend_account.id)
                )
        return suggestions
