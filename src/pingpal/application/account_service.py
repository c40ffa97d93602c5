"""Account creation, edit, lookup, login and private storage."""

import re
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime
from urllib.parse import quote

from pingpal.application.dto import (
    AccountCreated,
    Authenticated,
    Conflict,
    Done,
    Invalid,
    NotFound,
    StorageValue,
)
from pingpal.application.merge import ACCOUNT_POLICY, clear_init_flag, merge_changes
from pingpal.application.ports import AccountRepository, IdentityVerifier
from pingpal.domain import (
    DEFAULT_LABEL,
    FLAG_NEEDS_INIT,
    FLAG_VERIFY_EMAIL,
    Account,
    AccountContact,
)
from pingpal.domain.entities import utcnow

PASSWORD_MIN_LENGTH = 12
SIGNUP_DEFAULT_LABEL = "Hero"
DEFAULT_AVATAR_BASE_URL = "https://eu.ui-avatars.com/api/"

_EMAIL_RE = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r"@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])"
    r"|(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$"
)


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(str(email).lower()))


def avatar_url(label: str, base_url: str = DEFAULT_AVATAR_BASE_URL) -> str:
    """Generated initials avatar for a label."""
    return f"{base_url}?name={quote(label)}"


class AccountService:
    def __init__(
        self,
        accounts: AccountRepository,
        identity: IdentityVerifier,
        *,
        normalize_phone: Callable[[str], str | None] | None = None,
        avatar_base_url: str = DEFAULT_AVATAR_BASE_URL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._accounts = accounts
        self._identity = identity
        self._normalize_phone = normalize_phone
        self._avatar_base_url = avatar_base_url
        self._clock = clock

    def create_account(
        self,
        email: str | None,
        password: str | None,
        label: str | None = None,
        phone: str | None = None,
    ) -> AccountCreated | Invalid | Conflict:
        """Register an account record.

        The password is only checked against the policy; credentials are held
        by the identity provider, never stored here.
        """
        email = (email or "").strip()
        if not email:
            return Invalid(reason="Email not provided")
        if not password:
            return Invalid(reason="Password not provided")
        if len(password) < PASSWORD_MIN_LENGTH:
            return Invalid(reason="Password didn't meet requirements.")
        if not is_valid_email(email):
            return Invalid(reason="Email is not valid.")

        stored_phone = None
        if phone and phone.strip():
            stored_phone = (
                self._normalize_phone(phone) if self._normalize_phone else phone.strip()
            )
            if not stored_phone:
                return Invalid(reason="Phone number is not valid.")

        if self._accounts.get_by_email(email) is not None:
            return Conflict(reason="Account with this email already exists.")

        account = Account(
            label=(label or "").strip() or DEFAULT_LABEL,
            created_at=self._clock(),
            flags=(FLAG_NEEDS_INIT,),
            contact=AccountContact(email=email, phone=stored_phone),
        )
        return AccountCreated(account_id=self._accounts.create(account))

    def initialize_account(
        self,
        account_id: str,
        email: str | None,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> AccountCreated | Invalid | Conflict:
        """Create the account record for a freshly signed-up identity."""
        if not account_id or not account_id.strip():
            return Invalid(reason="Account id not provided.")
        if not email or not email.strip():
            return Invalid(reason="Email not provided")
        if self._accounts.get_by_id(account_id) is not None:
            return Conflict(reason="Account already initialized.")
        if self._accounts.get_by_email(email.strip()) is not None:
            return Conflict(reason="Account with this email already exists.")

        label = (display_name or "").strip() or SIGNUP_DEFAULT_LABEL
        account = Account(
            id=account_id,
            label=label,
            avatar_url=photo_url or avatar_url(label, self._avatar_base_url),
            contact=AccountContact(email=email.strip()),
            created_at=self._clock(),
            flags=(FLAG_NEEDS_INIT, FLAG_VERIFY_EMAIL),
        )
        self._accounts.save(account)
        return AccountCreated(account_id=account_id)

    def edit_account(
        self, account_id: str, changes: Mapping
    ) -> Done | Invalid | NotFound:
        """Apply a sparse edit. Protected fields in changes are ignored."""
        if not changes:
            return Invalid(reason="No changes provided.")

        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")

        document = account.to_document()
        document["flags"] = clear_init_flag(document["flags"])
        merged = merge_changes(document, changes, ACCOUNT_POLICY)
        try:
            updated = Account.from_document(merged, account_id)
        except (KeyError, TypeError, ValueError) as e:
            return Invalid(reason=str(e))

        self._accounts.save(updated)
        return Done()

    def get_account(self, account_id: str) -> Account | NotFound:
        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")
        return account

    def find_account(
        self, email: str | None = None, label: str | None = None
    ) -> Account | Invalid | NotFound:
        """Look up by email, falling back to an exact label match."""
        email = (email or "").strip()
        label = (label or "").strip()
        if not email and not label:
            return Invalid(reason="No query provided.")

        if email:
            account = self._accounts.get_by_email(email)
        else:
            account = next(
                (a for a in self._accounts.list_all() if a.label == label), None
            )
        if account is None:
            return NotFound(reason="Account not found.")
        return account

    def list_accounts(self, volume: int | None = None) -> list[Account]:
        accounts = self._accounts.list_all()
        if volume and volume > 0:
            return accounts[:volume]
        return accounts

    def login(self, token: str | None) -> Authenticated | Invalid | NotFound:
        if not token:
            return Invalid(reason="Token not provided.")
        account_id = self._identity.verify(token)
        if not isinstance(account_id, str) or not account_id:
            return NotFound(reason="Token expired.")
        return Authenticated(account_id=account_id)

    def storage_get(
        self, account_id: str, key: str | None
    ) -> StorageValue | Invalid | NotFound:
        if not key:
            return Invalid(reason="Storage key not provided.")
        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")
        if key not in account.storage:
            return NotFound(reason=f"Storage field with key {key} doesn't exist.")
        return StorageValue(key=key, value=account.storage[key])

    def storage_set(
        self, account_id: str, key: str | None, value: object
    ) -> Done | Invalid | NotFound:
        if not key:
            return Invalid(reason="Storage key not provided.")
        if value is None or value == "":
            return Invalid(reason="Storage value not provided.")
        account = self._accounts.get_by_id(account_id)
        if account is None:
            return NotFound(reason="Account not found.")

        self._accounts.save(replace(account, storage={**account.storage, key: value}))
        return Done()
