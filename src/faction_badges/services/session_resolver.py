"""
Session Resolver

Maps an inbound request's session onto exactly one user identity: the
authenticated GitHub user when a principal is bound, otherwise a guest
pinned to the browser session (created on first contact).

The session is any mutable mapping; in the app it is Starlette's signed
cookie session, in tests a plain dict.

Two first requests of the same new session racing each other can each create
a guest; the later write of guest_user_id wins and the other guest record is
simply never used again.
"""

from dataclasses import dataclass
from typing import Any, MutableMapping, Optional
import logging

from faction_badges.models.identity import UserRecord, GUEST_DISPLAY_NAME
from faction_badges.repositories.base import IdentityStore

logger = logging.getLogger('SESSION_RESOLVER')

PRINCIPAL_KEY = "user_id"
GUEST_KEY = "guest_user_id"


@dataclass(frozen=True)
class ResolvedIdentity:
    user: UserRecord
    authenticated: bool


def _as_user_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


class SessionResolver:
    """
    Resolves and binds identities on a session.

    Example:
        resolver = SessionResolver(store)
        identity = resolver.resolve(request.session)
        store.set_faction(identity.user.id, "A")
    """

    def __init__(self, store: IdentityStore):
        self.store = store

    def authenticated_user(self, session: MutableMapping[str, Any]) -> Optional[UserRecord]:
        """
        Return the bound principal, if any.

        A principal whose record no longer exists is removed from the session.
        """
        user_id = _as_user_id(session.get(PRINCIPAL_KEY))
        if user_id is None:
            return None
        user = self.store.find_by_id(user_id)
        if user is None:
            logger.warning(f"Dropping stale principal {user_id} from session")
            session.pop(PRINCIPAL_KEY, None)
        return user

    def resolve(self, session: MutableMapping[str, Any]) -> ResolvedIdentity:
        """
        Resolve the acting identity, creating a guest if needed.

        Returns:
            ResolvedIdentity: Never holds a None user
        """
        user = self.authenticated_user(session)
        if user is not None:
            return ResolvedIdentity(user=user, authenticated=True)

        guest_id = _as_user_id(session.get(GUEST_KEY))
        if guest_id is not None:
            guest = self.store.find_by_id(guest_id)
            if guest is not None:
                return ResolvedIdentity(user=guest, authenticated=False)
            logger.info(f"Guest {guest_id} no longer exists; issuing a new guest")

        guest = self.store.create_guest(GUEST_DISPLAY_NAME)
        session[GUEST_KEY] = guest.id
        return ResolvedIdentity(user=guest, authenticated=False)

    @staticmethod
    def login(session: MutableMapping[str, Any], user: UserRecord) -> None:
        session[PRINCIPAL_KEY] = user.id

    @staticmethod
    def logout(session: MutableMapping[str, Any]) -> None:
        session.pop(PRINCIPAL_KEY, None)
