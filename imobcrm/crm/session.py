"""Signed-in user state: authentication plus the user's profile row.

:class:`AuthService` wraps an :class:`~imobcrm.storage.gateway.AuthGateway`
and the ``profiles`` collection.  It keeps the current user and profile in
memory, and subscribes to the gateway's auth-state events so a sign-out
from anywhere clears it.

Every failure is re-raised after the service records it in
:attr:`AuthService.error` and resets itself to the signed-out state, so a
caller can both react to the exception and show the message later.
"""

from __future__ import annotations

import logging
from typing import Any

from imobcrm.core import events
from imobcrm.core.exceptions import (
    CrmError,
    ImobCrmError,
    NotAuthenticatedError,
    RecordNotFoundError,
)
from imobcrm.core.models import Profile, UserRole
from imobcrm.storage.gateway import (
    PROFILES,
    AuthEvent,
    AuthGateway,
    AuthUser,
    DatastoreGateway,
    Session,
)

__all__ = ["AuthService"]

logger = logging.getLogger(__name__)

#: Profile fields a user may change from the profile screen.
_EDITABLE_PROFILE_FIELDS: frozenset[str] = frozenset({"name", "phone", "photo_url"})


class AuthService:
    """Login / logout / registration and the current profile.

    Args:
        gateway: Datastore holding the ``profiles`` collection.
        auth: Authentication backend.
    """

    def __init__(self, gateway: DatastoreGateway, auth: AuthGateway) -> None:
        self._gateway = gateway
        self._auth = auth
        self.user: AuthUser | None = None
        self.profile: Profile | None = None
        self.error: str | None = None
        self._unsubscribe = auth.on_auth_state_change(self._on_auth_event)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def close(self) -> None:
        """Stop listening to auth-state events."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Restore an existing backend session and its profile, if any.

        Failures are logged and leave the service signed out.
        """
        try:
            session = await self._auth.get_session()
            if session is None:
                return
            profile = await self._load_profile(session.user.id)
        except ImobCrmError as exc:
            logger.error("Could not restore session: %s", exc)
            return
        self.user = session.user
        self.profile = profile

    async def login(self, email: str, password: str) -> Profile | None:
        """Sign in and load the user's profile.

        Raises:
            InvalidCredentialsError: On a wrong e-mail/password pair.
            DatastoreError: If the profile lookup fails.
        """
        self.error = None
        try:
            session = await self._auth.sign_in(email, password)
            profile = await self._load_profile(session.user.id)
        except ImobCrmError as exc:
            self._fail(exc)
            raise

        self._start(session, profile)
        logger.info(
            "User %s signed in",
            session.user.id,
            extra={"event": events.AUTH_SIGNED_IN},
        )
        return profile

    async def logout(self) -> None:
        """Sign out.  A backend error is recorded in :attr:`error`, not raised."""
        try:
            await self._auth.sign_out()
        except ImobCrmError as exc:
            logger.error("Sign-out failed: %s", exc)
            self.error = str(exc) or "Erro ao fazer logout"
            return
        self._clear()
        logger.info("User signed out", extra={"event": events.AUTH_SIGNED_OUT})

    async def register(
        self,
        name: str,
        email: str,
        phone: str,
        password: str,
        role: UserRole | str,
    ) -> Profile:
        """Create an account, then its profile row, and sign the user in.

        Raises:
            UserAlreadyExistsError: If *email* is already registered.
            DatastoreError: If the profile row cannot be written.
        """
        self.error = None
        try:
            session = await self._auth.sign_up(email, password)
            row = await self._gateway.insert(
                PROFILES,
                {
                    "id": session.user.id,
                    "name": name.strip(),
                    "email": session.user.email,
                    "phone": phone.strip(),
                    "role": str(UserRole(role)),
                },
            )
        except ImobCrmError as exc:
            self._fail(exc)
            raise

        profile = Profile.model_validate(row)
        self._start(session, profile)
        logger.info(
            "Registered %s account %s",
            profile.role,
            profile.id,
            extra={"event": events.AUTH_REGISTERED},
        )
        return profile

    async def update_profile(self, updates: dict[str, Any]) -> Profile:
        """Apply *updates* to the signed-in user's profile.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
            CrmError: If *updates* touches a field that cannot be edited.
            RecordNotFoundError: If the profile row no longer exists.
        """
        profile = self.require_profile()
        forbidden = sorted(set(updates) - _EDITABLE_PROFILE_FIELDS)
        if forbidden:
            raise CrmError(f"Campos não editáveis: {', '.join(forbidden)}")

        rows = await self._gateway.update(PROFILES, {"id": profile.id}, updates)
        if not rows:
            raise RecordNotFoundError(PROFILES, profile.id)
        self.profile = Profile.model_validate(rows[0])
        return self.profile

    def require_profile(self) -> Profile:
        """Return the signed-in profile.

        Raises:
            NotAuthenticatedError: If nobody is signed in.
        """
        if self.profile is None:
            raise NotAuthenticatedError()
        return self.profile

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_profile(self, user_id: str) -> Profile | None:
        row = await self._gateway.select_one(PROFILES, {"id": user_id})
        if row is None:
            logger.warning("No profile row for user %s", user_id)
            return None
        return Profile.model_validate(row)

    def _start(self, session: Session, profile: Profile | None) -> None:
        self.user = session.user
        self.profile = profile

    def _fail(self, exc: Exception) -> None:
        self.error = str(exc)
        self._clear()

    def _clear(self) -> None:
        self.user = None
        self.profile = None

    def _on_auth_event(self, event: AuthEvent, session: Session | None) -> None:
        if event is AuthEvent.SIGNED_OUT:
            self._clear()
