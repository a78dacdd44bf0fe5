"""Supabase auth: magic-link login and persisted sessions."""

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from lumina_journal.config import Settings
from lumina_journal.core import AuthError, AuthMessage, KeyValueStorage, Session, SessionProvider, User

MAGIC_LINK_SENT = "Check your email for the magic link to log in!"


class SupabaseSessionProvider(SessionProvider):
    """Session façade for the remote backend.

    ``login`` only asks the auth service to email a one-time link. The session
    itself is established later by ``complete_login`` with the tokens carried by
    that link, and every identity change is announced to subscribers.
    """

    def __init__(self, settings: Settings, storage: KeyValueStorage) -> None:
        super().__init__()
        self.auth_url = f"{settings.supabase_url.rstrip('/')}/auth/v1"
        self.anon_key = settings.supabase_anon_key
        self.redirect_to = settings.supabase.redirect_to
        self.timeout = settings.supabase.timeout
        self.storage = storage
        self.key = settings.storage.auth_token_key

    async def login(self, email: str) -> AuthMessage:
        """Request a magic link for email."""
        if not email.strip():
            return AuthMessage(kind="error", text="Email is required")

        params = {"redirect_to": self.redirect_to} if self.redirect_to else None
        try:
            await self._post("/otp", json={"email": email.strip(), "create_user": True}, params=params)
        except AuthError as e:
            return AuthMessage(kind="error", text=str(e))

        return AuthMessage(kind="success", text=MAGIC_LINK_SENT)

    async def complete_login(
        self, access_token: str, refresh_token: Optional[str] = None, expires_in: int = 3600
    ) -> Session:
        """Establish session from the tokens delivered by the magic link."""
        user_data = await self._get_user(access_token)
        session = Session(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            user=User(id=str(user_data["id"]), email=user_data.get("email") or ""),
        )
        await self._store(session)
        return session

    async def restore(self) -> Optional[Session]:
        """Reload persisted session, refreshing it when expired."""
        stored = self.storage.get_item(self.key)
        if not stored:
            return None

        try:
            session = Session.from_dict(json.loads(stored))
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            print(f"⚠️  Ignoring corrupted session: {e}")
            await self._store(None)
            return None

        if session.is_expired():
            return await self.refresh(session)

        await self._set_session(session)
        return session

    async def refresh(self, session: Optional[Session] = None) -> Optional[Session]:
        """Exchange refresh token for a new session. Clears identity on failure."""
        session = session or self._session
        if session is None or not session.refresh_token:
            await self._store(None)
            return None

        try:
            data = await self._post(
                "/token",
                json={"refresh_token": session.refresh_token},
                params={"grant_type": "refresh_token"},
            )
            refreshed = self._session_from_token_response(data)
        except (AuthError, KeyError, ValueError) as e:
            print(f"⚠️  Session expired and could not be refreshed: {e}")
            await self._store(None)
            return None

        await self._store(refreshed)
        return refreshed

    async def logout(self) -> None:
        session = self._session
        if session is not None:
            try:
                await self._post("/logout", token=session.access_token)
            except AuthError as e:
                print(f"⚠️  Sign-out request failed: {e}")
        await self._store(None)

    async def _store(self, session: Optional[Session]) -> None:
        if session is None:
            self.storage.remove_item(self.key)
        else:
            self.storage.set_item(self.key, json.dumps(session.to_dict()))
        await self._set_session(session)

    def _session_from_token_response(self, data: dict[str, Any]) -> Session:
        user = data["user"]
        if data.get("expires_at"):
            expires_at = datetime.fromtimestamp(int(data["expires_at"]), tz=timezone.utc)
        else:
            expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(data.get("expires_in", 3600)))

        return Session(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            token_type=data.get("token_type", "bearer"),
            expires_at=expires_at,
            user=User(id=str(user["id"]), email=user.get("email") or ""),
        )

    async def _get_user(self, access_token: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.auth_url}/user", headers=self._get_headers(access_token)
                )
        except httpx.RequestError as e:
            raise AuthError(f"Auth service unreachable: {e}") from e

        if response.status_code != 200:
            raise AuthError(self._error_text(response))
        return response.json()

    async def _post(
        self,
        path: str,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
        token: Optional[str] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.auth_url}{path}",
                    json=json or {},
                    params=params,
                    headers=self._get_headers(token),
                )
        except httpx.RequestError as e:
            raise AuthError(f"Auth service unreachable: {e}") from e

        if response.status_code >= 400:
            raise AuthError(self._error_text(response))
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def _get_headers(self, token: Optional[str] = None) -> dict[str, str]:
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _error_text(response: httpx.Response) -> str:
        """Pull the human-readable message out of an auth error response."""
        try:
            data = response.json()
        except ValueError:
            return f"Auth request failed with {response.status_code}"

        if isinstance(data, dict):
            for key in ("msg", "error_description", "message", "error"):
                if data.get(key):
                    return str(data[key])
        return f"Auth request failed with {response.status_code}"
