"""Locally synthesized session for demo mode."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import Optional

from lumina_journal.config import DemoConfig
from lumina_journal.core import AuthMessage, KeyValueStorage, Session, SessionProvider, User


class DemoSessionProvider(SessionProvider):
    """Fabricate a session for the constant demo user and keep it in local storage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        config: Optional[DemoConfig] = None,
        key: str = "lumina_demo_session",
    ) -> None:
        super().__init__()
        self.storage = storage
        self.config = config or DemoConfig()
        self.key = key

    async def restore(self) -> Optional[Session]:
        """Reload demo session persisted by an earlier login."""
        stored = self.storage.get_item(self.key)
        if not stored:
            return None

        try:
            session = Session.from_dict(json.loads(stored))
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            print(f"⚠️  Ignoring corrupted demo session: {e}")
            self.storage.remove_item(self.key)
            return None

        await self._set_session(session)
        return session

    async def login(self, email: str = "") -> AuthMessage:
        """Simulate network latency, then sign in as the demo user."""
        await asyncio.sleep(self.config.login_delay)

        session = Session(
            access_token="mock-token",
            refresh_token="mock-refresh",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
            user=User(id=self.config.user_id, email=self.config.email),
        )
        self.storage.set_item(self.key, json.dumps(session.to_dict()))
        await self._set_session(session)

        return AuthMessage(kind="success", text=f"Signed in as {self.config.email} (demo)", session=session)

    async def logout(self) -> None:
        self.storage.remove_item(self.key)
        await self._set_session(None)
