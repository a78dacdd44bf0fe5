"""Session adapters."""

from lumina_journal.adapters.auth.demo_session import DemoSessionProvider
from lumina_journal.adapters.auth.supabase_session import SupabaseSessionProvider

__all__ = ["DemoSessionProvider", "SupabaseSessionProvider"]
