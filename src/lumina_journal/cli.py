"""CLI entry point for the Lumina reading journal."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from lumina_journal.adapters.auth import DemoSessionProvider, SupabaseSessionProvider
from lumina_journal.adapters.llm import GeminiClient
from lumina_journal.adapters.lookup import OpenLibraryLookup
from lumina_journal.adapters.render import MarkdownRenderer
from lumina_journal.adapters.storage import FileStorage
from lumina_journal.adapters.stores import LocalEntryStore, RemoteEntryStore
from lumina_journal.config import Settings, get_settings
from lumina_journal.core import AuthError, DraftController, EntryType, JournalEntry, SortOption
from lumina_journal.use_cases import DELETE_CONFIRMATION, JournalService

cli = typer.Typer(help="Lumina: a personal reading journal.", no_args_is_help=True)


def build_journal(settings: Settings) -> JournalService:
    """Pick the local or remote variants once, from configuration."""
    storage = FileStorage(settings.data_dir)

    if settings.is_demo_mode:
        sessions = DemoSessionProvider(storage, settings.demo, key=settings.storage.session_key)
        store = LocalEntryStore(storage, key=settings.storage.entries_key)
    else:
        sessions = SupabaseSessionProvider(settings, storage)
        store = RemoteEntryStore(settings, token_provider=lambda: _access_token(sessions))

    return JournalService(store=store, sessions=sessions, on_error=_show_error)


def build_draft(settings: Settings, with_lookup: bool = False) -> DraftController:
    return DraftController(
        lookup=OpenLibraryLookup(settings.lookup) if with_lookup else None,
        llm_client=GeminiClient(settings),
        debounce_seconds=settings.lookup.debounce_seconds,
        min_lookup_length=settings.lookup.min_query_length,
    )


def _access_token(sessions: SupabaseSessionProvider) -> Optional[str]:
    session = sessions.current_session()
    return session.access_token if session else None


def _show_error(message: str) -> None:
    typer.secho(f"❌ {message}", err=True, fg=typer.colors.RED)


def _print_mode(settings: Settings) -> None:
    if settings.is_demo_mode:
        print("⚠️  Lumina is running in DEMO MODE (local storage). Add Supabase keys to go live.")
    else:
        print("✓ Lumina is connected to the Supabase backend.")


async def _open_journal(require_session: bool = True) -> tuple[Settings, JournalService]:
    settings = get_settings()
    journal = build_journal(settings)
    await journal.start()

    if require_session and journal.session is None:
        _show_error("Not signed in. Run `lumina login` first.")
        raise typer.Exit(code=1)

    return settings, journal


def _find_entry(journal: JournalService, entry_id: str) -> JournalEntry:
    entry = journal.get(entry_id)
    if entry is None:
        _show_error(f"Entry {entry_id} not found.")
        raise typer.Exit(code=1)
    return entry


def _format_line(entry: JournalEntry) -> str:
    author = f" by {entry.author}" if entry.author else ""
    tags = f"  #{' #'.join(entry.tags)}" if entry.tags else ""
    return f"[{entry.id}] {entry.title}{author} ({entry.type.value}, {entry.created_at:%d.%m.%Y}){tags}"


async def _fill_draft(
    draft: DraftController,
    title: Optional[str],
    author: Optional[str],
    entry_type: Optional[EntryType],
    content: Optional[str],
    url: Optional[str],
    tags: Optional[list[str]],
    lookup: bool,
    analyze: bool,
) -> None:
    """Apply CLI options to the draft, running lookup and analysis on request."""
    if entry_type is not None:
        draft.set_field("type", entry_type)
    if author is not None:
        draft.set_field("author", author)
    if content is not None:
        draft.set_field("content", content)
    if url is not None:
        draft.set_field("url", url)
    for tag in tags or []:
        draft.add_tag(tag)

    if title is not None:
        draft.set_field("title", title)

    if lookup:
        await draft.settle()
        if not draft.suggestions:
            print("No book suggestions found.")
        else:
            print("\n📚 Suggestions:")
            for i, suggestion in enumerate(draft.suggestions, 1):
                year = f" ({suggestion.first_publish_year})" if suggestion.first_publish_year else ""
                author_text = f" by {suggestion.author}" if suggestion.author else ""
                print(f"  {i}. {suggestion.title}{author_text}{year}")
            choice = typer.prompt("Pick a suggestion (0 keeps your title)", default=0, type=int)
            if 1 <= choice <= len(draft.suggestions):
                draft.choose_suggestion(draft.suggestions[choice - 1])

    if analyze:
        print("✨ Generating summary and tags...")
        await draft.analyze()
        print(f"  └─ {draft.draft.ai_summary}")


@cli.command()
def status() -> None:
    """Show mode, credentials and the signed-in user."""

    async def run() -> None:
        settings, journal = await _open_journal(require_session=False)
        _print_mode(settings)
        print("\n🔑 Credentials:")
        print(f"  {'✓' if settings.gemini_api_key else '✗'} GEMINI_API_KEY - AI summaries")
        if journal.session:
            print(f"\n👤 Signed in as {journal.session.user.email or journal.session.user.id}")
            print(f"  • Entries: {len(journal.entries)}")
        else:
            print("\n👤 Not signed in")

    asyncio.run(run())


@cli.command()
def login(email: Optional[str] = typer.Option(None, help="Email for the magic link")) -> None:
    """Sign in (demo mode) or request a magic link."""

    async def run() -> None:
        settings, journal = await _open_journal(require_session=False)
        _print_mode(settings)

        address = email
        if not settings.is_demo_mode and not address:
            address = typer.prompt("Email")

        message = await journal.sessions.login(address or "")
        if message.is_error:
            _show_error(message.text)
            raise typer.Exit(code=1)
        print(f"✓ {message.text}")

    asyncio.run(run())


@cli.command()
def verify(
    access_token: str = typer.Option(..., help="access_token from the magic link"),
    refresh_token: Optional[str] = typer.Option(None, help="refresh_token from the magic link"),
    expires_in: int = typer.Option(3600, help="expires_in from the magic link"),
) -> None:
    """Complete a magic-link login with the tokens from the link."""

    async def run() -> None:
        settings, journal = await _open_journal(require_session=False)
        if settings.is_demo_mode or not isinstance(journal.sessions, SupabaseSessionProvider):
            _show_error("Magic links are not used in demo mode. Run `lumina login`.")
            raise typer.Exit(code=1)

        try:
            session = await journal.sessions.complete_login(access_token, refresh_token, expires_in)
        except AuthError as e:
            _show_error(str(e))
            raise typer.Exit(code=1)

        print(f"✓ Signed in as {session.user.email or session.user.id}")
        print(f"  • Entries: {len(journal.entries)}")

    asyncio.run(run())


@cli.command()
def logout() -> None:
    """Sign out."""

    async def run() -> None:
        _, journal = await _open_journal(require_session=False)
        await journal.sessions.logout()
        print("✓ Signed out")

    asyncio.run(run())


@cli.command("list")
def list_entries(
    search: str = typer.Option("", "--search", "-s", help="Search title, notes, author and tags"),
    tag: str = typer.Option("", "--tag", "-t", help="Only entries with this tag"),
    sort: SortOption = typer.Option(SortOption.NEWEST, "--sort", help="Ordering"),
) -> None:
    """List entries."""

    async def run() -> None:
        _, journal = await _open_journal()
        entries = journal.view(search=search, tag=tag, sort=sort)

        message = journal.empty_state(entries)
        if message:
            print(message)
            return

        for entry in entries:
            print(_format_line(entry))

    asyncio.run(run())


@cli.command()
def tags() -> None:
    """List all tags in use."""

    async def run() -> None:
        _, journal = await _open_journal()
        for tag in journal.tags:
            print(tag)

    asyncio.run(run())


@cli.command()
def show(entry_id: str) -> None:
    """Show one entry."""

    async def run() -> None:
        _, journal = await _open_journal()
        entry = _find_entry(journal, entry_id)
        print(MarkdownRenderer().render([entry], heading=entry.title))

    asyncio.run(run())


@cli.command()
def add(
    title: str = typer.Option(..., prompt=True),
    content: str = typer.Option(..., prompt=True, help="Notes, quotes or summary (markdown)"),
    author: str = typer.Option("", help="Author name"),
    entry_type: EntryType = typer.Option(EntryType.BOOK, "--type", help="Kind of source"),
    url: str = typer.Option("", help="Source URL"),
    tag: Optional[list[str]] = typer.Option(None, "--tag", help="Tag (repeatable)"),
    lookup: bool = typer.Option(False, "--lookup", help="Auto-fill from Open Library"),
    analyze: bool = typer.Option(False, "--analyze", help="Generate AI summary and tags"),
) -> None:
    """Create a new entry."""

    async def run() -> None:
        settings, journal = await _open_journal()
        draft = build_draft(settings, with_lookup=lookup)

        await _fill_draft(draft, title, author, entry_type, content, url, tag, lookup, analyze)

        try:
            form = await draft.submit(journal.create_entry)
        except ValueError as e:
            _show_error(str(e))
            raise typer.Exit(code=1)

        if form is None:
            raise typer.Exit(code=1)
        print(f"✓ Saved \"{form.title}\" to your journal")

    asyncio.run(run())


@cli.command()
def edit(
    entry_id: str,
    title: Optional[str] = typer.Option(None),
    content: Optional[str] = typer.Option(None),
    author: Optional[str] = typer.Option(None),
    entry_type: Optional[EntryType] = typer.Option(None, "--type"),
    url: Optional[str] = typer.Option(None),
    tag: Optional[list[str]] = typer.Option(None, "--tag", help="Add tag (repeatable)"),
    remove_tag: Optional[list[str]] = typer.Option(None, "--remove-tag", help="Remove tag (repeatable)"),
    lookup: bool = typer.Option(False, "--lookup"),
    analyze: bool = typer.Option(False, "--analyze"),
) -> None:
    """Edit an existing entry."""

    async def run() -> None:
        settings, journal = await _open_journal()
        entry = _find_entry(journal, entry_id)

        draft = build_draft(settings, with_lookup=lookup)
        draft.reset(entry)
        for old_tag in remove_tag or []:
            draft.remove_tag(old_tag)

        await _fill_draft(draft, title, author, entry_type, content, url, tag, lookup, analyze)

        async def save(form):
            return await journal.update_entry(entry.id, form)

        try:
            form = await draft.submit(save)
        except ValueError as e:
            _show_error(str(e))
            raise typer.Exit(code=1)

        if form is None:
            raise typer.Exit(code=1)
        print(f"✓ Updated \"{form.title}\"")

    asyncio.run(run())


@cli.command()
def delete(
    entry_id: str,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete an entry."""

    async def run() -> None:
        _, journal = await _open_journal()
        entry = _find_entry(journal, entry_id)

        deleted = await journal.delete_entry(
            entry.id, confirm=lambda: yes or typer.confirm(DELETE_CONFIRMATION)
        )
        if deleted:
            print(f"✓ Deleted \"{entry.title}\"")
        else:
            print("Nothing deleted.")

    asyncio.run(run())


@cli.command("lookup")
def lookup_book(query: str) -> None:
    """Search Open Library for a book."""

    async def run() -> None:
        settings = get_settings()
        suggestions = await OpenLibraryLookup(settings.lookup).search(query)
        if not suggestions:
            print("No book suggestions found.")
            return

        for suggestion in suggestions:
            year = f" ({suggestion.first_publish_year})" if suggestion.first_publish_year else ""
            author_text = f" by {suggestion.author}" if suggestion.author else ""
            print(f"📚 {suggestion.title}{author_text}{year}")
            if suggestion.cover_url:
                print(f"  └─ {suggestion.cover_url}")

    asyncio.run(run())


@cli.command()
def export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Markdown file to write"),
    search: str = typer.Option("", "--search", "-s"),
    tag: str = typer.Option("", "--tag", "-t"),
    sort: SortOption = typer.Option(SortOption.NEWEST, "--sort"),
) -> None:
    """Export the current view as markdown."""

    async def run() -> None:
        _, journal = await _open_journal()
        entries = journal.view(search=search, tag=tag, sort=sort)
        document = MarkdownRenderer().render(entries)

        if output is None:
            print(document)
            return

        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document, encoding="utf-8")
        print(f"✓ Exported {len(entries)} entries to {output}")

    asyncio.run(run())


def app() -> None:
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    app()
