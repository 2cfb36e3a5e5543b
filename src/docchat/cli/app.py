"""Main CLI application using Typer."""
import asyncio
import json
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..client import ChatApiError
from ..documents import UnsupportedDocumentError, inspect_document
from ..export import ExportError, SlideDeckExporter, SpreadsheetExporter, write_print_view
from ..logs import configure_logging
from ..reply import ReplyDecoder
from .providers import (
    get_client,
    get_log_level,
    get_session_store,
    require_user_id,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="docchat",
    help="Chat with reference documents and export replies as slides and spreadsheets",
    no_args_is_help=True,
    add_completion=True,
)
documents_app = typer.Typer(help="Manage reference documents", no_args_is_help=True)
session_app = typer.Typer(help="Inspect or reset the general chat session", no_args_is_help=True)
app.add_typer(documents_app, name="documents")
app.add_typer(session_app, name="session")

# Console for rich output
console = Console()


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Log level: debug, info, warning or error (default: DOCCHAT_LOG_LEVEL)"
    ),
):
    """Document chat client."""
    level = log_level or get_log_level()
    ctx.obj = {"log_level": level}
    # The TUI routes records to its own log panel
    if ctx.invoked_subcommand != "chat":
        configure_logging(level)


def _read_reply(file: Path) -> str:
    """Read reply text; a JSON message object contributes its content."""
    text = file.read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(payload, dict) and "content" in payload:
        content = payload["content"]
        return content if isinstance(content, str) else json.dumps(content)
    return text


@app.command()
def decode(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File holding a reply"),
    as_json: bool = typer.Option(False, "--json", help="Print the decoded reply as JSON"),
    fail_open: bool = typer.Option(
        False,
        "--fail-open",
        help="Show the raw reply when its payload cannot be decoded"
    ),
):
    """Split a reply into prose, slides and spreadsheet."""
    reply = ReplyDecoder(fail_open=fail_open).decode(_read_reply(file))

    if as_json:
        console.print_json(reply.model_dump_json(by_alias=True))
        return

    if reply.decode_error and not reply.prose:
        console.print("[red]Error: reply payload could not be decoded[/red]")
        raise typer.Exit(code=1)
    if reply.decode_error:
        console.print("[yellow]Warning: payload could not be decoded, showing raw reply[/yellow]")

    console.print(Panel(Markdown(reply.prose.strip() or "_(no prose)_"), title="Prose", border_style="cyan"))

    table = Table(show_header=False, box=None)
    table.add_column("Item", style="bold cyan", width=15)
    table.add_column("Value")
    table.add_row("Strategy", reply.strategy.value)
    table.add_row("Slides", str(len(reply.slides)) if reply.has_slides else "None")
    if reply.has_slides:
        for number, slide in enumerate(reply.slides, 1):
            kinds = ", ".join(item.type.value for item in slide.data) or "empty"
            table.add_row(f"  Slide {number}", kinds)
    if reply.has_spreadsheet:
        spec = reply.spreadsheet
        table.add_row("Spreadsheet", f"{len(spec.data)} rows, columns: {', '.join(spec.column_labels) or '-'}")
    else:
        table.add_row("Spreadsheet", "None")
    console.print(table)


@app.command()
def export(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File holding a reply"),
    pptx: Path | None = typer.Option(None, "--pptx", help="Write the slide deck here"),
    xlsx: Path | None = typer.Option(None, "--xlsx", help="Write the spreadsheet here"),
    html: Path | None = typer.Option(None, "--html", help="Write the print view here"),
):
    """Export the artifacts of a reply to files."""
    if not (pptx or xlsx or html):
        console.print("[red]Error: choose at least one of --pptx, --xlsx, --html[/red]")
        raise typer.Exit(code=1)

    reply = ReplyDecoder().decode(_read_reply(file))
    if reply.decode_error:
        console.print("[red]Error: reply payload could not be decoded[/red]")
        raise typer.Exit(code=1)

    try:
        if pptx:
            if not reply.has_slides:
                console.print("[yellow]Reply has no slides, skipping --pptx[/yellow]")
            else:
                path = SlideDeckExporter().write(reply, pptx)
                console.print(f"[green]Slides written to {path}[/green]")
        if xlsx:
            if not reply.has_spreadsheet:
                console.print("[yellow]Reply has no spreadsheet, skipping --xlsx[/yellow]")
            else:
                path = SpreadsheetExporter().write(reply, xlsx)
                console.print(f"[green]Spreadsheet written to {path}[/green]")
        if html:
            path = write_print_view(reply.prose, html)
            console.print(f"[green]Print view written to {path}[/green]")
    except (ExportError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def chat(
    ctx: typer.Context,
    document: str | None = typer.Option(
        None,
        "--document",
        "-d",
        help="Chat about this reference document (document id)"
    ),
    export_dir: Path | None = typer.Option(
        None,
        "--export-dir",
        "-o",
        file_okay=False,
        help="Directory for exported slides and spreadsheets (default: current directory)"
    ),
):
    """Launch the interactive chat TUI."""
    from ..ui import run_tui

    log_level = (ctx.obj or {}).get("log_level")
    client = get_client(console)
    store = get_session_store(console)

    try:
        asyncio.run(run_tui(
            client,
            store,
            document_id=document,
            log_level=log_level,
            export_dir=export_dir,
        ))
    except KeyboardInterrupt:
        pass
    console.print("[dim]Goodbye![/dim]")


@app.command()
def health():
    """Check that the chat server is reachable."""
    async def _health():
        async with get_client(console) as client:
            try:
                documents = await client.list_documents()
            except ChatApiError as e:
                console.print(f"[red]x[/red] API {client.config.base_url}: FAILED ({e})")
                raise typer.Exit(code=1)
            console.print(f"[green]+[/green] API {client.config.base_url}: OK ({len(documents)} documents)")

    asyncio.run(_health())


@documents_app.command("list")
def documents_list(
    user: str | None = typer.Option(None, "--user", "-u", help="Only this user's documents"),
):
    """List reference documents."""
    async def _list():
        async with get_client(console) as client:
            try:
                documents = await client.list_documents(user)
            except ChatApiError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)

        if not documents:
            console.print("[dim]No documents.[/dim]")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="cyan")
        table.add_column("Type", style="yellow", width=6)
        table.add_column("Created")
        for doc in documents:
            created = doc.created_at.strftime("%Y-%m-%d %H:%M") if doc.created_at else "-"
            table.add_row(doc.document_id, doc.title, doc.type, created)
        console.print(table)

    asyncio.run(_list())


@documents_app.command("upload")
def documents_upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF to upload"),
    title: str | None = typer.Option(None, "--title", "-t", help="Title (default: from the PDF)"),
    user: str | None = typer.Option(None, "--user", "-u", help="Owner user id (default: DOCCHAT_USER_ID)"),
):
    """Upload a PDF as a reference document."""
    user_id = require_user_id(user, console)
    try:
        info = inspect_document(path)
    except (FileNotFoundError, UnsupportedDocumentError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    async def _upload():
        async with get_client(console) as client:
            console.print(f"[dim]Uploading {info.title} ({info.page_count} pages)...[/dim]")
            try:
                document = await client.upload_document(
                    info.path,
                    title=title or info.title,
                    user_id=user_id,
                    file_type=info.file_type,
                )
            except ChatApiError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)
        console.print(f"[green]Uploaded '{document.title}' as {document.document_id}[/green]")

    asyncio.run(_upload())


@documents_app.command("delete")
def documents_delete(
    document_id: str = typer.Argument(..., help="Document id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Delete a reference document."""
    if not yes:
        confirm = typer.confirm(f"Delete document {document_id}?")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return

    async def _delete():
        async with get_client(console) as client:
            try:
                await client.delete_document(document_id)
            except ChatApiError as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)
        console.print("[green]Document deleted.[/green]")

    asyncio.run(_delete())


@session_app.command("show")
def session_show():
    """Show the current general chat session id."""
    store = get_session_store(console)
    session_id = store.current()
    if session_id is None:
        console.print("[dim]No session yet; one starts with the first chat.[/dim]")
        return
    console.print(f"{session_id} [dim]({store.backend_type})[/dim]")


@session_app.command("new")
def session_new(
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Also delete the old session's messages on the server"
    ),
):
    """Start a new general chat session."""
    store = get_session_store(console)
    old_id = store.current()

    if clear and old_id:
        async def _clear():
            async with get_client(console) as client:
                try:
                    await client.clear_messages(old_id)
                except ChatApiError as e:
                    console.print(f"[red]Error: {e}[/red]")
                    raise typer.Exit(code=1)

        asyncio.run(_clear())

    session_id = store.reset()
    console.print(f"[green]New session: {session_id}[/green]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
