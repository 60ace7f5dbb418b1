"""guttercrypt CLI - local secrets manager, no cloud."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.markup import escape

from ..config.settings import get_settings
from ..utils.logging import console, setup_logging
from ..vault import (
    PassphraseRequiredError,
    SourceFileNotFoundError,
    VaultAlreadyExistsError,
    VaultError,
    VaultNotFoundError,
    VaultStore,
    WrongPassphraseError,
)

app = typer.Typer(
    name="guttercrypt",
    help="Local secrets manager - no cloud, no bs.",
    no_args_is_help=True,
)
note_app = typer.Typer(help="Encrypted notes for the assistant.", no_args_is_help=True)
config_app = typer.Typer(help="Local project configuration.", no_args_is_help=True)
sync_app = typer.Typer(help="Sync the encrypted vault through a GitHub gist.", no_args_is_help=True)
app.add_typer(note_app, name="note")
app.add_typer(config_app, name="config")
app.add_typer(sync_app, name="sync")

DEFAULT_FILE = Path(".env")
NUKE_PHRASE = "burn it down"

SYNC_ERRORS = {
    "no_token": "No GitHub token. Set GITHUB_TOKEN or log in with 'gh auth login'.",
    "no_vault": "Nothing to push. Store something first.",
    "no_gist_linked": "No gist linked. Run 'guttercrypt sync push' or 'guttercrypt sync link <id>'.",
    "gist_not_found": "Gist not found.",
    "auth_failed": "GitHub rejected the token.",
    "not_a_vault_gist": "That gist does not contain a vault.",
    "network_error": "Could not reach GitHub.",
}


def _fail(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def _vault() -> VaultStore:
    return VaultStore(Path.cwd(), get_settings().vault)


def _require_vault() -> VaultStore:
    store = _vault()
    if not store.exists:
        _fail("No vault here. Run 'guttercrypt init' first.")
    return store


def _prompt_passphrase(confirm: bool = False) -> str:
    return typer.prompt("Passphrase", hide_input=True, confirmation_prompt=confirm)


@contextmanager
def _vault_errors() -> Iterator[None]:
    """Report expected vault failures and exit with status 1."""
    try:
        yield
    except WrongPassphraseError:
        _fail("Wrong passphrase.")
    except VaultError as e:
        _fail(str(e))


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Local secrets manager - no cloud, no bs."""
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


@app.command()
def init():
    """
    Create an encrypted vault in the current project.
    """
    try:
        path = _vault().create()
    except VaultAlreadyExistsError:
        _fail("Vault already exists here. Use 'guttercrypt nuke' to start over.")

    console.print(f"[green]Vault created at {escape(str(path))}[/green]")


@app.command()
def store(
    file: Path = typer.Argument(DEFAULT_FILE, help="Document to encrypt"),
):
    """
    Encrypt a KEY=VALUE file into the vault, replacing what was stored.
    """
    vault = _require_vault()
    if not vault.resolve(file).is_file():
        _fail(f"File not found: {file}")

    passphrase = _prompt_passphrase(confirm=True)

    with _vault_errors():
        count = vault.store_file(file, passphrase)

    console.print(f"[green]Stored {count} secret{'' if count == 1 else 's'} from {escape(str(file))}[/green]")


@app.command("store-text")
def store_text(
    text: str = typer.Argument(..., help="Free-form text to encrypt"),
):
    """
    Encrypt free-form text into the vault (no key names are recorded).
    """
    vault = _require_vault()
    passphrase = _prompt_passphrase(confirm=True)

    with _vault_errors():
        vault.store_text(text, passphrase)

    console.print("[green]Text stored in vault.[/green]")


@app.command()
def inject(
    file: Path = typer.Argument(DEFAULT_FILE, help="Destination file"),
):
    """
    Decrypt the vault and write the document to disk.
    """
    vault = _require_vault()
    if not vault.is_populated:
        _fail("Vault is empty. Run 'guttercrypt store' first.")

    passphrase = _prompt_passphrase()

    with _vault_errors():
        vault.inject_to_file(file, passphrase)

    console.print(f"[green]Secrets injected into {escape(str(file))}. Handle with care.[/green]")


@app.command("list")
def list_keys():
    """
    Show stored key names (never values).
    """
    vault = _require_vault()

    with _vault_errors():
        meta = vault.read_metadata()
        if meta is None and not vault.is_populated:
            console.print("[yellow]Vault is empty.[/yellow]")
            return
        try:
            keys = vault.list_keys()
        except PassphraseRequiredError:
            keys = vault.list_keys(_prompt_passphrase())

    if meta is not None and meta.raw_text:
        console.print("[yellow]Vault holds raw text (no key names).[/yellow]")
        return

    if not keys:
        console.print("[yellow]Vault is empty.[/yellow]")
        return

    console.print("[bold]Keys in vault:[/bold]")
    for key in keys:
        console.print(f"  - {escape(key)}")


@app.command()
def lock(
    file: Path = typer.Argument(DEFAULT_FILE, help="Plaintext file to remove"),
):
    """
    Seal the vault by deleting the plaintext file.
    """
    vault = _require_vault()

    try:
        vault.lock(file)
    except SourceFileNotFoundError:
        _fail(f"'{file}' doesn't exist. Maybe it's already locked?")
    except VaultNotFoundError:
        _fail("Vault is empty. Store the file before locking it.")

    console.print(f"[green]Vault sealed. {escape(str(file))} deleted.[/green]")


@app.command()
def unlock(
    file: Path = typer.Argument(DEFAULT_FILE, help="File to restore"),
):
    """
    Unseal the vault by decrypting the file back to disk.
    """
    vault = _require_vault()
    if not vault.is_populated:
        _fail("Vault is empty. Run 'guttercrypt store' first.")

    passphrase = _prompt_passphrase()

    with _vault_errors():
        vault.unlock(file, passphrase)

    console.print(f"[green]Vault unlocked. {escape(str(file))} restored.[/green]")


@app.command()
def nuke():
    """
    Destroy the vault, notes and local config completely.
    """
    vault = _require_vault()

    console.print(f"[red]This is scorched earth. Type '{NUKE_PHRASE}' to confirm.[/red]")
    confirmation = typer.prompt("Confirm", default="", show_default=False)

    if confirmation.strip().lower() != NUKE_PHRASE:
        console.print("[green]Cancelled. Vault lives another day.[/green]")
        return

    with _vault_errors():
        vault.destroy()

    console.print("[red]Vault obliterated.[/red]")


@app.command()
def ask(
    question: list[str] = typer.Argument(..., help="Question for the assistant"),
    no_memory: bool = typer.Option(
        False,
        "--no-memory",
        help="Don't use or update encrypted memory",
    ),
):
    """
    Ask the assistant about secrets and env management.
    """
    from ..ai import NO_API_KEY, NO_PROVIDER, Assistant, ask_with_memory
    from ..config.project import load_project_config
    from ..memory import MemoryStore

    settings = get_settings()
    project_dir = Path.cwd()
    vault = _vault()

    memory_store: Optional[MemoryStore] = None
    passphrase: Optional[str] = None
    if not no_memory and vault.exists:
        memory_store = MemoryStore(project_dir, settings.vault)
        passphrase = _prompt_passphrase()

    assistant = Assistant(settings.ai, load_project_config(project_dir, settings.vault))

    console.print("[dim]thinking...[/dim]")
    with _vault_errors():
        outcome = ask_with_memory(assistant, " ".join(question), memory_store, passphrase)

    response = outcome.response
    if not response.success:
        if response.error == NO_API_KEY:
            _fail("No API key. Set GEMINI_API_KEY or run 'guttercrypt config api-key'.")
        if response.error == NO_PROVIDER:
            _fail(response.message or "No AI provider configured.")
        _fail(f"Assistant failed ({response.error}): {response.message or 'unknown error'}")

    console.print(escape(response.text))
    if outcome.memory_warning:
        console.print(f"[yellow]Warning: {escape(outcome.memory_warning)}[/yellow]")


@note_app.command("add")
def note_add(
    text: str = typer.Argument(..., help="Note text"),
):
    """Add an encrypted note."""
    from ..memory import MemoryStore

    _require_vault()
    memory_store = MemoryStore(Path.cwd(), get_settings().vault)
    passphrase = _prompt_passphrase()

    with _vault_errors():
        memory_store.add_note(text, passphrase)

    console.print("[green]Note saved.[/green]")


@note_app.command("list")
def note_list():
    """List encrypted notes."""
    from ..memory import MemoryStore

    _require_vault()
    memory_store = MemoryStore(Path.cwd(), get_settings().vault)
    passphrase = _prompt_passphrase()

    with _vault_errors():
        notes = memory_store.get_notes(passphrase)

    if not notes:
        console.print("[yellow]No notes yet.[/yellow]")
        return

    for i, note in enumerate(notes, 1):
        console.print(f"  {i}. {escape(note.text)} [dim]({note.created_at:%Y-%m-%d %H:%M})[/dim]")


@note_app.command("remove")
def note_remove(
    number: int = typer.Argument(..., help="Note number as shown by 'note list'"),
):
    """Remove a note by number."""
    from ..memory import MemoryStore

    _require_vault()
    memory_store = MemoryStore(Path.cwd(), get_settings().vault)
    passphrase = _prompt_passphrase()

    with _vault_errors():
        note = memory_store.remove_note(number - 1, passphrase)

    console.print(f"[green]Removed note: {escape(note.text)}[/green]")


@config_app.command("provider")
def config_provider(
    name: str = typer.Argument(..., help="AI provider (gemini or ollama)"),
):
    """Choose the assistant's AI provider."""
    from ..ai.assistant import PROVIDERS
    from ..config.project import load_project_config, save_project_config

    name = name.lower()
    if name not in PROVIDERS:
        _fail(f"Unknown provider '{name}'. Choose one of: {', '.join(PROVIDERS)}")

    vault_config = get_settings().vault
    project_config = load_project_config(Path.cwd(), vault_config)
    project_config.ai_provider = name
    save_project_config(project_config, Path.cwd(), vault_config)

    console.print(f"[green]AI provider set to {name}.[/green]")


@config_app.command("api-key")
def config_api_key(
    key: str = typer.Argument(..., help="Gemini API key"),
):
    """Save a Gemini API key in the local config (stored unencrypted)."""
    from ..config.project import load_project_config, save_project_config

    vault_config = get_settings().vault
    project_config = load_project_config(Path.cwd(), vault_config)
    project_config.api_key = key
    save_project_config(project_config, Path.cwd(), vault_config)

    console.print("[green]API key saved.[/green]")
    console.print("[yellow]The local config is not encrypted; keep it out of version control.[/yellow]")


@config_app.command("show")
def config_show():
    """Show the local config (secrets masked)."""
    from ..config.project import load_project_config

    project_config = load_project_config(Path.cwd(), get_settings().vault)

    console.print(f"AI provider: {project_config.ai_provider or '(default)'}")
    console.print(f"API key: {'set' if project_config.api_key else 'not set'}")
    console.print(f"GitHub token: {'set' if project_config.github_token else 'not set'}")
    console.print(f"Linked gist: {project_config.gist_id or 'none'}")


def _gist_sync():
    from ..sync import GistSync

    settings = get_settings()
    return GistSync(Path.cwd(), settings.vault, settings.sync)


def _sync_failed(result) -> None:
    message = SYNC_ERRORS.get(result.error, f"Sync failed ({result.error})")
    if result.message:
        message = f"{message} {result.message}"
    _fail(message)


@sync_app.command("push")
def sync_push():
    """Upload the encrypted vault to a secret gist."""
    with _gist_sync() as sync:
        result = sync.push()
    if not result.success:
        _sync_failed(result)

    action = "Created" if result.created else "Updated"
    console.print(f"[green]{action} gist {result.gist_id}[/green]")
    if result.gist_url:
        console.print(f"  {result.gist_url}")


@sync_app.command("pull")
def sync_pull():
    """Download the encrypted vault from the linked gist."""
    with _gist_sync() as sync:
        result = sync.pull()
    if not result.success:
        _sync_failed(result)

    if not result.files_updated:
        console.print("[yellow]Gist had nothing to pull.[/yellow]")
        return

    console.print(f"[green]Pulled: {', '.join(result.files_updated)}[/green]")


@sync_app.command("link")
def sync_link(
    gist_id: str = typer.Argument(..., help="Existing gist id"),
):
    """Link this project to an existing vault gist."""
    with _gist_sync() as sync:
        result = sync.link(gist_id)
    if not result.success:
        _sync_failed(result)

    console.print(f"[green]Linked gist {gist_id}. Run 'guttercrypt sync pull' to fetch it.[/green]")


@app.command()
def version():
    """Show version information."""
    from .. import __version__

    console.print(f"guttercrypt v{__version__}")
    console.print("Local secrets manager")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
