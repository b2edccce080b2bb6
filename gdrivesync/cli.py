"""CLI interface for gdrivesync."""

import contextlib
import logging
import sys
from pathlib import Path
from typing import Any, Optional, cast

import click

from .api import DriveClient
from .auth import (
    DEFAULT_AUTH_TIMEOUT,
    OAuthClientConfig,
    TokenStore,
    authorize_interactive,
    load_or_authorize,
)
from .config import SyncSettings, config
from .exceptions import DriveAPIError, DriveConfigError
from .file_list_manager import FileListManager
from .output import OutputFormatter
from .sync import LocalFile, SyncAction, SyncEngine

logger = logging.getLogger(__name__)


def _auth_prompt_to_stderr() -> contextlib.AbstractContextManager:
    # the authorization URL must stay visible in --json and --quiet mode
    return contextlib.redirect_stdout(sys.stderr)


def _oauth_client_config() -> OAuthClientConfig:
    client_id, client_secret = config.client_id, config.client_secret
    if not client_id or not client_secret:
        raise DriveConfigError(
            "Missing CLIENT_ID or CLIENT_SECRET environment variables"
        )
    return OAuthClientConfig(
        client_id=client_id,
        client_secret=client_secret,
        redirect_port=config.redirect_port,
    )


def create_client(api_key: Optional[str]) -> DriveClient:
    """Build an authenticated Drive client.

    An explicit ``--api-key`` wins, then the OAuth client credentials
    (reading the token file or authorizing interactively), then an API
    key from the environment/config.

    Raises:
        DriveAPIError: If no credentials are configured or authorization fails
    """
    if api_key:
        return DriveClient(api_key=api_key)
    if config.has_oauth_client():
        with _auth_prompt_to_stderr():
            session = load_or_authorize(
                _oauth_client_config(), TokenStore(config.token_file)
            )
        return DriveClient(credentials=session.credentials)
    if config.api_key:
        return DriveClient(api_key=config.api_key)
    raise DriveConfigError(
        "Missing CLIENT_ID or CLIENT_SECRET environment variables "
        "(run 'gdrivesync init' or set API_KEY)"
    )


def _require_folder_id(
    ctx: Any, out: OutputFormatter, folder_id: Optional[str]
) -> str:
    folder_id = folder_id or config.folder_id
    if not folder_id:
        out.error("No Google Drive folder ID given.")
        out.info("Use --folder-id or set GDRIVE_FOLDER_ID")
        ctx.exit(1)
    return cast(str, folder_id)


@click.group()
@click.option("--api-key", "-k", help="Google API key (overrides OAuth)")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="gdrivesync")
@click.pass_context
def main(
    ctx: Any,
    api_key: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """gdrivesync - Upload a local folder to Google Drive."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("gdrivesync").setLevel(logging.DEBUG)
        # googleapiclient logs every request URL at INFO
        logging.getLogger("googleapiclient").setLevel(logging.WARNING)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option(
    "--client-id",
    prompt="OAuth client ID",
    default=lambda: config.client_id or "",
    help="OAuth client ID",
)
@click.option(
    "--client-secret",
    prompt="OAuth client secret",
    hide_input=True,
    default=lambda: config.client_secret or "",
    show_default=False,
    help="OAuth client secret",
)
@click.option(
    "--folder-id",
    prompt="Google Drive folder ID",
    default=lambda: config.folder_id or "",
    help="Destination folder ID",
)
@click.option(
    "--sync-path",
    prompt="Local folder to sync",
    default=lambda: config.sync_path or "",
    help="Local folder to sync",
)
@click.pass_context
def init(
    ctx: Any, client_id: str, client_secret: str, folder_id: str, sync_path: str
) -> None:
    """Store OAuth client credentials and sync defaults.

    Values are written to ~/.config/gdrivesync/config.
    """
    out: OutputFormatter = ctx.obj["out"]

    if not client_id or not client_secret:
        out.error("Client ID and client secret are required.")
        ctx.exit(1)

    try:
        config_path = config.save_settings(
            GDRIVE_CLIENT_ID=client_id,
            GDRIVE_CLIENT_SECRET=client_secret,
            GDRIVE_FOLDER_ID=folder_id or None,
            SYNC_PATH=sync_path or None,
        )
    except OSError as e:
        out.error(f"Unable to save configuration: {e}")
        ctx.exit(1)

    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "Configuration saved successfully"),
            ("Config file", str(config_path)),
            ("Next step", "Run 'gdrivesync auth' to authorize access"),
        ],
    )


@main.command()
@click.option("--no-browser", is_flag=True, help="Only print the authorization URL")
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_AUTH_TIMEOUT,
    show_default=True,
    help="Seconds to wait for the browser redirect",
)
@click.pass_context
def auth(ctx: Any, no_browser: bool, timeout: float) -> None:
    """Authorize access to Google Drive and save the token file.

    Starts a local listener for the OAuth redirect, opens the consent page
    in your browser and stores the resulting token.
    """
    out: OutputFormatter = ctx.obj["out"]

    store = TokenStore(config.token_file)
    try:
        client_config = _oauth_client_config()
        with _auth_prompt_to_stderr():
            credentials = authorize_interactive(
                client_config,
                timeout=timeout,
                launch_browser=not no_browser,
            )
        store.save(credentials)
    except DriveAPIError as e:
        out.error(f"Authorization failed: {e}")
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("\nAuthorization cancelled by user")
        ctx.exit(130)

    if out.json_output:
        out.output_json(
            {"token_file": str(store.path), "expiry": credentials.expiry}
        )
    else:
        out.success(f"Token saved to {store.path}")


@main.command()
@click.argument("path", type=click.Path(path_type=Path), required=False)
@click.option("--folder-id", "-f", help="Destination Google Drive folder ID")
@click.option(
    "--workers",
    "-j",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Maximum parallel uploads (0 = one per file)",
)
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Glob pattern of files to skip (repeatable)",
)
@click.option(
    "--exclude-dot-files", is_flag=True, help="Skip files and folders starting with ."
)
@click.pass_context
def sync(
    ctx: Any,
    path: Optional[Path],
    folder_id: Optional[str],
    workers: int,
    dry_run: bool,
    exclude: tuple[str, ...],
    exclude_dot_files: bool,
) -> None:
    """Upload new and changed files from a local folder to Google Drive.

    PATH: Local folder to sync (defaults to SYNC_PATH)

    Files that already exist in the Drive folder (matched by name) are
    updated, all others are uploaded as new files. Nothing is ever deleted.

    Examples:
        gdrivesync sync ./photos -f 1AbCdEf       # Sync into folder 1AbCdEf
        gdrivesync sync -j 4                      # At most 4 parallel uploads
        gdrivesync sync ./docs --dry-run          # Preview only
        gdrivesync sync . -e "*.tmp" -e "build/*" # Skip matching files
    """
    out: OutputFormatter = ctx.obj["out"]

    if path is None:
        if not config.sync_path:
            out.error("No local folder given.")
            out.info("Pass PATH or set SYNC_PATH")
            ctx.exit(1)
        path = Path(config.sync_path).expanduser()

    settings = SyncSettings(
        local_path=path,
        folder_id=_require_folder_id(ctx, out, folder_id),
        workers=workers,
        dry_run=dry_run,
        exclude_patterns=list(exclude),
        exclude_dot_files=exclude_dot_files,
    )

    client: Optional[DriveClient] = None
    try:
        client = create_client(ctx.obj.get("api_key"))
        out.info(f"Syncing {settings.local_path} to folder {settings.folder_id}")
        stats = SyncEngine(client, out).sync_folder(settings)
    except OSError as e:
        out.error(f"Error syncing folder: {e}")
        ctx.exit(1)
    except DriveAPIError as e:
        out.error(f"Error syncing folder: {e}")
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    finally:
        if client is not None:
            client.close()

    if out.json_output:
        out.output_json({**stats, "dry_run": dry_run})

    if stats["errors"] > 0:
        ctx.exit(1)
    if not dry_run:
        out.success("Sync complete.")


@main.command()
@click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option("--folder-id", "-f", help="Destination Google Drive folder ID")
@click.pass_context
def upload(ctx: Any, file: Path, folder_id: Optional[str]) -> None:
    """Upload a single file, replacing a remote file with the same name.

    FILE: Local file to upload
    """
    out: OutputFormatter = ctx.obj["out"]
    parent_id = _require_folder_id(ctx, out, folder_id)
    file_path = file.resolve()

    client: Optional[DriveClient] = None
    try:
        local_file = LocalFile.from_path(file_path, file_path.parent)
        client = create_client(ctx.obj.get("api_key"))
        action = SyncEngine(client, out).upload_file(local_file, parent_id)
    except (OSError, DriveAPIError) as e:
        out.error(f"Error syncing {file}: {e}")
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("\nUpload cancelled by user")
        ctx.exit(130)
    finally:
        if client is not None:
            client.close()

    if out.json_output:
        out.output_json({"file": local_file.name, "action": action.value})
    elif action == SyncAction.UPDATE:
        out.success(f"Updated {local_file.name}")
    else:
        out.success(f"Uploaded {local_file.name}")


@main.command()
@click.argument("folder_id", required=False)
@click.pass_context
def ls(ctx: Any, folder_id: Optional[str]) -> None:
    """List the contents of a Google Drive folder.

    FOLDER_ID: Folder to list (defaults to GDRIVE_FOLDER_ID)
    """
    out: OutputFormatter = ctx.obj["out"]
    folder_id = _require_folder_id(ctx, out, folder_id)

    client: Optional[DriveClient] = None
    try:
        client = create_client(ctx.obj.get("api_key"))
        files = FileListManager(client).get_all_in_folder(folder_id)
    except DriveAPIError as e:
        out.error(str(e))
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("\nListing cancelled by user")
        ctx.exit(130)
    finally:
        if client is not None:
            client.close()

    files.sort(key=lambda f: (not f.is_folder, f.name.lower()))

    if out.json_output:
        out.output_json([f.to_dict() for f in files])
        return

    if not files:
        out.info("Folder is empty.")
        return

    rows = [
        [
            f.name + ("/" if f.is_folder else ""),
            f.id,
            "-" if f.is_folder else out.format_size(f.size),
            f.modified_time or "",
        ]
        for f in files
    ]
    out.output_table(["Name", "ID", "Size", "Modified"], rows)


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show configured credentials and token file state."""
    out: OutputFormatter = ctx.obj["out"]

    store = TokenStore(config.token_file)
    credentials = store.load()

    if ctx.obj.get("api_key"):
        mode = "API key (--api-key)"
    elif config.has_oauth_client():
        mode = "OAuth"
    elif config.api_key:
        mode = "API key"
    else:
        mode = "not configured"

    if credentials is None:
        token_state = "missing"
    elif credentials.expired:
        refreshable = " (refreshable)" if credentials.refresh_token else ""
        token_state = "expired" + refreshable
    else:
        token_state = "valid"

    info = {
        "credentials": mode,
        "token_file": str(store.path),
        "token": token_state,
        "token_expiry": (
            credentials.expiry.isoformat()
            if credentials and credentials.expiry
            else None
        ),
        "folder_id": config.folder_id,
        "sync_path": config.sync_path,
        "config_file": str(config.get_config_path()),
    }

    if out.json_output:
        out.output_json(info)
    else:
        out.print_summary(
            "gdrivesync Status",
            [
                (key.replace("_", " ").capitalize(), str(value or "-"))
                for key, value in info.items()
            ],
        )

    if mode == "not configured":
        ctx.exit(1)


if __name__ == "__main__":
    main()
