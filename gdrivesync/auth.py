"""OAuth2 authorization and token persistence for Google Drive.

The interactive flow is the installed-application flow of
``google-auth-oauthlib``: a one-shot listener on the loopback interface
receives the authorization code after the user grants access in the
browser. The resulting credentials are stored in a JSON token file so later
runs can authorize without user interaction.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from google.auth.exceptions import GoogleAuthError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from .exceptions import DriveAuthenticationError, DriveConfigError, DriveNetworkError
from .utils import DEFAULT_REDIRECT_PORT

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"

# How long to wait for the browser redirect (seconds)
DEFAULT_AUTH_TIMEOUT = 300.0

AUTH_PROMPT_MESSAGE = (
    "Go to the following link in your browser to authorize access:\n{url}"
)
CALLBACK_RESPONSE = "Authorization code received. You can now close this window."


class TokenStore:
    """Reads and writes the token file."""

    def __init__(self, path: Path, scopes: list[str] | None = None):
        self.path = path
        self.scopes = scopes

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Credentials | None:
        """Load the stored credentials.

        Returns:
            The credentials, or None if the file is missing or unusable
        """
        if not self.path.exists():
            logger.debug(f"No token file at {self.path}")
            return None

        try:
            credentials = Credentials.from_authorized_user_file(
                str(self.path), self.scopes
            )
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.path}: {e}")
            return None

        logger.debug(f"Loaded token from {self.path}")
        return credentials

    def save(self, credentials: Credentials) -> None:
        """Write the token file, replacing any previous token.

        Raises:
            DriveConfigError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(credentials.to_json())
        except OSError as e:
            raise DriveConfigError(
                f"Unable to write token file {self.path}: {e}"
            ) from e
        logger.debug(f"Saved token to {self.path}")


@dataclass
class OAuthClientConfig:
    """OAuth2 client registration used for the authorization-code flow."""

    client_id: str
    client_secret: str
    redirect_port: int = DEFAULT_REDIRECT_PORT
    scopes: list[str] = field(default_factory=lambda: [DRIVE_FILE_SCOPE])

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.redirect_port}"

    def to_client_config(self) -> dict[str, Any]:
        """Client secrets in the layout of a downloaded ``credentials.json``."""
        return {
            "installed": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": GOOGLE_AUTH_URI,
                "token_uri": GOOGLE_TOKEN_URI,
                "redirect_uris": ["http://localhost"],
            }
        }

    def create_flow(self) -> InstalledAppFlow:
        return InstalledAppFlow.from_client_config(
            self.to_client_config(), scopes=self.scopes
        )


def authorize_interactive(
    client_config: OAuthClientConfig,
    timeout: float = DEFAULT_AUTH_TIMEOUT,
    launch_browser: bool = True,
) -> Credentials:
    """Run the browser-based authorization-code flow.

    The authorization URL is printed to stdout and, unless
    ``launch_browser`` is false, opened in the default browser. The
    listener binds the fixed redirect port of ``client_config``.

    Args:
        client_config: OAuth client registration
        timeout: Seconds to wait for the redirect
        launch_browser: Whether to open the URL automatically

    Returns:
        The freshly issued credentials

    Raises:
        DriveAuthenticationError: If the port is busy, no redirect arrives
            in time, or the authorization is denied
        DriveNetworkError: If the token endpoint cannot be reached
    """
    flow = client_config.create_flow()
    try:
        credentials = flow.run_local_server(
            host="localhost",
            port=client_config.redirect_port,
            open_browser=launch_browser,
            authorization_prompt_message=AUTH_PROMPT_MESSAGE,
            success_message=CALLBACK_RESPONSE,
            timeout_seconds=int(timeout),
            access_type="offline",
        )
    except OSError as e:
        raise DriveAuthenticationError(
            f"Unable to listen on port {client_config.redirect_port}: {e}"
        ) from e
    except AttributeError as e:
        # the listener returns without a request URI when it times out
        raise DriveAuthenticationError(
            f"Timed out after {timeout:.0f}s waiting for authorization"
        ) from e
    except OAuth2Error as e:
        raise DriveAuthenticationError(f"Authorization failed: {e}") from e
    except TransportError as e:
        raise DriveNetworkError(f"Network error: {e}") from e

    logger.debug("Authorization code exchanged for a token")
    return credentials


class OAuthSession:
    """Keeps stored credentials valid.

    Expired credentials are refreshed on demand and the token file is
    rewritten so the next run starts with the new access token.
    """

    def __init__(self, credentials: Credentials, store: TokenStore | None = None):
        self.credentials = credentials
        self.store = store
        self._lock = threading.Lock()

    def ensure_valid(self) -> Credentials:
        with self._lock:
            if self.credentials.valid:
                return self.credentials
            if not self.credentials.refresh_token:
                raise DriveAuthenticationError(
                    "Token expired and has no refresh token - run 'gdrivesync auth'"
                )

            logger.debug("Access token expired, refreshing")
            try:
                self.credentials.refresh(Request())
            except TransportError as e:
                raise DriveNetworkError(f"Network error: {e}") from e
            except GoogleAuthError as e:
                raise DriveAuthenticationError(f"Unable to refresh token: {e}") from e

            if self.store is not None:
                self.store.save(self.credentials)
            return self.credentials


def load_or_authorize(
    client_config: OAuthClientConfig,
    store: TokenStore,
    timeout: float = DEFAULT_AUTH_TIMEOUT,
) -> OAuthSession:
    """Build a session from the token file, authorizing interactively if needed.

    Args:
        client_config: OAuth client registration
        store: Token file to read from and write to
        timeout: Seconds to wait for the browser redirect

    Returns:
        A session holding valid credentials
    """
    credentials = store.load()
    if credentials is None:
        credentials = authorize_interactive(client_config, timeout=timeout)
        store.save(credentials)

    session = OAuthSession(credentials, store)
    session.ensure_valid()
    return session
