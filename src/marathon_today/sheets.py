"""Google Sheets grid source: OAuth token cache and the values fetch."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from marathon_today.config import SheetSettings
from marathon_today.errors import SheetError
from marathon_today.models import Grid

# If modifying these scopes, delete the cached token file.
SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _save_token(settings: SheetSettings, creds: Credentials, notify: Callable[..., None]) -> None:
    path = settings.token_path
    notify(f"Saving credential file to: {path}")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(creds.to_json())
    except OSError as exc:
        raise SheetError(f"Unable to cache oauth token: {exc}") from exc


def load_credentials(
    settings: SheetSettings, notify: Callable[..., None] = _noop
) -> Credentials:
    """Return user credentials, refreshing or re-authorizing as needed.

    A cached token is reused when valid; an expired one with a refresh
    token is refreshed; otherwise the browser flow runs against the
    client secrets file. New or refreshed tokens are written back.
    """
    creds: Credentials | None = None
    if settings.token_path.exists():
        try:
            creds = Credentials.from_authorized_user_file(str(settings.token_path), SCOPES)
        except (ValueError, OSError) as exc:
            notify(f"Ignoring unreadable token file {settings.token_path}: {exc}")
            creds = None
        else:
            notify(f"Loaded token from {settings.token_path}")

    if creds and creds.valid:
        return creds

    try:
        if creds and creds.expired and creds.refresh_token:
            notify("Refreshing expired token")
            creds.refresh(Request())
        else:
            if not settings.credentials_path.exists():
                raise SheetError(
                    f"Unable to read client secret file: {settings.credentials_path}"
                )
            flow = InstalledAppFlow.from_client_secrets_file(
                str(settings.credentials_path), SCOPES
            )
            creds = flow.run_local_server(port=0)
    except (GoogleAuthError, ValueError) as exc:
        raise SheetError(f"Unable to obtain credentials: {exc}") from exc

    _save_token(settings, creds, notify)
    return creds


def fetch_values(settings: SheetSettings, credentials: Any) -> list[list[Any]]:
    """Return the raw ``values`` array for the configured range."""
    try:
        service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        result = (
            service.spreadsheets()
            .values()
            .get(spreadsheetId=settings.spreadsheet_id, range=settings.read_range)
            .execute()
        )
    except HttpError as exc:
        raise SheetError(f"Unable to retrieve data from sheet: {exc}") from exc
    except (GoogleAuthError, OSError) as exc:
        raise SheetError(f"Could not reach the Sheets service: {exc}") from exc
    return result.get("values", [])


def fetch_grid(
    settings: SheetSettings, notify: Callable[..., None] = _noop
) -> Grid:
    """Authorize, fetch and validate the sheet range as a ``Grid``."""
    credentials = load_credentials(settings, notify)
    notify(f"Fetching {settings.read_range!r} from spreadsheet {settings.spreadsheet_id}")
    return Grid.from_values(fetch_values(settings, credentials))
