from __future__ import annotations

import stat
from pathlib import Path
from typing import Any

import pytest
from google.auth.exceptions import RefreshError

import marathon_today.sheets as sheets_mod
from marathon_today.config import SheetSettings
from marathon_today.errors import SheetError


class _FakeCreds:
    def __init__(self, *, valid: bool = True, expired: bool = False, refresh_token: str | None = None):
        self.valid = valid
        self.expired = expired
        self.refresh_token = refresh_token
        self.refreshed = False

    def refresh(self, request: object) -> None:
        del request
        self.refreshed = True
        self.valid = True

    def to_json(self) -> str:
        return '{"token": "fake"}'


class _FakeRequest:
    def __init__(self, result: dict[str, Any], calls: list[dict[str, str]]):
        self._result = result
        self._calls = calls

    def get(self, **kwargs: str) -> _FakeRequest:
        self._calls.append(kwargs)
        return self

    def values(self) -> _FakeRequest:
        return self

    def spreadsheets(self) -> _FakeRequest:
        return self

    def execute(self) -> dict[str, Any]:
        return self._result


def _settings(tmp_path: Path) -> SheetSettings:
    return SheetSettings(
        spreadsheet_id="sheet-123",
        read_range="Main",
        credentials_path=tmp_path / "credentials.json",
        token_path=tmp_path / "token.json",
    )


def test_cached_valid_token_is_reused(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    settings.token_path.write_text("{}", encoding="utf-8")
    creds = _FakeCreds()
    monkeypatch.setattr(
        sheets_mod.Credentials, "from_authorized_user_file", lambda path, scopes: creds
    )

    assert sheets_mod.load_credentials(settings) is creds
    assert settings.token_path.read_text(encoding="utf-8") == "{}"


def test_expired_token_is_refreshed_and_saved_private(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    settings = _settings(tmp_path)
    settings.token_path.write_text("{}", encoding="utf-8")
    creds = _FakeCreds(valid=False, expired=True, refresh_token="r")
    monkeypatch.setattr(
        sheets_mod.Credentials, "from_authorized_user_file", lambda path, scopes: creds
    )
    messages: list[str] = []

    result = sheets_mod.load_credentials(settings, notify=messages.append)

    assert result is creds
    assert creds.refreshed
    assert settings.token_path.read_text(encoding="utf-8") == '{"token": "fake"}'
    assert any("Saving credential file" in m for m in messages)


def test_missing_token_runs_browser_flow(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    settings.credentials_path.write_text("{}", encoding="utf-8")
    creds = _FakeCreds()
    seen: dict[str, object] = {}

    class _FakeFlow:
        def run_local_server(self, port: int) -> _FakeCreds:
            seen["port"] = port
            return creds

    def _from_secrets(path: str, scopes: list[str]) -> _FakeFlow:
        seen["path"] = path
        seen["scopes"] = scopes
        return _FakeFlow()

    monkeypatch.setattr(sheets_mod.InstalledAppFlow, "from_client_secrets_file", _from_secrets)

    assert sheets_mod.load_credentials(settings) is creds
    assert seen["path"] == str(settings.credentials_path)
    assert seen["scopes"] == ["https://www.googleapis.com/auth/spreadsheets.readonly"]
    assert seen["port"] == 0
    mode = stat.S_IMODE(settings.token_path.stat().st_mode)
    assert mode & 0o077 == 0


def test_missing_client_secrets_raises_sheet_error(tmp_path: Path) -> None:
    with pytest.raises(SheetError, match="client secret"):
        sheets_mod.load_credentials(_settings(tmp_path))


def test_refresh_failure_raises_sheet_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    settings = _settings(tmp_path)
    settings.token_path.write_text("{}", encoding="utf-8")

    class _BrokenCreds(_FakeCreds):
        def refresh(self, request: object) -> None:
            raise RefreshError("invalid_grant")

    creds = _BrokenCreds(valid=False, expired=True, refresh_token="r")
    monkeypatch.setattr(
        sheets_mod.Credentials, "from_authorized_user_file", lambda path, scopes: creds
    )

    with pytest.raises(SheetError, match="invalid_grant"):
        sheets_mod.load_credentials(settings)


def test_fetch_grid_reads_configured_range(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    settings = _settings(tmp_path)
    calls: list[dict[str, str]] = []
    result = {"values": [["Date", "Distance Planned"], ["01/15", "5.5"], ["01/16"]]}

    def _fake_build(service: str, version: str, **kwargs: object) -> _FakeRequest:
        assert (service, version) == ("sheets", "v4")
        return _FakeRequest(result, calls)

    monkeypatch.setattr(sheets_mod, "build", _fake_build)
    monkeypatch.setattr(sheets_mod, "load_credentials", lambda settings, notify: object())

    grid = sheets_mod.fetch_grid(settings)

    assert calls == [{"spreadsheetId": "sheet-123", "range": "Main"}]
    assert grid.header == ("Date", "Distance Planned")
    assert grid.rows == (("01/15", "5.5"), ("01/16",))


def test_fetch_values_without_values_key_is_empty(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr(sheets_mod, "build", lambda *a, **k: _FakeRequest({}, []))

    assert sheets_mod.fetch_values(_settings(tmp_path), object()) == []
