import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from app.core.config import Settings
from app.database import create_db_and_tables
from app.main import create_app
from app.repositories import JsonRepository, SqlRepository
from app.services.sheets_mirror import SheetsMirror


class RecordingMirror:
    """Stands in for SheetsMirror and remembers every write."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def record(*args):
            self.calls.append((name, args))
        return record


class FailingMirror:
    def __getattr__(self, name):
        def fail(*args):
            raise RuntimeError("spreadsheet service is down")
        return fail


_RANGE = re.compile(r"^(?P<tab>[^!]+)!A(?P<start>\d*):[A-Z](?P<end>\d*)$")


class FakeRequest:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    def execute(self):
        if self.error is not None:
            raise self.error
        return self.result


class FakeSheetsService:
    """
    In-memory stand-in for the discovery client's ``spreadsheets().values()``
    resource. ``tabs`` maps a tab name to its rows as stored; reads drop
    trailing blank cells the way the real API does.
    """

    def __init__(self, tabs=None, error=None):
        self.tabs = tabs if tabs is not None else {}
        self.error = error
        self.calls = []
        self.closed = False

    def spreadsheets(self):
        return self

    def values(self):
        return self

    def close(self):
        self.closed = True

    def _locate(self, range_):
        match = _RANGE.match(range_)
        start = int(match["start"]) if match["start"] else 1
        end = int(match["end"]) if match["end"] else None
        return self.tabs.setdefault(match["tab"], []), start, end

    def _request(self, result=None):
        return FakeRequest(result, self.error)

    def _write(self, range_, values):
        rows, start, _ = self._locate(range_)
        while len(rows) < start - 1 + len(values):
            rows.append([])
        for offset, row in enumerate(values):
            rows[start - 1 + offset] = list(row)

    @staticmethod
    def _trim(rows):
        while rows and not rows[-1]:
            rows.pop()

    def get(self, spreadsheetId, range):
        self.calls.append(("get", range))
        rows, _, _ = self._locate(range)
        values = []
        for row in rows:
            row = list(row)
            while row and row[-1] == "":
                row.pop()
            values.append(row)
        return self._request({"values": values} if values else {})

    def append(self, spreadsheetId, range, valueInputOption, insertDataOption, body):
        self.calls.append(("append", range))
        if self.error is None:
            rows, _, _ = self._locate(range)
            self._trim(rows)
            rows.extend(list(row) for row in body["values"])
        return self._request({})

    def update(self, spreadsheetId, range, valueInputOption, body):
        self.calls.append(("update", range))
        if self.error is None:
            self._write(range, body["values"])
        return self._request({})

    def batchUpdate(self, spreadsheetId, body):
        self.calls.append(("batchUpdate", [item["range"] for item in body["data"]]))
        if self.error is None:
            for item in body["data"]:
                self._write(item["range"], item["values"])
        return self._request({})

    def clear(self, spreadsheetId, range, body):
        self.calls.append(("clear", range))
        if self.error is None:
            rows, start, end = self._locate(range)
            for index in _row_indexes(start, end, len(rows)):
                rows[index] = []
            self._trim(rows)
        return self._request({})


def _row_indexes(start, end, length):
    # "range" is shadowed inside the fake's methods by the API keyword
    return range(start - 1, min(end or length, length))


@pytest.fixture
def sheets_service():
    return FakeSheetsService()


@pytest.fixture
def sheets_mirror(sheets_service):
    return SheetsMirror("sheet-id", sheets_service)


@pytest.fixture
def settings():
    return Settings(
        environment="development",
        secret_key="test-secret",
        openrouter_api_key="sk-or-test-secret-key",
        enable_debug_routes=True,
    )


@pytest.fixture
def json_repo():
    return JsonRepository()


@pytest.fixture
def sql_repo():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    return SqlRepository(engine)


@pytest.fixture(params=["json", "sql"])
def repo(request):
    return request.getfixturevalue(f"{request.param}_repo")


@pytest.fixture
def mirror():
    return RecordingMirror()


@pytest.fixture
def api(settings, sql_repo, mirror):
    application = create_app(settings, repository=sql_repo)
    application.state.mirror = mirror
    return application


@pytest.fixture
def client(api):
    return TestClient(api)


@pytest.fixture
def user_client(client):
    """Client with a registered, logged-in user."""
    response = client.post(
        "/auth/register",
        json={"email": "asha@example.com", "password": "secret123", "name": "Asha"},
    )
    assert response.status_code == 200
    client.user_id = response.json()["user"]["id"]
    return client
