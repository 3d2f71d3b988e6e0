"""Shared pytest fixtures for the torii tests.

Provides in-memory providers, fake database plumbing and config objects so
tests never touch the network or a real database.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable, List

import pytest

from torii.config import AppConfig
from torii.vpn.model import AuthDetails, Endpoint
from torii.vpn.provider import Provider


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """Config pointing logs and provider data at a temporary directory."""
    return AppConfig(
        log_directory=tmp_path / "logs",
        log_level="INFO",
        data_directory=tmp_path / "data",
    )


class StaticProvider(Provider):
    """Provider whose endpoints and auth are given up front."""

    def __init__(self, name: str, endpoints: Iterable[Endpoint] = (), auth: AuthDetails = AuthDetails()) -> None:
        super().__init__()
        self._name = name
        self._replace_endpoints(list(endpoints))
        self._auth = auth
        self.bootstrap_calls = 0
        self.bootstrap_result = True

    @property
    def name(self) -> str:
        return self._name

    def bootstrap(self) -> bool:
        self.bootstrap_calls += 1
        return self.bootstrap_result


def make_endpoint(ip: str, cc: str = "", port: str = "1194", transport: str = "tcp") -> Endpoint:
    return Endpoint(
        label=f"gw-{ip}",
        ip=ip,
        port=port,
        proto="openvpn",
        transport=transport,
        obfuscation="none",
        country_code=cc,
    )


RISEUP_AUTH = AuthDetails(ca="base64:Y2E=", cert="base64:Y2VydA==", key="base64:a2V5")


@pytest.fixture
def riseup_endpoints() -> List[Endpoint]:
    return [
        make_endpoint("1.1.1.1", "de"),
        make_endpoint("2.2.2.2", "de"),
        make_endpoint("3.3.3.3", "fr"),
    ]


@pytest.fixture
def riseup(riseup_endpoints: List[Endpoint]) -> StaticProvider:
    return StaticProvider("riseup", riseup_endpoints, RISEUP_AUTH)


class FakeCursor:
    def __init__(self, rows=None) -> None:
        self.executed = []
        self.rows = list(rows or [])

    def execute(self, query, params=None):
        self.executed.append(("execute", query, params))

    def fetchall(self):
        return list(self.rows)

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakeTransaction:
    def __init__(self, conn):
        self.conn = conn
        self.entered = False
        self.exited = False

    def __enter__(self):
        self.entered = True
        return self.conn

    def __exit__(self, exc_type, exc, tb):
        self.exited = True
        return False


class FakeConnection:
    def __init__(self):
        self.cursors = []
        self.rows = []
        self.last_transaction = None

    def cursor(self, *_, **__):
        cursor = FakeCursor(self.rows)
        self.cursors.append(cursor)
        return cursor

    def transaction(self):
        self.last_transaction = FakeTransaction(self)
        return self.last_transaction


class FakePool:
    def __init__(self, conn):
        self.conn = conn
        self.request_count = 0
        self.closed = False

    @contextmanager
    def connection(self):
        self.request_count += 1
        yield self.conn

    def close(self):
        self.closed = True


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def fake_pool(fake_conn: FakeConnection) -> Generator[FakePool, None, None]:
    yield FakePool(fake_conn)
