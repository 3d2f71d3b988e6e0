import pytest

import torii.db.client as db_client
from torii.db.client import DatabaseClient


@pytest.fixture
def db_client_with_fake_pool(fake_pool, fake_conn, monkeypatch):
    def pool_factory(conninfo, min_size, max_size, kwargs):
        assert conninfo == "postgresql://example"
        assert min_size == 1
        assert max_size == 2
        assert kwargs == {}
        return fake_pool

    monkeypatch.setattr(db_client, "ConnectionPool", pool_factory)
    fake_conn.rows = [{"value": 1}]
    client = DatabaseClient("postgresql://example", max_size=2)
    return client, fake_pool, fake_conn


def test_connection_uses_pool(db_client_with_fake_pool):
    client, fake_pool, fake_conn = db_client_with_fake_pool

    with client.connection() as conn:
        assert conn is fake_conn

    assert fake_pool.request_count == 1


def test_transaction_wraps_connection(db_client_with_fake_pool):
    client, _, fake_conn = db_client_with_fake_pool

    with client.transaction() as conn:
        assert conn is fake_conn
        assert fake_conn.last_transaction.entered

    assert fake_conn.last_transaction.exited


def test_execute_runs_statement_in_transaction(db_client_with_fake_pool):
    client, _, fake_conn = db_client_with_fake_pool

    client.execute("DELETE FROM experiments WHERE id = %(id)s", {"id": 10})

    cursor = fake_conn.cursors[-1]
    assert cursor.executed == [("execute", "DELETE FROM experiments WHERE id = %(id)s", {"id": 10})]
    assert fake_conn.last_transaction.exited


def test_fetch_all_returns_rows(db_client_with_fake_pool):
    client, _, _ = db_client_with_fake_pool

    assert client.fetch_all("SELECT 1") == [{"value": 1}]


def test_fetch_one_commits_through_transaction(db_client_with_fake_pool):
    client, _, fake_conn = db_client_with_fake_pool

    row = client.fetch_one("INSERT INTO t DEFAULT VALUES RETURNING 1")

    assert row == {"value": 1}
    assert fake_conn.last_transaction is not None
    assert fake_conn.last_transaction.exited


def test_close_shuts_pool(db_client_with_fake_pool):
    client, fake_pool, _ = db_client_with_fake_pool

    with client:
        pass

    assert fake_pool.closed


def test_invalid_pool_sizes_raise():
    with pytest.raises(ValueError):
        DatabaseClient("postgresql://example", min_size=0)
    with pytest.raises(ValueError):
        DatabaseClient("postgresql://example", min_size=3, max_size=2)
