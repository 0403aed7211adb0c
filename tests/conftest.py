"""
Pytest configuration and shared fixtures for Runway tests.
"""

from pathlib import Path

import pytest


@pytest.fixture
def users_sql():
    """DDL of a users table with an integer primary key."""
    return """
    -- Application users
    CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        email VARCHAR(255) NOT NULL UNIQUE,
        name TEXT
    );
    """


@pytest.fixture
def orders_sql():
    """DDL of an orders table referencing users."""
    return """
    /* Orders placed by users */
    CREATE TABLE orders (
        id INTEGER PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users(id),
        total NUMERIC(10,2) DEFAULT 0
    );
    """


@pytest.fixture
def status_enum_sql():
    """DDL of an enumerated type."""
    return "CREATE TYPE status AS ENUM ('active','inactive');"


@pytest.fixture
def shop_sql():
    """A single-file schema exercising every declaration kind."""
    return """
    CREATE TYPE order_status AS ENUM ('pending', 'shipped', 'delivered');

    CREATE SEQUENCE invoice_numbers START WITH 1000 INCREMENT BY 10;

    CREATE TABLE public.customers (
        id INTEGER PRIMARY KEY,
        email VARCHAR(255) NOT NULL,
        UNIQUE (email)
    );

    CREATE TABLE orders (
        id INTEGER NOT NULL,
        customer_id INTEGER NOT NULL,
        status order_status DEFAULT 'pending',
        PRIMARY KEY (id)
    );

    CREATE TABLE invoices (
        id INTEGER PRIMARY KEY,
        order_id INTEGER NOT NULL,
        CONSTRAINT fk_invoices_order FOREIGN KEY (order_id) REFERENCES orders (id)
    );

    CREATE INDEX idx_orders_customer ON orders (customer_id);

    ALTER TABLE orders ADD CONSTRAINT fk_orders_customer FOREIGN KEY (customer_id) REFERENCES customers (id);
    """


@pytest.fixture
def schema_folder(tmp_path: Path, users_sql, orders_sql, status_enum_sql) -> Path:
    """A schema folder with nested files."""
    (tmp_path / "users.sql").write_text(users_sql, encoding="utf-8")
    (tmp_path / "orders.sql").write_text(orders_sql, encoding="utf-8")
    types_dir = tmp_path / "types"
    types_dir.mkdir()
    (types_dir / "status.sql").write_text(status_enum_sql, encoding="utf-8")
    (tmp_path / "README.md").write_text("not a schema file", encoding="utf-8")
    return tmp_path


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers."""
    for item in items:
        # End-to-end tests over real folders and the CLI
        if "/cli/" in str(item.fspath) or "test_orchestrator" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)

        # Add slow marker to performance tests
        if "performance" in item.name or "large" in item.name:
            item.add_marker(pytest.mark.slow)
