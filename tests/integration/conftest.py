import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from studyaid.config.settings import Settings
from studyaid.database.connection import apply_schema, close_pool, get_connection, init_pool

TEST_USER_ID = 424242


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "studyaid_test")
    return Settings(
        analysis_provider="example",
        transcription_provider="none",
        job_retry_backoff_seconds=0.0,
        job_poll_interval_seconds=0.05,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[int], None, None]:
    """Collects file_uploads ids; their rows and everything generated for the test user are removed."""
    file_ids: list[int] = []
    yield file_ids
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM study_guides WHERE user_id = %s", (TEST_USER_ID,))
            cur.execute("DELETE FROM quizzes WHERE user_id = %s", (TEST_USER_ID,))
            for file_id in file_ids:
                cur.execute("DELETE FROM file_analyses WHERE file_upload_id = %s", (file_id,))
                cur.execute("DELETE FROM file_uploads WHERE id = %s", (file_id,))
        conn.commit()


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def seed_file(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[int],
) -> Any:
    """Return a helper inserting a file_uploads row; the file itself is not written."""

    def _seed(file_name: str, file_type: str, file_size: int = 1024) -> int:
        with db_conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO file_uploads (user_id, file_name, file_path, file_type, file_size)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING id
                """,
                (TEST_USER_ID, file_name, file_name, file_type, file_size),
            )
            row = cur.fetchone()
            assert row is not None
            file_id = int(row[0])
        db_conn.commit()
        integration_cleanup.append(file_id)
        return file_id

    return _seed


@pytest.fixture
def sample_pdf_on_disk(
    seed_file: Any,
    files_root: Path,
    sample_pdf_bytes: bytes,
) -> tuple[int, Path]:
    (files_root / "notes.pdf").write_bytes(sample_pdf_bytes)
    file_id = seed_file("notes.pdf", "pdf", len(sample_pdf_bytes))
    return file_id, files_root


@pytest.fixture
def test_user_id() -> int:
    return TEST_USER_ID
