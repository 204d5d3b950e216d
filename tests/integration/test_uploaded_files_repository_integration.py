from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from studyaid.analysis.models import AnalysisResult, Quiz, QuizQuestion, StudyGuide
from studyaid.database.repositories.uploaded_files_repository import UploadedFilesRepository
from studyaid.processing.exceptions import UploadedFileNotFoundError
from studyaid.processing.models import ProcessedFile


def _fetch_upload(db_conn: psycopg.Connection[Any], file_id: int) -> dict[str, Any]:
    with db_conn.cursor(row_factory=dict_row) as cur:
        cur.execute("SELECT * FROM file_uploads WHERE id = %s", (file_id,))
        row = cur.fetchone()
    assert row is not None
    return row


@pytest.mark.integration
class TestUploadedFilesRepositoryIntegration:
    def test_find_by_id(self, seed_file: Any, test_user_id: int) -> None:
        file_id = seed_file("notes.pdf", "pdf", 2048)

        uploaded = UploadedFilesRepository().find_by_id(file_id)

        assert uploaded.id == file_id
        assert uploaded.user_id == test_user_id
        assert uploaded.file_name == "notes.pdf"
        assert uploaded.file_size_bytes == 2048

    def test_find_missing_raises(self, integration_pool: None) -> None:
        with pytest.raises(UploadedFileNotFoundError):
            UploadedFilesRepository().find_by_id(-1)

    def test_save_processed_file_and_read_text(
        self,
        seed_file: Any,
        db_conn: psycopg.Connection[Any],
    ) -> None:
        repo = UploadedFilesRepository()
        file_id = seed_file("notes.pdf", "pdf")
        processed = ProcessedFile.completed(
            repo.find_by_id(file_id),
            text="Cells divide.",
            images=[],
            metadata={"page_count": 1},
        )

        repo.save_processed_file(processed)

        row = _fetch_upload(db_conn, file_id)
        assert row["processing_status"] == "completed"
        assert row["is_processed"] is True
        assert row["file_metadata"] == {"page_count": 1}
        assert row["processed_at"] is not None
        assert repo.get_extracted_text(file_id) == "Cells divide."

    def test_auto_detection_keeps_previous_values(
        self,
        seed_file: Any,
        db_conn: psycopg.Connection[Any],
    ) -> None:
        repo = UploadedFilesRepository()
        file_id = seed_file("notes.pdf", "pdf")

        repo.update_auto_detection(file_id, "Biology", "Cells")
        repo.update_auto_detection(file_id, None, "Mitosis")

        row = _fetch_upload(db_conn, file_id)
        assert row["auto_detected_subject"] == "Biology"
        assert row["auto_detected_topic"] == "Mitosis"

    def test_saves_generated_material(
        self,
        seed_file: Any,
        db_conn: psycopg.Connection[Any],
        test_user_id: int,
    ) -> None:
        repo = UploadedFilesRepository()
        file_id = seed_file("notes.pdf", "pdf")

        repo.save_analysis_result(AnalysisResult(file_id=file_id, user_id=test_user_id, subject="Biology"))
        repo.save_study_guide(test_user_id, StudyGuide(title="Cells", content="...", source_file_ids=[file_id]))
        repo.save_quiz(
            test_user_id,
            Quiz(title="Cell Quiz", questions=[QuizQuestion(question="Q?", options=["a", "b"], correct_index=1)]),
        )

        with db_conn.cursor() as cur:
            cur.execute("SELECT subject FROM file_analyses WHERE file_upload_id = %s", (file_id,))
            assert cur.fetchone() == ("Biology",)
            cur.execute("SELECT source_file_ids FROM study_guides WHERE user_id = %s", (test_user_id,))
            assert cur.fetchone() == ([file_id],)
            cur.execute("SELECT questions FROM quizzes WHERE user_id = %s", (test_user_id,))
            row = cur.fetchone()
        assert row is not None
        assert row[0][0]["correct_index"] == 1
