from dataclasses import asdict

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from studyaid.analysis.models import AnalysisResult, Quiz, StudyGuide
from studyaid.database.connection import get_connection
from studyaid.processing.exceptions import UploadedFileNotFoundError
from studyaid.processing.models import ProcessedFile, ProcessingStatus, UploadedFile


class UploadedFilesRepository:
    """Database operations for uploaded files and the material generated from them."""

    def find_by_id(self, file_id: int) -> UploadedFile:
        """Find an uploaded file by ID.

        Raises:
            UploadedFileNotFoundError: if no file with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, user_id, file_name, file_type, file_path, file_size
                    FROM file_uploads
                    WHERE id = %s
                    """,
                    (file_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise UploadedFileNotFoundError(f"Uploaded file {file_id} not found")

        return UploadedFile(
            id=row["id"],
            user_id=row["user_id"],
            file_name=row["file_name"],
            file_type=row["file_type"],
            file_path=row["file_path"],
            file_size_bytes=row["file_size"],
        )

    def save_processed_file(self, processed: ProcessedFile) -> None:
        """Persist the outcome of an extraction attempt.

        Raises:
            UploadedFileNotFoundError: if no file with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE file_uploads
                    SET processing_status = %s,
                        is_processed = %s,
                        extracted_content = %s,
                        extracted_images = %s,
                        file_metadata = %s,
                        processing_error = %s,
                        processed_at = %s
                    WHERE id = %s
                    """,
                    (
                        str(processed.status),
                        processed.status is ProcessingStatus.COMPLETED,
                        processed.extracted_text,
                        Jsonb(processed.extracted_images),
                        Jsonb(processed.metadata),
                        processed.error_message,
                        processed.processed_at,
                        processed.file_id,
                    ),
                )
                if cur.rowcount == 0:
                    raise UploadedFileNotFoundError(f"Uploaded file {processed.file_id} not found")
            conn.commit()

    def get_extracted_text(self, file_id: int) -> str:
        """Return the stored extracted text, or an empty string when there is none.

        Raises:
            UploadedFileNotFoundError: if no file with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT extracted_content FROM file_uploads WHERE id = %s",
                    (file_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise UploadedFileNotFoundError(f"Uploaded file {file_id} not found")
        return row[0] or ""

    def save_analysis_result(self, result: AnalysisResult) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO file_analyses (
                    file_upload_id, user_id, analysis_type, subject, topic,
                    key_points, summary, difficulty, recommendations, parse_source
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    result.file_id,
                    result.user_id,
                    result.analysis_type,
                    result.subject,
                    result.topic,
                    Jsonb(result.key_points),
                    result.summary,
                    result.difficulty,
                    Jsonb(result.recommendations),
                    str(result.parse_source),
                ),
            )
            conn.commit()

    def update_auto_detection(self, file_id: int, subject: str | None, topic: str | None) -> None:
        """Store the detected subject/topic, keeping earlier values when nothing was detected."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE file_uploads
                SET auto_detected_subject = COALESCE(%s, auto_detected_subject),
                    auto_detected_topic = COALESCE(%s, auto_detected_topic)
                WHERE id = %s
                """,
                (subject, topic, file_id),
            )
            conn.commit()

    def save_study_guide(self, user_id: int, guide: StudyGuide) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO study_guides (
                    user_id, title, content, key_points, summary,
                    subject, level, source_file_ids
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    user_id,
                    guide.title,
                    guide.content,
                    Jsonb(guide.key_points),
                    guide.summary,
                    guide.subject,
                    guide.level,
                    Jsonb(guide.source_file_ids),
                ),
            )
            conn.commit()

    def save_quiz(self, user_id: int, quiz: Quiz) -> None:
        questions = [asdict(question) for question in quiz.questions]
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO quizzes (user_id, title, questions, subject, level, source_file_ids)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    user_id,
                    quiz.title,
                    Jsonb(questions),
                    quiz.subject,
                    quiz.level,
                    Jsonb(quiz.source_file_ids),
                ),
            )
            conn.commit()
