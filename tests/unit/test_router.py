from unittest.mock import MagicMock

import pytest

from studyaid.extraction.router import (
    ExtractorHandle,
    ExtractorKind,
    FormatRouter,
    Unsupported,
    classify,
    normalize_file_type,
)


def _make_router() -> tuple[FormatRouter, dict[ExtractorKind, MagicMock]]:
    extractors = {kind: MagicMock(name=str(kind)) for kind in ExtractorKind}
    return FormatRouter(extractors), extractors


class TestNormalizeFileType:
    @pytest.mark.parametrize(
        "declared",
        ["pdf", ".pdf", ".PDF", "notes.pdf", "application/pdf", "  application/PDF ; charset=binary "],
    )
    def test_variants_normalize_to_extension(self, declared: str) -> None:
        assert normalize_file_type(declared) == "pdf"

    def test_empty_and_none(self) -> None:
        assert normalize_file_type("") == ""
        assert normalize_file_type(None) == ""

    def test_unknown_mime_type_returned_unchanged(self) -> None:
        assert normalize_file_type("application/x-unknown") == "application/x-unknown"

    def test_word_mime_type(self) -> None:
        mime = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        assert normalize_file_type(mime) == "docx"


class TestClassify:
    def test_document(self) -> None:
        assert classify("pdf") is ExtractorKind.DOCUMENT

    def test_word_processor(self) -> None:
        assert classify("report.docx") is ExtractorKind.WORD_PROCESSOR
        assert classify("doc") is ExtractorKind.WORD_PROCESSOR

    def test_image(self) -> None:
        assert classify("image/png") is ExtractorKind.IMAGE
        assert classify("scan.JPEG") is ExtractorKind.IMAGE

    def test_media(self) -> None:
        assert classify("lecture.mp3") is ExtractorKind.MEDIA
        assert classify("video/mp4") is ExtractorKind.MEDIA

    def test_plain_text(self) -> None:
        assert classify("notes.md") is ExtractorKind.PLAIN_TEXT

    def test_unknown(self) -> None:
        assert classify("xyz") is None


class TestFormatRouter:
    def test_routes_to_matching_extractor(self) -> None:
        router, extractors = _make_router()

        route = router.route("application/pdf")

        assert isinstance(route, ExtractorHandle)
        assert route.kind is ExtractorKind.DOCUMENT
        assert route.extractor is extractors[ExtractorKind.DOCUMENT]
        assert route.file_type == "pdf"

    def test_unknown_type_is_unsupported(self) -> None:
        router, _extractors = _make_router()

        route = router.route(".xyz")

        assert route == Unsupported(file_type="xyz")

    def test_missing_extractor_is_unsupported(self) -> None:
        router = FormatRouter({ExtractorKind.DOCUMENT: MagicMock()})

        assert isinstance(router.route("png"), Unsupported)

    def test_routing_does_not_touch_extractors(self) -> None:
        router, extractors = _make_router()

        router.route("pdf")
        router.route("xyz")

        for extractor in extractors.values():
            assert extractor.method_calls == []

    def test_supports(self) -> None:
        router, _extractors = _make_router()

        assert router.supports("notes.txt") is True
        assert router.supports("archive.zip") is False
