"""Tests for altinn_sync.naming."""

from __future__ import annotations

from datetime import datetime

from altinn_sync.naming import attachment_filename

CREATED = datetime(2024, 1, 2, 9, 0, 0)
PREFIX = "2024-01-02T09:00:00"


class TestAttachmentFilename:
    def test_pdf_kept_as_is(self):
        assert attachment_filename(CREATED, "doc.pdf") == f"{PREFIX}-doc.pdf"

    def test_xml_kept_as_is(self):
        assert attachment_filename(CREATED, "doc.xml") == f"{PREFIX}-doc.xml"

    def test_legacy_prefix_gets_xml(self):
        assert attachment_filename(CREATED, "Etsomething") == f"{PREFIX}-Etsomething.xml"

    def test_anything_else_gets_pdf(self):
        assert attachment_filename(CREATED, "other") == f"{PREFIX}-other.pdf"

    def test_prefix_is_case_sensitive(self):
        assert attachment_filename(CREATED, "etsomething") == f"{PREFIX}-etsomething.pdf"

    def test_extension_check_wins_over_prefix(self):
        assert attachment_filename(CREATED, "Et.pdf") == f"{PREFIX}-Et.pdf"

    def test_deterministic(self):
        assert attachment_filename(CREATED, "Kontoutskrift") == attachment_filename(
            CREATED, "Kontoutskrift"
        )

    def test_names_sort_by_creation_time(self):
        earlier = attachment_filename(datetime(2024, 1, 2, 9, 0, 0), "b.pdf")
        later = attachment_filename(datetime(2024, 1, 2, 9, 30, 0), "a.pdf")
        assert sorted([later, earlier]) == [earlier, later]

    def test_milliseconds_kept_short(self):
        created = datetime(2018, 3, 5, 9, 48, 31, 597000)
        assert attachment_filename(created, "doc.pdf") == "2018-03-05T09:48:31.597-doc.pdf"

    def test_sub_millisecond_precision(self):
        created = datetime(2018, 3, 5, 9, 48, 31, 597123)
        assert attachment_filename(created, "doc.pdf") == "2018-03-05T09:48:31.597123-doc.pdf"

    def test_offset_dropped(self):
        created = datetime.fromisoformat("2018-03-05T09:48:31Z")
        assert attachment_filename(created, "doc.pdf") == "2018-03-05T09:48:31-doc.pdf"

    def test_path_separators_replaced(self):
        assert attachment_filename(CREATED, "2024/01/doc.pdf") == f"{PREFIX}-2024_01_doc.pdf"
        assert attachment_filename(CREATED, "..\\Etfile") == f"{PREFIX}-.._Etfile.xml"
