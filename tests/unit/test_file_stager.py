from __future__ import annotations

from pathlib import Path

import pytest

from careerdesk.config import Settings
from careerdesk.core.errors import ValidationError
from careerdesk.core.files import LOGO_NAMESPACE, RESUME_NAMESPACE, FileStager, safe_filename


@pytest.fixture
def stager(tmp_path: Path) -> FileStager:
    return FileStager(Settings(upload_dir=tmp_path, upload_max_bytes=16))


def test_stage_writes_under_namespace(stager: FileStager) -> None:
    ref = stager.stage(LOGO_NAMESPACE, "My Logo.PNG", b"png-bytes")
    assert ref.startswith("/uploads/company_logos/")
    assert ref.endswith("-My_Logo.PNG")
    assert stager.resolve(ref).read_bytes() == b"png-bytes"


@pytest.mark.parametrize(
    ("namespace", "filename", "content"),
    [
        (RESUME_NAMESPACE, "cv.docx", b"x"),
        (LOGO_NAMESPACE, "logo.png", b""),
        (LOGO_NAMESPACE, "logo.png", b"x" * 17),
    ],
)
def test_stage_rejects_bad_uploads(stager: FileStager, namespace: str, filename: str, content: bytes) -> None:
    with pytest.raises(ValidationError):
        stager.stage(namespace, filename, content)


def test_release_removes_file_once(stager: FileStager) -> None:
    ref = stager.stage(RESUME_NAMESPACE, "cv.pdf", b"%PDF")
    assert stager.release(ref) is True
    assert stager.release(ref) is False


def test_release_never_touches_default_logo_or_foreign_paths(stager: FileStager) -> None:
    assert stager.release(stager.settings.default_logo_path) is False
    assert stager.release("/uploads/../../etc/passwd") is False
    assert stager.release("/somewhere/else.png") is False
    assert stager.release(None) is False


def test_safe_filename_strips_path_and_symbols() -> None:
    assert safe_filename("../../evil name$.pdf") == "evil_name.pdf"
    assert safe_filename("$$$") == "upload"
