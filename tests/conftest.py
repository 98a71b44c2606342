import io
import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("RESUME_RULES_FILE", None)

import docx  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from resume_matcher.database import Base, get_db  # noqa: E402
from resume_matcher.dependencies import get_analyzer, get_blob_store  # noqa: E402
from resume_matcher.main import app  # noqa: E402
from resume_matcher.services import auth as auth_service  # noqa: E402
from resume_matcher.services.analyzer import AnalyzerResponse, AnalyzerUsage  # noqa: E402
from resume_matcher.services.blob_store import LocalBlobStore  # noqa: E402

MIME_PDF = "application/pdf"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

RESUME_LINES = [
    "Jane Doe",
    "jane.doe@example.com | 555-123-4567 | linkedin.com/in/janedoe",
    "Experience",
    "Software Engineer at Acme Corp, 2019-2024",
    "Built data pipelines in Python and SQL for the analytics group",
    "Education",
    "B.Sc. Computer Science, State University",
    "Skills: Python, FastAPI, PostgreSQL, Docker",
]
RESUME_TEXT = "\n".join(RESUME_LINES)

JOB_DESCRIPTION = (
    "Backend engineer needed to build Python services on FastAPI and PostgreSQL. "
    "Docker and cloud deployment knowledge is a plus."
)

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def build_pdf(lines, pages=1):
    """Minimal single-font PDF with one text line per entry, repeated on every page."""
    stream_lines = ["BT", "/F1 12 Tf", "14 TL", "72 720 Td"]
    for line in lines:
        escaped = line.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        stream_lines.append(f"({escaped}) Tj T*")
    stream_lines.append("ET")
    content = "\n".join(stream_lines).encode("latin-1")

    page_ids = [3 + 2 * i for i in range(pages)]
    font_id = 3 + 2 * pages
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [" + b" ".join(b"%d 0 R" % pid for pid in page_ids) + b"] /Count %d >>" % pages,
    ]
    for pid in page_ids:
        objects.append(
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents %d 0 R "
            b"/Resources << /Font << /F1 %d 0 R >> >> >>" % (pid + 1, font_id)
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream")
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, obj in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + obj + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


def build_docx(lines):
    document = docx.Document()
    for line in lines:
        document.add_paragraph(line)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


class StubAnalyzer:
    """Records calls and returns a canned payload, or raises `error` when set."""

    def __init__(self):
        self.calls = []
        self.error = None
        self.payload = {
            "matchScore": 82,
            "summary": "Strong backend profile with matching Python and FastAPI experience.",
            "strengths": ["Python", "FastAPI", "PostgreSQL"],
            "improvements": ["Mention cloud deployments"],
            "missingSkills": ["Kubernetes"],
        }
        self.usage = AnalyzerUsage(input_tokens=1200, output_tokens=300, estimated_cost=0.0081)

    def analyze(self, resume_text, job_description):
        self.calls.append((resume_text, job_description))
        if self.error is not None:
            raise self.error
        return AnalyzerResponse(payload=dict(self.payload), usage=self.usage, model="stub-model")


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema for each test function."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "uploads"))


@pytest.fixture(scope="function")
def analyzer():
    return StubAnalyzer()


@pytest.fixture(scope="function")
def resume_pdf():
    return build_pdf(RESUME_LINES)


@pytest.fixture(scope="function")
def resume_docx():
    return build_docx(RESUME_LINES)


@pytest.fixture(scope="function")
def user(db_session):
    return auth_service.register_user(
        db_session, email="jane@example.com", password="secret123", first_name="Jane", last_name="Doe"
    )


@pytest.fixture(scope="function")
def other_user(db_session):
    return auth_service.register_user(
        db_session, email="john@example.com", password="secret123", first_name="John", last_name="Roe"
    )


@pytest.fixture(scope="function")
def auth_headers(user):
    return {"Authorization": f"Bearer {auth_service.create_access_token(user.id)}"}


@pytest.fixture(scope="function")
def other_auth_headers(other_user):
    return {"Authorization": f"Bearer {auth_service.create_access_token(other_user.id)}"}


@pytest.fixture(scope="function")
def client(db_session, blob_store, analyzer):
    """TestClient wired to the test session, a temporary blob store and the stub analyzer."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def upload_resume(client, auth_headers, resume_docx):
    """Upload helper returning the raw response."""
    def _upload(data=None, filename="jane_doe.docx", content_type=MIME_DOCX, headers=None):
        return client.post(
            "/api/resume/upload",
            files={"resume": (filename, resume_docx if data is None else data, content_type)},
            headers=auth_headers if headers is None else headers,
        )
    return _upload


@pytest.fixture(scope="function")
def make_pdf():
    return build_pdf


@pytest.fixture(scope="function")
def make_docx():
    return build_docx


@pytest.fixture(scope="function")
def resume_text():
    return RESUME_TEXT


@pytest.fixture(scope="function")
def job_description():
    return JOB_DESCRIPTION
