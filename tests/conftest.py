"""Shared pytest fixtures: settings, fake collaborators and sample documents."""

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
import stripe
from docx import Document
from fpdf import FPDF

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_matcher.config import Settings  # noqa: E402
from career_matcher.container import ServiceContainer  # noqa: E402
from career_matcher.main import create_app  # noqa: E402
from career_matcher.models import AnalysisResult, ImprovedCV  # noqa: E402
from career_matcher.services.cv_workflow import CVWorkflow  # noqa: E402
from career_matcher.services.payment_service import PaymentService  # noqa: E402

FIXED_CLOCK = 1700000000.0
WEBHOOK_SECRET = "whsec_test_secret"


def sample_analysis() -> AnalysisResult:
    return AnalysisResult(
        match_score=72,
        summary="Solid backend profile. Cloud experience is thin for this role.",
        missing_keywords=["Kubernetes", "Terraform", "gRPC"],
        critical_gaps=["No production Kubernetes experience"],
        actionable_fixes=["Quantify API latency improvements"],
        interview_prep_questions=["How would you design a rate limiter?"],
    )


def sample_improved_cv() -> ImprovedCV:
    return ImprovedCV(
        full_name="Ada Lovelace",
        contact_info="ada@example.com | +44 20 7946 0958 | London, UK | linkedin.com/in/ada",
        title="Backend Engineer",
        professional_summary="Backend engineer with eight years of Python and Go.",
        technical_skills_list=["Python", "Go", "PostgreSQL", "Kubernetes"],
        experience=[
            {
                "company": "Analytical Engines Ltd",
                "role": "Senior Backend Engineer",
                "dates": "2019 - Present",
                "bullet_points": ["Cut p99 latency by 40% with connection pooling"],
            }
        ],
        education="BSc Mathematics | 2010 - 2013 | University of London",
        languages=["English: Native"],
    )


class FakeGateway:
    """Stands in for OpenAIGateway and records what it was asked."""

    def __init__(self) -> None:
        self.analyze_calls = []
        self.improve_calls = []

    def analyze_cv(self, resume_text, context):
        self.analyze_calls.append((resume_text, context))
        return sample_analysis()

    def improve_cv(self, resume_text, context, analysis):
        self.improve_calls.append((resume_text, context, analysis))
        return sample_improved_cv()


class FakeRenderer:
    def __init__(self) -> None:
        self.rendered = []

    def generate_analysis_report(self, analysis):
        self.rendered.append("report")
        return b"%PDF-1.4 analysis report"

    def generate_improved_cv(self, cv, template=1):
        self.rendered.append(f"template{template}")
        return b"%PDF-1.4 improved cv template " + str(template).encode("ascii")


class FakeCheckoutSessions:
    def __init__(self) -> None:
        self.created = []
        self.retrieved = []
        self.payment_status = "unpaid"

    def create(self, params=None, options=None):
        self.created.append(params)
        return stripe.checkout.Session.construct_from(
            {
                "id": "cs_test_123",
                "object": "checkout.session",
                "url": "https://checkout.stripe.test/c/cs_test_123",
                "client_secret": "cs_test_123_secret",
                "ui_mode": params.get("ui_mode"),
            },
            "sk_test_dummy",
        )

    def retrieve(self, session_id, params=None, options=None):
        self.retrieved.append(session_id)
        return stripe.checkout.Session.construct_from(
            {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": self.payment_status,
                "metadata": {"serviceOption": "analysis", "paymentMode": "test"},
            },
            "sk_test_dummy",
        )


class FakeStripeClient:
    """Checkout calls are recorded; webhook verification uses the real SDK."""

    def __init__(self) -> None:
        self.sessions = FakeCheckoutSessions()
        self.checkout = SimpleNamespace(sessions=self.sessions)
        self._real = stripe.StripeClient("sk_test_dummy")

    def construct_event(self, payload, sig_header, secret):
        return self._real.construct_event(payload, sig_header, secret)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="sk-test",
        stripe_secret_key="sk_test_dummy",
        stripe_publishable_key="pk_test_dummy",
        stripe_webhook_secret=WEBHOOK_SECRET,
        valid_coupon_codes="SAVE10, welcome",
        upload_folder=tmp_path / "uploads",
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def stripe_client() -> FakeStripeClient:
    return FakeStripeClient()


@pytest.fixture
def services(settings, gateway, renderer, stripe_client) -> ServiceContainer:
    payments = PaymentService(
        stripe_client,
        prices=settings.prices,
        payment_mode=settings.payment_mode,
        webhook_secret=settings.stripe_webhook_secret,
    )
    workflow = CVWorkflow(gateway, renderer, clock=lambda: FIXED_CLOCK)
    return ServiceContainer(workflow=workflow, payments=payments)


@pytest.fixture
def app(settings, services):
    flask_app = create_app(settings, services)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


def build_pdf(pages) -> bytes:
    """Render one Helvetica line per page with fpdf2."""
    pdf = FPDF()
    pdf.set_font("Helvetica", size=12)
    for text in pages:
        pdf.add_page()
        pdf.cell(0, 10, text)
    return bytes(pdf.output())


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf(
        [
            "Ada Lovelace - Backend Engineer - Python, Go, PostgreSQL",
            "Experience: Analytical Engines Ltd 2019 - Present",
        ]
    )


@pytest.fixture
def pdf_file(tmp_path: Path, pdf_bytes: bytes) -> Path:
    path = tmp_path / "resume.pdf"
    path.write_bytes(pdf_bytes)
    return path


@pytest.fixture
def docx_file(tmp_path: Path) -> Path:
    document = Document()
    document.add_paragraph("Ada Lovelace")
    document.add_paragraph("Backend Engineer with Python and Go")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Skills"
    table.rows[0].cells[1].text = "Kubernetes"
    path = tmp_path / "resume.docx"
    document.save(str(path))
    return path


@pytest.fixture
def analysis() -> AnalysisResult:
    return sample_analysis()


@pytest.fixture
def improved_cv() -> ImprovedCV:
    return sample_improved_cv()
