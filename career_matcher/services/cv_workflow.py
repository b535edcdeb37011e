"""Sequencing of extraction, OpenAI calls, PDF rendering and packaging."""

from __future__ import annotations

import io
import logging
import time
import zipfile
from typing import Callable, List, Optional, Tuple

from career_matcher.errors import ApiError, BadRequestError, LLMResponseError, UpstreamError
from career_matcher.models import AnalysisResult, ImprovedCV, ServiceOption, WorkflowOutput
from career_matcher.services import text_extraction_service
from career_matcher.storage import delete_upload

_LOGGER = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"
ZIP_MIMETYPE = "application/zip"

REPORT_NAME = "CV-Analysis-Report-{ts}.pdf"
CV_TEMPLATE_NAME = "Your-Improved-CV-Template{template}-{ts}.pdf"
ARCHIVE_NAMES = {
    ServiceOption.IMPROVED: "Improved-CV-{ts}.zip",
    ServiceOption.COMPLETE: "CV-Analysis-{ts}.zip",
}


def build_context(role: str, job_description: Optional[str] = None) -> str:
    """Combine the target role and the optional job description into one prompt context."""
    context = f"Target role: {role.strip()}"
    if job_description and job_description.strip():
        context += f"\n\nJob description:\n{job_description.strip()}"
    return context


def _rewrap(exc: Exception, prefix: str) -> ApiError:
    if isinstance(exc, LLMResponseError):
        return LLMResponseError(f"{prefix}: {exc.message}")
    if isinstance(exc, ApiError):
        return UpstreamError(f"{prefix}: {exc.message}", exc.status_code)
    return UpstreamError(f"{prefix}: {exc}")


def package_files(files: List[Tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in files:
            archive.writestr(name, content)
    return buffer.getvalue()


class CVWorkflow:
    """Runs one CV request end to end. Holds no per-request state."""

    def __init__(
        self,
        llm,
        renderer,
        extract_text: Callable[[str, Optional[str]], str] = text_extraction_service.extract_text,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.llm = llm
        self.renderer = renderer
        self.extract_text = extract_text
        self.clock = clock

    def analyze(self, file_path: str, context: str) -> Tuple[AnalysisResult, str]:
        """Extract the CV text and score it. Returns the analysis and the text."""
        try:
            extension = text_extraction_service.get_file_extension(file_path)
            resume_text = self.extract_text(file_path, extension)
            analysis = self.llm.analyze_cv(resume_text, context)
        except BadRequestError:
            raise
        except Exception as exc:
            raise _rewrap(exc, "CV Analysis failed") from exc
        return analysis, resume_text

    def improve(self, resume_text: str, context: str, analysis: AnalysisResult) -> ImprovedCV:
        try:
            return self.llm.improve_cv(resume_text, context, analysis)
        except Exception as exc:
            raise _rewrap(exc, "CV Improvement failed") from exc

    def run(self, file_path: str, context: str, option: ServiceOption) -> WorkflowOutput:
        """Produce the documents for `option`. The upload is always deleted."""
        try:
            _LOGGER.info("Processing CV request (%s)", option.value)
            timestamp = int(self.clock() * 1000)
            analysis, resume_text = self.analyze(file_path, context)

            improved: Optional[ImprovedCV] = None
            if option in (ServiceOption.IMPROVED, ServiceOption.COMPLETE):
                improved = self.improve(resume_text, context, analysis)

            files: List[Tuple[str, bytes]] = []
            if option in (ServiceOption.ANALYSIS, ServiceOption.COMPLETE):
                files.append(
                    (REPORT_NAME.format(ts=timestamp), self.renderer.generate_analysis_report(analysis))
                )

            if improved is not None:
                for template in (1, 2):
                    files.append(
                        (
                            CV_TEMPLATE_NAME.format(template=template, ts=timestamp),
                            self.renderer.generate_improved_cv(improved, template),
                        )
                    )

            if len(files) == 1:
                name, content = files[0]
                output = WorkflowOutput(content=content, mimetype=PDF_MIMETYPE, filename=name)
            else:
                output = WorkflowOutput(
                    content=package_files(files),
                    mimetype=ZIP_MIMETYPE,
                    filename=ARCHIVE_NAMES[option].format(ts=timestamp),
                )

            _LOGGER.info("CV request (%s) produced %s", option.value, output.filename)
            return output
        finally:
            delete_upload(file_path)
