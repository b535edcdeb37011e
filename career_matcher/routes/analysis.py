"""/api CV endpoints: analysis report, improved CVs and the complete package."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from flask import Blueprint, current_app, request, send_file

from career_matcher.container import get_services
from career_matcher.errors import BadRequestError
from career_matcher.models import ServiceOption
from career_matcher.services.cv_workflow import build_context
from career_matcher.storage import save_upload

bp = Blueprint("analysis", __name__, url_prefix="/api")


def _process(option: ServiceOption):
    """Validate the multipart form, run the workflow and stream back the result."""
    upload = request.files.get("cv")
    if upload is None or not upload.filename:
        raise BadRequestError("CV file is required")

    role = (request.form.get("role") or "").strip()
    if not role:
        raise BadRequestError("Role is required")

    job_description = request.form.get("jobDescription") or ""
    file_path = save_upload(upload, Path(current_app.config["UPLOAD_FOLDER"]))

    current_app.logger.info("Processing CV (%s) for role %r", option.value, role)
    output = get_services().workflow.run(file_path, build_context(role, job_description), option)

    return send_file(
        BytesIO(output.content),
        mimetype=output.mimetype,
        as_attachment=True,
        download_name=output.filename,
    )


@bp.post("/analyze-cv")
def analyze_cv():
    """Return a zip with the analysis report and both improved CV templates."""
    return _process(ServiceOption.COMPLETE)


@bp.post("/analyze-only")
def analyze_only():
    """Return the analysis report PDF."""
    return _process(ServiceOption.ANALYSIS)


@bp.post("/improve-only")
def improve_only():
    """Return a zip with both improved CV templates."""
    return _process(ServiceOption.IMPROVED)

