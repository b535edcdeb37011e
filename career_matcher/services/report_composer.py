"""HTML composition for the analysis report and the improved CV templates."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from career_matcher.models import AnalysisResult, ImprovedCV
from career_matcher.utils.text import (
    format_education_line,
    parse_contact_info,
    split_education_entries,
)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

CV_TEMPLATES = {
    1: "cv_template1.html",
    2: "cv_template2.html",
}

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_analysis_report(analysis: AnalysisResult, generated_on: Optional[date] = None) -> str:
    template = _environment.get_template("analysis_report.html")
    stamp = (generated_on or date.today()).strftime("%B %d, %Y")
    return template.render(analysis=analysis, generated_on=stamp)


def render_cv_template1(cv: ImprovedCV) -> str:
    """Single-column layout."""
    template = _environment.get_template(CV_TEMPLATES[1])
    return template.render(cv=cv, education_entries=split_education_entries(cv.education))


def render_cv_template2(cv: ImprovedCV) -> str:
    """Two-column layout with a dark sidebar for contact details and skills."""
    template = _environment.get_template(CV_TEMPLATES[2])
    education_lines = [
        line
        for line in (format_education_line(entry) for entry in split_education_entries(cv.education))
        if line
    ]
    return template.render(
        cv=cv,
        contact=parse_contact_info(cv.contact_info),
        education_lines=education_lines,
    )


def render_cv(cv: ImprovedCV, template: int = 1) -> str:
    if template == 2:
        return render_cv_template2(cv)
    return render_cv_template1(cv)
