"""Wrapper utilities around the OpenAI client."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from openai import OpenAI

from career_matcher.errors import LLMResponseError, UpstreamError
from career_matcher.models import AnalysisResult, ImprovedCV, parse_model_payload

_LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o"

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert Senior Technical Recruiter and ATS Specialist. "
    "You analyze resumes specifically for high-tech roles."
)

ANALYSIS_USER_PROMPT = """Here is a candidate's Resume text: {resume_text}

Here is the target Job Description (JD): {context}

Analyze the fit between the Resume and the JD. Output a JSON object with the following strict structure:

{{
  "match_score": "(integer 0-100)",
  "summary": "(A 2-sentence summary of the fit)",
  "missing_keywords": ["keyword1", "keyword2", "keyword3", "keyword4", "keyword5"],
  "critical_gaps": [
    "Gap 1: Explanation...",
    "Gap 2: Explanation..."
  ],
  "actionable_fixes": [
    "Fix 1: Change X to Y...",
    "Fix 2: Rewrite section Z..."
  ],
  "interview_prep_questions": [
    "Question 1 (Based on weak points)",
    "Question 2 (Based on JD requirements)"
  ]
}}"""

IMPROVEMENT_SYSTEM_PROMPT = (
    "You are an expert CV writer and career advisor specializing in high-tech roles. "
    "You create professional, ATS-friendly resumes that perfectly match job descriptions "
    "while maintaining authenticity and accuracy. Always output valid JSON."
)

IMPROVEMENT_USER_PROMPT = """Here is the candidate's original Resume text:
{resume_text}

Here is the target Job Description:
{context}

Here is the analysis of gaps and issues:
- Missing Keywords: {missing_keywords}
- Critical Gaps: {critical_gaps}
- Actionable Fixes: {actionable_fixes}

Create an improved CV that:
1. Incorporates ALL missing keywords naturally throughout the document
2. Addresses ALL critical gaps identified
3. Applies ALL actionable fixes
4. Uses action verbs and quantifiable achievements
5. Keeps ALL factual information accurate (dates, company names, job titles)
6. Optimizes content to match the job description requirements

Output the improved CV as a JSON object with this EXACT structure:
{{
  "full_name": "String (extract from original CV)",
  "contact_info": "String (Email | Phone | LinkedIn) - extract from original CV",
  "title": "String (the candidate's headline job title, matching the target role)",
  "professional_summary": "A sharp, 3-sentence technical summary highlighting the stack and experience relevant to the JD. Incorporate missing keywords naturally.",
  "technical_skills_list": ["JavaScript", "Python", "AWS", "React", "Docker"],
  "experience": [
    {{
      "company": "String (from original CV)",
      "role": "String (from original CV)",
      "dates": "String (from original CV)",
      "bullet_points": [
        "Action Verb + Task + Result/Metric + Keyword from JD",
        "Action Verb + Task + Result/Metric"
      ]
    }}
  ],
  "education": "String (from original CV, keep accurate). Separate multiple entries with a newline: 'Degree Name | Dates | University Name\\nNext Degree Name | Dates | University Name'",
  "languages": ["Language: Proficiency (only if stated in the original CV)"]
}}

IMPORTANT FORMATTING RULES:
- Include every experience entry from the original CV, optimized.
- technical_skills_list: one skill per string, no category prefixes. Prioritize skills from the job description and the missing keywords.
- bullet_points: "Action Verb + Task + Result/Metric + Keyword from JD", with strong action verbs and quantifiable metrics.
- Keep all factual information accurate (company names, dates, job titles) and extract contact info from the original CV.
- Output ONLY valid JSON, no additional text."""


def get_openai_client(api_key: Optional[str]) -> OpenAI:
    """Instantiate an OpenAI client using the configured API key."""
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")
    return OpenAI(api_key=api_key)


def create_json_completion(
    client: OpenAI,
    system_prompt: str,
    user_prompt: str,
    *,
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: Optional[int] = None,
) -> Dict[str, Any]:
    """Invoke Chat Completions in JSON mode and decode the reply."""
    options: Dict[str, Any] = {}
    if max_tokens is not None:
        options["max_tokens"] = max_tokens

    completion = client.chat.completions.create(
        model=model or DEFAULT_MODEL,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        response_format={"type": "json_object"},
        temperature=temperature,
        **options,
    )
    content = completion.choices[0].message.content or ""
    return json.loads(content)


def _joined(items: List[str], separator: str) -> str:
    return separator.join(items) if items else "None"


class OpenAIGateway:
    """Analysis and rewrite prompts against one OpenAI client."""

    def __init__(self, client: OpenAI, model: str = DEFAULT_MODEL) -> None:
        self.client = client
        self.model = model

    def analyze_cv(self, resume_text: str, context: str) -> AnalysisResult:
        prompt = ANALYSIS_USER_PROMPT.format(resume_text=resume_text, context=context)
        try:
            payload = create_json_completion(
                self.client, ANALYSIS_SYSTEM_PROMPT, prompt, model=self.model
            )
            return parse_model_payload(AnalysisResult, payload, label="Analysis")
        except LLMResponseError as exc:
            raise LLMResponseError(f"OpenAI API error: {exc.message}") from exc
        except Exception as exc:
            raise UpstreamError(f"OpenAI API error: {exc}") from exc

    def improve_cv(
        self, resume_text: str, context: str, analysis: AnalysisResult
    ) -> ImprovedCV:
        prompt = IMPROVEMENT_USER_PROMPT.format(
            resume_text=resume_text,
            context=context,
            missing_keywords=_joined(analysis.missing_keywords, ", "),
            critical_gaps=_joined(analysis.critical_gaps, "\n"),
            actionable_fixes=_joined(analysis.actionable_fixes, "\n"),
        )
        try:
            payload = create_json_completion(
                self.client,
                IMPROVEMENT_SYSTEM_PROMPT,
                prompt,
                model=self.model,
                max_tokens=4000,
            )
            improved = parse_model_payload(ImprovedCV, payload, label="Improved CV")
        except LLMResponseError as exc:
            raise LLMResponseError(f"OpenAI API error (CV improvement): {exc.message}") from exc
        except Exception as exc:
            raise UpstreamError(f"OpenAI API error (CV improvement): {exc}") from exc

        _LOGGER.info(
            "Improved CV generated with %d experience entries", len(improved.experience)
        )
        return improved
