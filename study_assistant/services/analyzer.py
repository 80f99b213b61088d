"""
Study material analysis with Gemini.

Pipeline: PDF bytes -> leading pages (PyMuPDF) -> sampled excerpt ->
prompt with student context -> Gemini -> parsed AnalysisResult.

A failed Gemini call does not fail the upload: the default
AnalysisResult is substituted and the failure is reported on the
returned AnalysisOutcome so callers can tell rate limiting apart from
other errors.
"""

import asyncio
import logging
from typing import Optional

from google import genai
from google.genai import types
from pydantic import BaseModel, Field

from study_assistant.exceptions import AIServiceError, RateLimitedError
from study_assistant.models.analysis import AnalysisResult
from study_assistant.models.resources import UserProfile
from study_assistant.services.document_loader import MAX_PAGES_TO_ANALYZE, load_pages
from study_assistant.services.response_parser import parse_response
from study_assistant.services.sampler import sample
from study_assistant.utils.retry import MAX_RETRIES, extract_status_code, retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"

ANALYSIS_PROMPT_TEMPLATE = """You are analyzing study material for students.
Based only on the content below:
1. Identify the academic subject (choose only from: Physics, Chemistry, Maths, Biology, Computer Science, Other)
2. Give 5 topic keywords
3. Give a 5-bullet-point revision summary
4. Generate 5 multiple-choice questions with 4 options each and give the correct answer

Return strictly in this format:
Subject:
Topics:
Summary:
- point 1
- point 2
- point 3
- point 4
- point 5

Questions:
1. Question Text
Difficulty: Easy
A) Option A
B) Option B
C) Option C
D) Option D
Answer: A

2. Question Text
Difficulty: Medium
A) Option A
B) Option B
C) Option C
D) Option D
Answer: B

Note: Assign difficulty (Easy, Medium, or Hard) based on complexity.

Study Material (Student: {student_context}):
{excerpt}"""


class AnalysisOutcome(BaseModel):
    """Parsed result plus how it was obtained."""
    result: AnalysisResult = Field(default_factory=AnalysisResult)
    excerpt: str = ""
    error: Optional[str] = None
    rate_limited: bool = False

    @property
    def status(self) -> str:
        """'ok', 'rate_limited' or 'fallback' (default result substituted)."""
        if self.error is None:
            return "ok"
        return "rate_limited" if self.rate_limited else "fallback"


def build_prompt(excerpt: str, profile: Optional[UserProfile] = None) -> str:
    """Embed the excerpt and the student's context into the fixed prompt."""
    if profile is None:
        student_context = UserProfile(user_id="anonymous").prompt_context()
    else:
        student_context = profile.prompt_context()
    return ANALYSIS_PROMPT_TEMPLATE.format(student_context=student_context, excerpt=excerpt)


async def request_analysis(
    client: genai.Client,
    prompt: str,
    model: str = DEFAULT_MODEL,
    max_retries: int = MAX_RETRIES,
) -> str:
    """
    Send the prompt to Gemini and return the raw reply text.

    Transient failures are retried with backoff.

    Raises:
        RateLimitedError: Gemini answered 429 on every attempt
        AIServiceError: Any other API failure, or an empty reply
    """

    @retry_with_backoff(max_retries=max_retries)
    async def _generate() -> str:
        try:
            response = await asyncio.to_thread(
                client.models.generate_content,
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(temperature=0.2),
            )
        except Exception as e:
            status_code = extract_status_code(e)
            if status_code == 429:
                raise RateLimitedError() from e
            raise AIServiceError(f"Gemini API failed: {e}", status_code=status_code) from e

        if not response.text:
            raise AIServiceError("Gemini API returned empty response")
        return response.text

    return await _generate()


async def analyze_excerpt(
    client: genai.Client,
    excerpt: str,
    profile: Optional[UserProfile] = None,
    model: str = DEFAULT_MODEL,
    max_retries: int = MAX_RETRIES,
) -> AnalysisOutcome:
    """
    Analyze an excerpt, falling back to the default result on AI failure.

    Returns:
        AnalysisOutcome whose ``error`` is set when the default result was used
    """
    prompt = build_prompt(excerpt, profile)

    try:
        response_text = await request_analysis(client, prompt, model=model, max_retries=max_retries)
    except RateLimitedError as e:
        logger.warning(f"Gemini rate limit hit, using default analysis: {e}")
        return AnalysisOutcome(excerpt=excerpt, error=str(e), rate_limited=True)
    except AIServiceError as e:
        logger.warning(f"Gemini analysis failed, using default analysis: {e}")
        return AnalysisOutcome(excerpt=excerpt, error=str(e))

    result = parse_response(response_text)
    logger.info(
        f"Successfully analyzed study material: subject={result.subject.value}, "
        f"topics={len(result.topics)}, questions={len(result.questions)}"
    )
    return AnalysisOutcome(result=result, excerpt=excerpt)


async def analyze_pdf(
    client: genai.Client,
    content: bytes,
    profile: Optional[UserProfile] = None,
    model: str = DEFAULT_MODEL,
    max_pages: int = MAX_PAGES_TO_ANALYZE,
    max_retries: int = MAX_RETRIES,
) -> AnalysisOutcome:
    """
    Run the full pipeline on an uploaded PDF.

    Raises:
        DocumentUnreadableError: If the PDF cannot be opened
    """
    pages = await asyncio.to_thread(load_pages, content, max_pages)
    excerpt = sample(pages)
    return await analyze_excerpt(client, excerpt, profile, model=model, max_retries=max_retries)
