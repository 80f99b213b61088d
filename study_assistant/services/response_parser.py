"""
Parser for the free-text analysis reply returned by Gemini.

The prompt asks for a line-oriented format:

    Subject: Physics
    Topics: Kinematics, Forces, ...
    Summary:
    - point 1
    Questions:
    1. Question text
    Difficulty: Easy
    A) ...
    B) ...
    C) ...
    D) ...
    Answer: A

The model does not always follow it, so every section is extracted on its
own. A missing or malformed section falls back to that field's default
and never affects the other sections.
"""

import logging
import re
from typing import List, Optional

from study_assistant.models.analysis import AnalysisResult, Difficulty, Question, Subject

logger = logging.getLogger(__name__)

MAX_TOPICS = 5
MAX_TOPIC_LENGTH = 50
MAX_SUMMARY_POINTS = 5
MIN_SUMMARY_LENGTH = 10
MAX_SUMMARY_LENGTH = 200
OPTIONS_PER_QUESTION = 4

# Checked in this order; the first subject contained in the label wins
SUBJECT_PRIORITY = [
    Subject.PHYSICS,
    Subject.CHEMISTRY,
    Subject.MATHS,
    Subject.BIOLOGY,
    Subject.COMPUTER_SCIENCE,
]

_SUBJECT_LINE = re.compile(r"^[ \t]*Subject:[ \t]*([^\n]*)", re.IGNORECASE | re.MULTILINE)
_TOPICS_BLOCK = re.compile(
    r"^[ \t]*Topics:(.*?)(?=^[ \t]*Summary:|\Z)",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)
_SUMMARY_BLOCK = re.compile(r"^[ \t]*Summary:(.*)", re.IGNORECASE | re.MULTILINE | re.DOTALL)
_QUESTIONS_BLOCK = re.compile(r"^[ \t]*Questions:(.*)", re.IGNORECASE | re.MULTILINE | re.DOTALL)

_QUESTION_BOUNDARY = re.compile(r"^[ \t]*\d+\.\s+", re.MULTILINE)
_BULLET_PREFIX = re.compile(r"^[-*•]\s*")
_NUMBER_PREFIX = re.compile(r"^\d+\.\s*")
_DIFFICULTY = re.compile(r"^difficulty:\s*(easy|medium|hard)", re.IGNORECASE)
_OPTION_LINE = re.compile(r"^[A-D]\)", re.IGNORECASE)


def _strip_list_marker(item: str) -> str:
    """Trim and remove one bullet marker and one '1.' style prefix."""
    item = _BULLET_PREFIX.sub("", item.strip(), count=1)
    return _NUMBER_PREFIX.sub("", item, count=1)


def extract_subject(text: str) -> Optional[Subject]:
    """Match the Subject line against the allowed subjects."""
    match = _SUBJECT_LINE.search(text)
    if not match:
        return None

    detected = match.group(1).strip().lower()
    if not detected:
        return None
    for subject in SUBJECT_PRIORITY:
        if subject.value.lower() in detected:
            return subject
    return None


def extract_topics(text: str) -> Optional[List[str]]:
    """Comma or newline separated keywords between Topics: and Summary:."""
    match = _TOPICS_BLOCK.search(text)
    if not match:
        return None

    topics = []
    for candidate in re.split(r"[,\n]", match.group(1)):
        topic = _strip_list_marker(candidate)
        if 0 < len(topic) < MAX_TOPIC_LENGTH:
            topics.append(topic)
    return topics[:MAX_TOPICS]


def extract_summary(text: str) -> Optional[List[str]]:
    """Revision bullet points following Summary:."""
    match = _SUMMARY_BLOCK.search(text)
    if not match:
        return None

    points = []
    for line in match.group(1).split("\n"):
        point = _strip_list_marker(line)
        if MIN_SUMMARY_LENGTH < len(point) < MAX_SUMMARY_LENGTH:
            points.append(point)
    return points[:MAX_SUMMARY_POINTS]


def _parse_difficulty(lines: List[str]) -> Difficulty:
    for line in lines:
        if line.lower().startswith("difficulty:"):
            match = _DIFFICULTY.match(line)
            if match:
                return Difficulty(match.group(1).capitalize())
            break
    return Difficulty.MEDIUM


def _parse_answer(lines: List[str]) -> str:
    for line in lines:
        if line.upper().startswith("ANSWER:"):
            return line.split(":")[1].strip()[:1].upper()
    return ""


def parse_question_block(block: str) -> Optional[Question]:
    """
    Parse one numbered question block.

    Returns None when the block has fewer than three lines, does not have
    exactly four options, or has no usable answer letter.
    """
    lines = [line.strip() for line in block.split("\n") if line.strip()]
    if len(lines) < 3:
        return None

    answer = _parse_answer(lines)
    options = [
        line for line in lines
        if _OPTION_LINE.match(line)
        and not line.upper().startswith("ANSWER:")
        and not line.lower().startswith("difficulty:")
    ]

    if len(options) != OPTIONS_PER_QUESTION or answer not in ("A", "B", "C", "D"):
        logger.debug(
            f"Dropping malformed question ({len(options)} options, answer={answer!r}): {lines[0][:60]}"
        )
        return None

    return Question(
        question=lines[0],
        options=options,
        correct_answer=answer,
        difficulty=_parse_difficulty(lines),
    )


def extract_questions(text: str) -> Optional[List[Question]]:
    """Well-formed multiple-choice questions following Questions:."""
    match = _QUESTIONS_BLOCK.search(text)
    if not match:
        return None

    # Anything before the first "1. " is preamble
    blocks = _QUESTION_BOUNDARY.split(match.group(1))[1:]
    questions = []
    for block in blocks:
        question = parse_question_block(block)
        if question is not None:
            questions.append(question)
    return questions


def parse_response(response_text: str) -> AnalysisResult:
    """
    Convert a raw Gemini reply into an AnalysisResult.

    Never raises: absent or unparseable sections leave the corresponding
    field at its default (Other / empty list).

    Example:
        >>> result = parse_response("Subject: Organic Chemistry\\nTopics: Alkanes")
        >>> result.subject
        <Subject.CHEMISTRY: 'Chemistry'>
    """
    text = response_text or ""

    return AnalysisResult(
        subject=extract_subject(text) or Subject.OTHER,
        topics=extract_topics(text) or [],
        summary=extract_summary(text) or [],
        questions=extract_questions(text) or [],
    )
