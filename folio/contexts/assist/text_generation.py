"""
Text generation collaborator.

Abstract interface for the external service that drafts summaries and
bullet points and scores a resume against a job description, plus a
deterministic mock provider.

All operations are coroutines: they are the only place the editing
session suspends. Callers must treat every result as a proposal to be
applied (or discarded) by the GenerationCoordinator.
"""

import asyncio
import re
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from folio.contexts.assist.exceptions import TextGenerationError
from folio.contexts.templating.resume_data_structure import ExperienceEntry, PersonalInfo
from folio.utils.text_processing import dedupe_preserving_order

# Scores are reported on this range
MIN_SCORE = 0
MAX_SCORE = 100


@dataclass
class MatchAnalysis:
    """
    Result of scoring a resume against a job description.

    Attributes:
        score: Match score in [0, 100]
        missing_keywords: Job keywords not found in the resume
        suggestions: Human-readable improvement suggestions
        strengths: Job keywords the resume already covers
    """

    score: int
    missing_keywords: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "missing_keywords": list(self.missing_keywords),
            "suggestions": list(self.suggestions),
            "strengths": list(self.strengths),
        }


class TextGenerator(ABC):
    """
    Abstract base for text generation providers.

    Subclasses implement the three coroutines. Any exception they raise is
    treated as a failed request; TextGenerationError is preferred.
    """

    name: str = "abstract"

    @abstractmethod
    async def generate_summary(self, personal_info: PersonalInfo) -> str:
        """Draft a professional summary paragraph."""

    @abstractmethod
    async def generate_bullets(self, entry: ExperienceEntry) -> List[str]:
        """Draft 3 to 5 achievement bullets for one experience entry."""

    @abstractmethod
    async def analyze_match(self, resume_text: str, job_description: str) -> MatchAnalysis:
        """Score resume text against a job description."""


# =============================================================================
# Mock provider
# =============================================================================

SUMMARY_TEMPLATES = [
    "Experienced professional with a strong background in {focus}, bringing expertise in strategic "
    "planning, team leadership and project management. Proven track record of delivering results "
    "and driving organizational growth.",
    "Dynamic {role} with comprehensive experience in cross-functional collaboration and process "
    "optimization. Skilled at identifying opportunities for improvement and implementing solutions "
    "that raise operational efficiency and customer satisfaction.",
    "Results-driven {role} with a demonstrated ability to manage complex projects and lead "
    "high-performing teams. Strong analytical skills combined with clear communication, focused "
    "on measurable business outcomes.",
]

BULLET_TEMPLATES = [
    "Led cross-functional initiatives at {company}, improving operational efficiency and team productivity",
    "Collaborated with stakeholders to develop and implement strategic solutions that supported organizational growth",
    "Managed key projects and deliverables, ensuring timely completion and adherence to quality standards",
    "Analyzed performance metrics to identify opportunities for process optimization and cost reduction",
    "Mentored team members and facilitated knowledge sharing, fostering a culture of continuous learning",
    "Presented to clients and partners, building strong relationships and ensuring customer satisfaction",
    "Contributed to best practices and standard operating procedures, improving overall team efficiency",
    "Supported budget planning and resource allocation to optimize project outcomes",
]

SUGGESTION_TEMPLATES = {
    "keywords": "Add the missing keywords where they honestly apply: {keywords}",
    "quantify": "Include quantifiable achievements with numbers and percentages",
    "leadership": "Emphasize leadership and team collaboration experience",
    "certifications": "Highlight relevant certifications or training",
    "verbs": "Use more action verbs to describe your accomplishments",
}

# Terms the mock recognizes in job descriptions, matched case-insensitively
KNOWN_KEYWORDS = [
    "JavaScript", "TypeScript", "React", "Node.js", "Python", "Java", "Go", "SQL", "AWS", "Azure",
    "GCP", "Docker", "Kubernetes", "Git", "Agile", "Scrum", "Leadership", "Communication",
    "Machine Learning", "Data Analysis", "Project Management", "CI/CD", "REST", "GraphQL",
]

_NUMBER = re.compile(r"\d")


def _stable_index(text: str, modulo: int) -> int:
    return zlib.crc32(text.encode("utf-8")) % modulo


def _contains_term(text: str, term: str) -> bool:
    pattern = r"(?<![A-Za-z0-9])" + re.escape(term.lower()) + r"(?![A-Za-z0-9])"
    return re.search(pattern, text.lower()) is not None


def extract_keywords(job_description: str, vocabulary: Iterable[str] = KNOWN_KEYWORDS) -> List[str]:
    """Known terms mentioned in a job description, in vocabulary order."""
    return dedupe_preserving_order(term for term in vocabulary if _contains_term(job_description, term))


class MockTextGenerator(TextGenerator):
    """
    Deterministic stand-in for a real provider.

    The same input always yields the same output. A simulated latency and
    injected failures make it usable for exercising the coordinator.

    Args:
        delay: Seconds each request waits before answering
        fail_on: Operation names ("summary", "bullets", "analysis") that raise
    """

    name = "mock"

    def __init__(self, delay: float = 0.0, fail_on: Optional[Iterable[str]] = None):
        self.delay = delay
        self.fail_on = set(fail_on or [])
        self.calls: List[str] = []

    async def _simulate(self, operation: str) -> None:
        self.calls.append(operation)
        if self.delay:
            await asyncio.sleep(self.delay)
        if operation in self.fail_on:
            raise TextGenerationError("Text generation service unavailable", operation)

    async def generate_summary(self, personal_info: PersonalInfo) -> str:
        await self._simulate("summary")
        template = SUMMARY_TEMPLATES[_stable_index(personal_info.full_name, len(SUMMARY_TEMPLATES))]
        focus = "technology and innovation" if personal_info.full_name else "business development"
        role = "professional" if personal_info.full_name else "individual"
        return template.format(focus=focus, role=role)

    async def generate_bullets(self, entry: ExperienceEntry) -> List[str]:
        await self._simulate("bullets")
        seed = f"{entry.company}|{entry.job_title}"
        count = 3 + _stable_index(seed, 3)
        start = _stable_index(seed[::-1], len(BULLET_TEMPLATES))
        rotated = BULLET_TEMPLATES[start:] + BULLET_TEMPLATES[:start]
        company = entry.company.strip() or "the company"
        return [bullet.format(company=company) for bullet in rotated[:count]]

    async def analyze_match(self, resume_text: str, job_description: str) -> MatchAnalysis:
        await self._simulate("analysis")
        keywords = extract_keywords(job_description)
        strengths = [k for k in keywords if _contains_term(resume_text, k)]
        missing = [k for k in keywords if k not in strengths]

        if keywords:
            score = 40 + round(60 * len(strengths) / len(keywords))
        else:
            score = 60
        score = max(MIN_SCORE, min(MAX_SCORE, score))

        suggestions = []
        if missing:
            suggestions.append(SUGGESTION_TEMPLATES["keywords"].format(keywords=", ".join(missing[:5])))
        if not _NUMBER.search(resume_text):
            suggestions.append(SUGGESTION_TEMPLATES["quantify"])
        if "Leadership" in missing:
            suggestions.append(SUGGESTION_TEMPLATES["leadership"])
        if len(suggestions) < 2:
            suggestions.append(SUGGESTION_TEMPLATES["verbs"])
        if len(suggestions) < 2:
            suggestions.append(SUGGESTION_TEMPLATES["certifications"])

        return MatchAnalysis(score=score, missing_keywords=missing, suggestions=suggestions, strengths=strengths)
