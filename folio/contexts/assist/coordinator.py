"""
Generation coordinator.

Owns the editing session's resume while text-generation requests are in
flight, and decides which results may be applied.

Rules:
- Each field has a request sequence. Starting a request, or editing the
  field by hand, bumps it; a result is applied only if its request is
  still the newest for that field (last request wins).
- A successful result is one whole-field replacement, applied exactly once.
- A failed request never touches the data; it produces a dismissible
  notification instead.
- Every request works from a snapshot of the data taken when it started.
"""

import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from folio.contexts.assist.logger import (
    log_generation_applied,
    log_generation_discarded,
    log_generation_failed,
)
from folio.contexts.assist.plaintext import resume_to_text
from folio.contexts.assist.text_generation import MatchAnalysis, TextGenerator
from folio.contexts.templating.resume_data_structure import ResumeData, replace_field

SUMMARY_FIELD = "personal_info.summary"


def bullets_field(entry_id: str) -> str:
    return f"experience[{entry_id}].achievements"


@dataclass
class Notification:
    """Transient, dismissible message shown to the editing user."""

    title: str
    message: str
    field: Optional[str] = None
    level: str = "error"
    dismissed: bool = False

    def dismiss(self) -> None:
        self.dismissed = True


@dataclass
class GenerationOutcome:
    """
    What happened to one request.

    Attributes:
        field: Field path the request targeted
        sequence: Request number for that field
        applied: True if the result replaced the field
        stale: True if a newer request or edit superseded this one
        value: The generated value (even when not applied)
        notification: Set when the request failed
    """

    field: str
    sequence: int
    applied: bool = False
    stale: bool = False
    value: Any = None
    notification: Optional[Notification] = None


class GenerationCoordinator:
    """
    Applies text-generation results to a resume under last-request-wins.

    Args:
        data: Resume being edited
        generator: Text generation provider
    """

    def __init__(self, data: ResumeData, generator: TextGenerator):
        self.data = data
        self.generator = generator
        self._sequence: Dict[str, int] = {}
        self.notifications: List[Notification] = []

    # -- sequencing ------------------------------------------------------

    def _next(self, field_path: str) -> int:
        self._sequence[field_path] = self._sequence.get(field_path, 0) + 1
        return self._sequence[field_path]

    def latest(self, field_path: str) -> int:
        return self._sequence.get(field_path, 0)

    def is_current(self, field_path: str, sequence: int) -> bool:
        return self._sequence.get(field_path, 0) == sequence

    # -- edits -------------------------------------------------------------

    def edit_field(self, path: str, value: Any) -> ResumeData:
        """Manual whole-field edit; in-flight results for the same field become stale."""
        self._next(path)
        self.data = replace_field(self.data, path, value)
        return self.data

    def _apply(self, field_path: str, sequence: int, value: Any) -> GenerationOutcome:
        if not self.is_current(field_path, sequence):
            log_generation_discarded(field_path, sequence, self.latest(field_path))
            return GenerationOutcome(field_path, sequence, stale=True, value=value)
        try:
            self.data = replace_field(self.data, field_path, value)
        except KeyError:
            # Entry was deleted while the request was in flight
            log_generation_discarded(field_path, sequence, self.latest(field_path))
            return GenerationOutcome(field_path, sequence, stale=True, value=value)
        log_generation_applied(field_path, sequence)
        return GenerationOutcome(field_path, sequence, applied=True, value=value)

    def _fail(self, field_path: str, sequence: int, error: BaseException, title: str) -> GenerationOutcome:
        log_generation_failed(field_path, error)
        if not self.is_current(field_path, sequence):
            return GenerationOutcome(field_path, sequence, stale=True)
        notification = Notification(
            title=title,
            message="Please try again in a moment. Your resume was not changed.",
            field=field_path,
        )
        self.notifications.append(notification)
        return GenerationOutcome(field_path, sequence, notification=notification)

    @property
    def active_notifications(self) -> List[Notification]:
        return [n for n in self.notifications if not n.dismissed]

    # -- requests ------------------------------------------------------------

    async def request_summary(self) -> GenerationOutcome:
        """Generate and apply a new professional summary."""
        sequence = self._next(SUMMARY_FIELD)
        personal_info = copy.deepcopy(self.data.personal_info)
        try:
            summary = await self.generator.generate_summary(personal_info)
        except Exception as e:
            return self._fail(SUMMARY_FIELD, sequence, e, "Failed to generate summary")
        return self._apply(SUMMARY_FIELD, sequence, summary)

    async def request_bullets(self, entry_id: str) -> GenerationOutcome:
        """
        Generate and apply achievement bullets for one experience entry.

        The entry's whole bullet list is replaced.

        Raises:
            KeyError: If no experience entry has entry_id
        """
        entry = copy.deepcopy(self.data.get_entry("experience", entry_id))
        field_path = bullets_field(entry_id)
        sequence = self._next(field_path)
        try:
            bullets = await self.generator.generate_bullets(entry)
        except Exception as e:
            return self._fail(field_path, sequence, e, "Failed to generate bullet points")
        return self._apply(field_path, sequence, list(bullets))

    async def analyze(self, job_description: str) -> Optional[MatchAnalysis]:
        """Score the current resume against a job description; never changes the data."""
        resume_text = resume_to_text(self.data.snapshot())
        try:
            return await self.generator.analyze_match(resume_text, job_description)
        except Exception as e:
            log_generation_failed("analysis", e)
            self.notifications.append(
                Notification(
                    title="Failed to analyze resume",
                    message="Please try again in a moment.",
                    field="analysis",
                )
            )
            return None
