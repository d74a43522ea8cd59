"""
Assist Context

Responsibilities:
- Defines the text generation collaborator (summaries, bullets, match analysis)
- Provides a deterministic mock provider
- Applies generated text to the resume under last-request-wins
- Serializes resumes to markdown for analysis

Owns: Generation request sequencing and failure notifications
Never: Lays out or renders documents
"""

from folio.contexts.assist.coordinator import (
    GenerationCoordinator,
    GenerationOutcome,
    Notification,
)
from folio.contexts.assist.exceptions import TextGenerationError
from folio.contexts.assist.plaintext import resume_to_text
from folio.contexts.assist.text_generation import (
    MatchAnalysis,
    MockTextGenerator,
    TextGenerator,
)

__all__ = [
    "TextGenerator",
    "MockTextGenerator",
    "MatchAnalysis",
    "TextGenerationError",
    "GenerationCoordinator",
    "GenerationOutcome",
    "Notification",
    "resume_to_text",
]
