"""
Markdown Formatting

Helper functions for formatting resume data as markdown, the plain-text
form handed to match analysis.
"""

from typing import List

from folio.contexts.templating.resume_data_structure import (
    CustomSection,
    EducationEntry,
    ExperienceEntry,
    ResumeData,
    SkillGroup,
)
from folio.utils.text_processing import join_nonempty
from folio.utils.timestamp import format_date_range, format_month_year


def format_experience_markdown(entry: ExperienceEntry) -> str:
    """
    Format single work experience entry as markdown.

    Company is formatted as ### (section header added separately by caller).
    """
    parts = [f"### {entry.company or 'Unknown Company'}\n"]

    if entry.job_title:
        parts.append(f"**{entry.job_title}**")
    dates = format_date_range(entry.start_date, entry.end_date, current=entry.current)
    if dates:
        parts.append(f"*{dates}*")
    if entry.location:
        parts.append(entry.location)

    parts.append("")
    if entry.description:
        parts.append(entry.description)
        parts.append("")
    for bullet in entry.achievements:
        if bullet.strip():
            parts.append(f"- {bullet.strip()}")

    return "\n".join(parts).rstrip() + "\n"


def format_education_markdown(entry: EducationEntry) -> str:
    parts = [f"### {entry.institution or 'Unknown Institution'}\n"]
    degree = join_nonempty([entry.degree, entry.field_of_study], " in ")
    if degree:
        parts.append(f"**{degree}**")
    dates = format_date_range(entry.start_date, entry.end_date, current=entry.ongoing and not entry.end_date)
    if dates:
        parts.append(f"*{dates}*")
    if entry.gpa:
        parts.append(f"GPA: {entry.gpa}")
    for bullet in entry.achievements:
        if bullet.strip():
            parts.append(f"- {bullet.strip()}")
    return "\n".join(parts).rstrip() + "\n"


def format_skills_markdown(groups: List[SkillGroup]) -> str:
    lines = []
    for group in groups:
        names = ", ".join(item.name for item in group.items if item.name.strip())
        if not names:
            continue
        lines.append(f"- **{group.category}:** {names}" if group.category else f"- {names}")
    return "\n".join(lines) + ("\n" if lines else "")


def format_custom_section_markdown(section: CustomSection) -> str:
    parts = [f"## {section.title or 'Additional'}\n"]
    for item in section.items:
        if item.is_empty:
            continue
        head = join_nonempty([item.title, item.subtitle, format_month_year(item.date)])
        if head:
            parts.append(f"- {head}")
        if item.description:
            parts.append(f"  {item.description}")
    return "\n".join(parts).rstrip() + "\n"


def resume_to_text(data: ResumeData) -> str:
    """
    Render a whole resume as markdown.

    Sections with no content are omitted, in the same spirit as layout.
    """
    info = data.personal_info
    parts = []
    if info.full_name:
        parts.append(f"# {info.full_name}\n")
    contact = join_nonempty([value for _, value in info.contact_items])
    if contact:
        parts.append(contact + "\n")
    if info.summary:
        parts.append(f"## Summary\n\n{info.summary.strip()}\n")

    if data.experience:
        parts.append("## Experience\n")
        parts.extend(format_experience_markdown(entry) for entry in data.experience)
    if data.education:
        parts.append("## Education\n")
        parts.extend(format_education_markdown(entry) for entry in data.education)
    skills = format_skills_markdown(data.skills)
    if skills:
        parts.append("## Skills\n")
        parts.append(skills)
    achievements = [a for a in data.achievements if a.title.strip()]
    if achievements:
        parts.append("## Achievements\n")
        for entry in achievements:
            head = join_nonempty([entry.title, entry.organization or "", format_month_year(entry.date)])
            parts.append(f"- {head}" + (f": {entry.description}" if entry.description else ""))
        parts.append("")
    for section in data.custom_sections:
        if any(not item.is_empty for item in section.items):
            parts.append(format_custom_section_markdown(section))

    return "\n".join(parts).strip() + "\n"
