"""
Default values for FOLIO resume structure and presentation.

Provides shared defaults used by:
- resume_data_structure.py (empty resume and default theme)
- template_registry.py (default template id)
- rendering context (font stacks, heading scales)
"""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_TEMPLATE_ID = os.getenv("FOLIO_DEFAULT_TEMPLATE", "modern")

# Default theme (neutral professional blue)
DEFAULT_THEME = {
    "font_family": "inter",
    "primary_color": "#2563eb",
    "heading_size": "md",
    "template": DEFAULT_TEMPLATE_ID,
}

# Display font stacks per theme font family (used by the preview host)
FONT_FAMILY_STACKS = {
    "inter": "Inter, Helvetica, Arial, sans-serif",
    "roboto": "Roboto, Helvetica, Arial, sans-serif",
    "opensans": "'Open Sans', Helvetica, Arial, sans-serif",
    "poppins": "Poppins, Helvetica, Arial, sans-serif",
    "merriweather": "Merriweather, 'Times New Roman', Times, serif",
    "playfair": "'Playfair Display', 'Times New Roman', Times, serif",
}

# Theme font families whose glyphs are serif (export picks the serif metric face)
SERIF_FONT_FAMILIES = {"merriweather", "playfair"}

# Heading glyph scale per theme heading size. Layout reserves the "lg" slot,
# so any of these fits without changing pagination.
HEADING_SCALES = {
    "sm": 0.85,
    "md": 1.0,
    "lg": 1.15,
}
MAX_HEADING_SCALE = max(HEADING_SCALES.values())

# Skill level labels, in increasing proficiency
SKILL_LEVELS = ["Beginner", "Intermediate", "Advanced", "Expert"]

# Legacy numeric skill level (1-5) -> label
NUMERIC_SKILL_LEVELS = {
    1: "Beginner",
    2: "Beginner",
    3: "Intermediate",
    4: "Advanced",
    5: "Expert",
}
