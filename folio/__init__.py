"""
FOLIO - Fixed-page Output Layout for Interactive Online resumes

Document rendering and pagination engine for a browser-based resume builder.
Takes structured resume data plus a template/theme selection and deterministically
produces fixed-size pages for on-screen preview and for export.

Architecture:
- Templating Context: Resume data model, legacy normalization, template definitions
- Rendering Context: Measurement, layout/pagination, visual tree, preview and export hosts
- Assist Context: External text-generation collaborator interface
"""

__version__ = "0.1.0"
