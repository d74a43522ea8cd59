"""
Theme Preset Resolution

Applies named presets to a resume theme. Presets are composable and can
override each other, so a color preset and a font preset combine freely.

Examples:
    # Apply multiple presets (later overrides earlier)
    >>> apply_theme_presets(theme, ["colors_warm", "fonts_serif"])

    # Mix a base preset with an override
    >>> apply_theme_presets(theme, ["colors_blue", "headings_bold", "colors_forest"])
"""

import os
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv
from omegaconf import OmegaConf

from folio.contexts.templating.exceptions import UnknownPresetError
from folio.contexts.templating.resume_data_structure import ResumeTheme

load_dotenv()
THEME_PRESETS_PATH = Path(
    os.getenv("FOLIO_THEME_PRESETS_PATH", Path(__file__).parent / "theme_presets.yaml")
)


def load_theme_presets(config_path: Path = None) -> Dict[str, Dict[str, Any]]:
    """
    Load theme_presets.yaml and flatten to a single-level dict.

    Collapses nested structure: colors.warm -> colors_warm

    Args:
        config_path: Optional path to config file (defaults to FOLIO_THEME_PRESETS_PATH)

    Returns:
        Flattened dict mapping preset names to theme overrides
        Example: {"colors_warm": {"primary_color": "#c2410c"}, ...}
    """
    if config_path is None:
        config_path = THEME_PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, config in presets.items():
            flattened[f"{category}_{name}"] = config

    return flattened


def apply_theme_presets(
    theme: ResumeTheme,
    preset_names: List[str],
    config_path: Path = None,
) -> ResumeTheme:
    """
    Apply named presets to a theme, returning a new theme.

    Presets are applied in order, with later presets overriding earlier ones.
    The template id is never changed by a preset.

    Raises:
        UnknownPresetError: If a preset name is not defined
    """
    presets = load_theme_presets(config_path)

    merged = theme.to_dict()
    for preset_name in preset_names:
        if preset_name not in presets:
            raise UnknownPresetError(preset_name, sorted(presets))
        merged.update(presets[preset_name])

    merged["template"] = theme.template
    return ResumeTheme.from_dict(merged)
