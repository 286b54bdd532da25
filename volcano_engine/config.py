"""
volcano_engine/config.py — Central configuration for the volcano engine.

This module centralises ALL default parameters, palettes and sentinel
values used throughout the engine.  Keeping them in a single place
avoids magic numbers scattered across the code and makes modification
easier without touching the logic.

Sections
--------
1. PALETTES : dict
   → Named colour palettes cycled through by the colour allocator.

2. SETTINGS_DEFAULTS : dict
   → Defaults for a fresh settings record.

3. VOLCANO_CONFIG : dict
   → Fixed colours and labels used when building volcano points.

4. DIFFERENTIAL_DEFAULTS : dict
   → Comparison-column defaults for the differential table.

5. TABULAR_CONFIG : dict
   → Text-table parsing configuration.

Usage example
-------------
    from volcano_engine.config import SETTINGS_DEFAULTS, VOLCANO_CONFIG

    p_cutoff = SETTINGS_DEFAULTS["p_cutoff"]
    grey = VOLCANO_CONFIG["background_color"]
"""

# ──────────────────────────────────────────────────────────────────────
# 1. Colour palettes
# ──────────────────────────────────────────────────────────────────────
# Order matters: the allocator walks each palette from index 0, so the
# first entries are the ones most datasets will see.
PALETTES: dict = {
    "pastel": [
        "#fd7f6f", "#7eb0d5", "#b2e061", "#bd7ebe", "#ffb55a",
        "#ffee65", "#beb9db", "#fdcce5", "#8bd3c7",
    ],
    "retro": [
        "#ea5545", "#f46a9b", "#ef9b20", "#edbf33", "#ede15b",
        "#bdcf32", "#87bc45", "#27aeef", "#b33dc6", "#9b59b6",
    ],
    "solid": [
        "#1f77b4", "#ff7f0e", "#2ca02c", "#d62728", "#9467bd",
        "#8c564b", "#e377c2", "#7f7f7f", "#bcbd22", "#17becf",
    ],
    "okabe_ito": [
        "#E69F00", "#56B4E9", "#009E73", "#F0E442", "#0072B2",
        "#D55E00", "#CC79A7", "#000000", "#999999", "#F4A261",
    ],
    "viridis": [
        "#440154", "#482777", "#3f4a8a", "#31678e", "#26838f",
        "#1f9d8a", "#6cce5a", "#b6de2b", "#fee825", "#f0f921",
    ],
    "set3": [
        "#8dd3c7", "#ffffb3", "#bebada", "#fb8072", "#80b1d3",
        "#fdb462", "#b3de69", "#fccde5", "#d9d9d9", "#bc80bd",
    ],
}

DEFAULT_PALETTE_NAME: str = "pastel"


def get_palette(name: str) -> list[str]:
    """Return a copy of the named palette.

    Raises
    ------
    ValueError
        If *name* is not one of the registered palettes.
    """
    palette = PALETTES.get(name)
    if palette is None:
        raise ValueError(f"Unknown palette '{name}'. Choose from: {list(PALETTES)}")
    return list(palette)


# ──────────────────────────────────────────────────────────────────────
# 2. Settings defaults
# ──────────────────────────────────────────────────────────────────────
SETTINGS_DEFAULTS: dict = {
    # Significance threshold on the raw p-value scale.
    # The volcano y-axis compares against -log10(p_cutoff).
    "p_cutoff": 0.05,

    # Absolute log2 fold-change threshold for the significance buckets.
    "log2_fold_change_cutoff": 0.6,

    "default_palette": PALETTES[DEFAULT_PALETTE_NAME],

    "plot_font_family": "Arial",

    "axis_x_title": "Log2FC",
    "axis_y_title": "-log10(p-value)",
}

# ──────────────────────────────────────────────────────────────────────
# 3. Volcano point building
# ──────────────────────────────────────────────────────────────────────
VOLCANO_CONFIG: dict = {
    # Used for every unselected point when "grey background" is on.
    "background_label": "Background",
    "background_color": "#a4a2a2",

    # Primary colour of a point that carries no colour at all.
    "neutral_color": "#808080",

    # Handed out by the allocator when the palette is empty.
    "fallback_color": "#cccccc",

    # Added around the observed data range when the settings leave an
    # axis bound unset.
    "axis_padding": 1.0,
}

# ──────────────────────────────────────────────────────────────────────
# 4. Differential table defaults
# ──────────────────────────────────────────────────────────────────────
DIFFERENTIAL_DEFAULTS: dict = {
    # Placeholder column name stored when the user never picked a
    # comparison column.  Persisted records use this exact string.
    "comparison_sentinel": "CurtainSetComparison",

    # Comparison value selected when nothing else is available.
    "default_comparison": "1",
}

# ──────────────────────────────────────────────────────────────────────
# 5. Tabular text parsing
# ──────────────────────────────────────────────────────────────────────
TABULAR_CONFIG: dict = {
    "separator": "\t",
    "encoding": "utf-8",
    # Joins a duplicated header name and its occurrence counter: a, a.1
    "duplicate_joiner": ".",
}
