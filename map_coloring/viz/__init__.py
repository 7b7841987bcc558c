from .plotly_viz import DEFAULT_PALETTE, build_plotly_figure, build_step_animation, palette_for, write_plotly_html

__all__ = [
    "DEFAULT_PALETTE",
    "build_plotly_figure",
    "build_step_animation",
    "palette_for",
    "write_plotly_html",
]
