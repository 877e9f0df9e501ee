from __future__ import annotations

from datetime import date


def share_text(day_iso: str, completed: int, total: int) -> str:
    day = date.fromisoformat(str(day_iso)[:10])
    label = day.strftime("%a, %d %b %Y")
    return f"My HabitBloom progress on {label}: {completed}/{total} habits done"


def export_grid_html(figure, title: str = "HabitBloom heatmap") -> bytes:
    """Standalone HTML page of a rendered grid figure, ready for download."""
    import plotly.graph_objects as go

    export = go.Figure(figure)
    export.update_layout(title=title)
    return export.to_html(full_html=True, include_plotlyjs="cdn").encode("utf-8")
