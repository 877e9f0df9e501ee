from __future__ import annotations

from habitbloom import metrics
from habitbloom.axis import WEEKDAY_LABELS, group_by_month

THEMES = {
    "light": {
        "paper": "#f8fafc",
        "text_main": "#0f172a",
        "text_soft": "#64748b",
        "border": "#e2e8f0",
        "selected": "#10b981",
        "levels": ["#f1f5f9", "#ecfdf5", "#d1fae5", "#a7f3d0", "#6ee7b7"],
    },
    "dark": {
        "paper": "#020617",
        "text_main": "#f8fafc",
        "text_soft": "#94a3b8",
        "border": "#334155",
        "selected": "#34d399",
        "levels": ["#1e293b", "#064e3b", "#065f46", "#047857", "#10b981"],
    },
}


def get_theme(name):
    return THEMES.get(name, THEMES["light"])


def week_column(axis, index):
    """Column of axis position ``index`` in a Monday-first week grid."""
    return (index + axis[0].weekday) // 7


def _month_ticks(axis):
    ticks = []
    labels = []
    start = 0
    for month in group_by_month(axis):
        ticks.append(week_column(axis, start))
        labels.append(month.month_short)
        start += len(month.days)
    return ticks, labels


def _grid_figure(axis, colors, hover, selected_date, theme_name, height):
    import plotly.graph_objects as go

    theme = get_theme(theme_name)
    xs = [week_column(axis, index) for index in range(len(axis))]
    ys = [day.weekday for day in axis]
    line_colors = [theme["selected"] if day.iso == selected_date else theme["border"] for day in axis]
    fig = go.Figure(
        data=go.Scatter(
            x=xs,
            y=ys,
            mode="markers",
            marker=dict(
                symbol="square",
                size=13,
                color=colors,
                line=dict(color=line_colors, width=1.5),
            ),
            customdata=[day.iso for day in axis],
            text=hover,
            hoverinfo="text",
        )
    )
    ticks, labels = _month_ticks(axis)
    fig.update_layout(
        height=height,
        dragmode="select",
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=theme["text_main"]),
        margin=dict(l=10, r=10, t=24, b=10),
        showlegend=False,
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=ticks,
            ticktext=labels,
            side="top",
            tickfont=dict(color=theme["text_soft"], size=10),
            fixedrange=True,
        ),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=list(range(7)),
            ticktext=list(WEEKDAY_LABELS),
            autorange="reversed",
            tickfont=dict(color=theme["text_soft"], size=9),
            fixedrange=True,
        ),
    )
    return fig


def habit_grid(habit, axis, store, selected_date=None, theme_name="light", height=190):
    levels = get_theme(theme_name)["levels"]
    habit_id = str(habit.get("id"))
    colors = []
    hover = []
    for day in axis:
        done = store.get(habit_id, day.iso)
        colors.append(levels[-1] if done else levels[0])
        hover.append(f"{day.label} • {'Done' if done else 'Not done'}")
    return _grid_figure(axis, colors, hover, selected_date, theme_name, height)


def overview_grid(habits, axis, store, selected_date=None, theme_name="light", height=190):
    levels = get_theme(theme_name)["levels"]
    colors = []
    hover = []
    for day in axis:
        completed, total, ratio = metrics.day_summary(day, habits, store)
        colors.append(levels[metrics.ratio_bucket(ratio)])
        hover.append(f"{day.label} • {completed}/{total} habits")
    return _grid_figure(axis, colors, hover, selected_date, theme_name, height)


def selected_days(event):
    """ISO dates of the points picked in a plotly selection event."""
    try:
        points = event["selection"]["points"]
    except (KeyError, TypeError):
        return []
    days = []
    for point in points or []:
        custom = point.get("customdata")
        if isinstance(custom, (list, tuple)):
            custom = custom[0] if custom else None
        if custom:
            days.append(str(custom)[:10])
    return sorted(set(days))
