"""Plot/theme helpers for dashboard figures."""

import plotly.graph_objects as go

from telemetry.chart_aggregator import SERIES_ROLE_THRESHOLD


DEFAULT_PLOT_THEME = {
    "font_family": "DM Sans, Segoe UI, Helvetica Neue, Arial, sans-serif",
    "paper_bg": "#ffffff",
    "plot_bg": "#ffffff",
    "grid": "#d7e3dd",
    "axis": "#234038",
    "text": "#1b2b26",
    "muted": "#546b63",
}


def apply_figure_theme(fig, plot_theme, *, height, margin, uirevision, showlegend=True, legend_y=1.08):
    fig.update_layout(
        height=height,
        margin=margin,
        showlegend=showlegend,
        legend=dict(
            orientation="h",
            yanchor="bottom",
            y=legend_y,
            xanchor="center",
            x=0.5,
            bgcolor="rgba(255, 255, 255, 0.7)",
            bordercolor="#d7e3dd",
            borderwidth=1,
            font=dict(color=plot_theme["axis"], family=plot_theme["font_family"], size=11),
        ),
        plot_bgcolor=plot_theme["plot_bg"],
        paper_bgcolor=plot_theme["paper_bg"],
        font=dict(color=plot_theme["text"], family=plot_theme["font_family"], size=12),
        uirevision=uirevision,
    )
    axis_style = dict(
        gridcolor=plot_theme["grid"],
        linecolor=plot_theme["grid"],
        zerolinecolor=plot_theme["grid"],
        tickfont=dict(color=plot_theme["muted"], family=plot_theme["font_family"]),
        title_font=dict(color=plot_theme["axis"], family=plot_theme["font_family"]),
    )
    fig.update_xaxes(**axis_style)
    fig.update_yaxes(**axis_style)
    if fig.layout.annotations:
        for annotation in fig.layout.annotations:
            annotation.font = dict(
                color=plot_theme["axis"],
                family=plot_theme["font_family"],
                size=12,
            )


def _trace_for(series):
    threshold = series.role == SERIES_ROLE_THRESHOLD
    return go.Scatter(
        x=list(series.x),
        y=list(series.y),
        mode="lines",
        name=series.label,
        line=dict(color=series.color, width=1 if threshold else 2, dash="dash" if threshold else "solid"),
        hoverinfo="skip" if threshold else None,
    )


def create_chart_figure(model, uirevision_key, plot_theme=None, *, title=None, height=420):
    """
    Render a ChartModel as a line figure, one trace per series.

    Threshold overlays are drawn dashed. A missing or empty model yields an
    empty figure carrying a "No data" annotation.
    """
    plot_theme = plot_theme or DEFAULT_PLOT_THEME
    fig = go.Figure()
    series = list(model.series) if model is not None else []
    for item in series:
        fig.add_trace(_trace_for(item))

    if model is not None and model.kind is not None:
        fig.update_yaxes(title_text=model.kind.display_name)
    if title:
        fig.update_layout(title_text=title)
    if not series:
        fig.add_annotation(
            text="No data",
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
            showarrow=False,
        )

    apply_figure_theme(
        fig,
        plot_theme,
        height=height,
        margin=dict(l=50, r=20, t=60 if title else 40, b=40),
        uirevision=uirevision_key,
    )
    return fig
