import unittest

try:
    import pandas as pd

    from dashboard.plotting import DEFAULT_PLOT_THEME, create_chart_figure
    from telemetry.chart_aggregator import ChartModel, ChartSeries, SERIES_ROLE_THRESHOLD
    from telemetry.sensor_catalog import SensorKind
    _IMPORT_ERROR = None
except ModuleNotFoundError as exc:  # pragma: no cover - environment-dependent test skip
    pd = None
    _IMPORT_ERROR = exc


def _model():
    x = (pd.Timestamp("2023-01-01T00:00:00Z"), pd.Timestamp("2023-01-02T00:00:00Z"))
    return ChartModel(
        "detail",
        SensorKind.HUMIDITY,
        (
            ChartSeries("Fern", x, (50.0, 52.0), "#0af50a", entity_id="p1"),
            ChartSeries("Fern max", x, (80, 80), "#000000", role=SERIES_ROLE_THRESHOLD),
            ChartSeries("Fern min", x, (40, 40), "#000000", role=SERIES_ROLE_THRESHOLD),
        ),
    )


@unittest.skipIf(_IMPORT_ERROR is not None, f"plotting dependencies unavailable: {_IMPORT_ERROR}")
class DashboardPlottingTests(unittest.TestCase):
    def test_one_trace_per_series(self):
        fig = create_chart_figure(_model(), "page-p1", DEFAULT_PLOT_THEME)

        self.assertEqual([trace.name for trace in fig.data], ["Fern", "Fern max", "Fern min"])
        self.assertEqual(list(fig.data[0].y), [50.0, 52.0])
        self.assertEqual(fig.data[0].line.color, "#0af50a")
        self.assertEqual(fig.data[0].line.dash, "solid")
        self.assertEqual(fig.data[1].line.dash, "dash")
        self.assertEqual(fig.layout.uirevision, "page-p1")
        self.assertEqual(fig.layout.yaxis.title.text, "Humidity")

    def test_empty_or_missing_model_renders_no_data_annotation(self):
        for model in (None, ChartModel("detail", SensorKind.LIGHT)):
            with self.subTest(model=model):
                fig = create_chart_figure(model, "overview")
                self.assertEqual(len(fig.data), 0)
                self.assertEqual(fig.layout.annotations[0].text, "No data")

    def test_theme_applied(self):
        fig = create_chart_figure(_model(), "overview", DEFAULT_PLOT_THEME, title="Groups", height=300)
        self.assertEqual(fig.layout.height, 300)
        self.assertEqual(fig.layout.plot_bgcolor, DEFAULT_PLOT_THEME["plot_bg"])
        self.assertEqual(fig.layout.title.text, "Groups")


if __name__ == "__main__":
    unittest.main()
