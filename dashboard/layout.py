"""Dashboard layout composition."""

from dash import dcc, html

from dashboard.intents import (
    GROUP_FORM_FIELDS,
    OVERVIEW_FORM_PREFIX,
    PAGE_FORM_PREFIX,
    PLANT_FORM_FIELDS,
    bound_input_id,
    form_input_id,
)
from dashboard.ui_state import sensor_kind_options, window_preset_options, with_hidden
from telemetry.sensor_catalog import SENSOR_KINDS


def _form_field(input_id, label):
    return html.Div(
        className="form-field",
        children=[
            html.Label(label, htmlFor=input_id, className="form-label"),
            dcc.Input(id=input_id, type="text", value="", debounce=True, className="form-input"),
        ],
    )


def build_edit_form(prefix):
    """Plant and group field sections sharing one id prefix; sections are toggled by class."""
    plant_fields = [form_input_id(prefix, name) for name, _label, _action in PLANT_FORM_FIELDS]
    group_fields = [form_input_id(prefix, name) for name, _label, _action in GROUP_FORM_FIELDS]
    return html.Div(
        className="edit-form",
        children=[
            html.Div(
                id=f"{prefix}-plant-form",
                className=with_hidden("form-section", True),
                children=[
                    _form_field(input_id, label)
                    for input_id, (_name, label, _action) in zip(plant_fields, PLANT_FORM_FIELDS)
                ],
            ),
            html.Div(
                id=f"{prefix}-group-form",
                className=with_hidden("form-section", True),
                children=[
                    _form_field(input_id, label)
                    for input_id, (_name, label, _action) in zip(group_fields, GROUP_FORM_FIELDS)
                ]
                + [
                    _form_field(bound_input_id(prefix, kind), f"{kind.display_name} bounds (max;min)")
                    for kind in SENSOR_KINDS
                ],
            ),
        ],
    )


def _controls_row(prefix, default_kind):
    return html.Div(
        className="controls-row",
        children=[
            html.Div(
                className="control-section",
                children=[
                    html.Span("Sensor", className="toggle-label"),
                    dcc.Dropdown(
                        id=f"{prefix}-sensor-kind",
                        options=sensor_kind_options(),
                        value=default_kind,
                        clearable=False,
                        className="control-dropdown",
                    ),
                ],
            ),
            html.Div(
                className="control-section",
                children=[
                    html.Span("Window", className="toggle-label"),
                    dcc.Dropdown(
                        id=f"{prefix}-window-select",
                        options=window_preset_options(),
                        value=None,
                        placeholder="Since first record",
                        className="control-dropdown",
                    ),
                ],
            ),
        ],
    )


def _overview_tab(config):
    return dcc.Tab(
        label="Overview",
        value="overview",
        className="main-tab",
        selected_className="main-tab--selected",
        children=[
            html.Div(
                className="control-panel",
                children=[
                    _controls_row("overview", config["OVERVIEW_SENSOR_KIND"]),
                    html.Div(
                        className="controls-row",
                        children=[
                            html.Button("Refresh", id="overview-refresh-btn", className="btn btn-secondary", n_clicks=0),
                            html.Button("Create Plant", id="overview-create-plant-btn", className="btn btn-primary", n_clicks=0),
                            html.Button("Create Group", id="overview-create-group-btn", className="btn btn-primary", n_clicks=0),
                        ],
                    ),
                    html.Div(id="overview-status", className="status-text"),
                ],
            ),
            dcc.Graph(id="overview-graph", config={"displaylogo": False}),
            html.Div(
                className="control-panel",
                children=[
                    html.H3("Plant groups", className="section-title"),
                    html.Div(id="overview-group-list", className="summary-table-wrap"),
                    html.Div(
                        className="controls-row",
                        children=[
                            dcc.Input(
                                id="overview-delete-group-id",
                                type="text",
                                value="",
                                placeholder="Group id",
                                className="form-input",
                            ),
                            html.Button("Delete Group", id="overview-delete-group-btn", className="btn btn-danger", n_clicks=0),
                        ],
                    ),
                ],
            ),
            html.Div(
                id="overview-create-modal",
                className=with_hidden("modal-overlay", True),
                children=[
                    html.Div(
                        className="modal-card",
                        children=[
                            html.H3("Create plant", id="overview-create-modal-title", className="modal-title"),
                            build_edit_form(OVERVIEW_FORM_PREFIX),
                            html.P("", id="overview-create-error", className="status-text error-text"),
                            html.Div(
                                className="modal-actions",
                                children=[
                                    html.Button("Cancel", id="overview-create-cancel-btn", className="btn btn-secondary", n_clicks=0),
                                    html.Button("Create", id="overview-create-save-btn", className="btn btn-primary", n_clicks=0),
                                ],
                            ),
                        ],
                    )
                ],
            ),
        ],
    )


def _plant_tab(config):
    return dcc.Tab(
        label="Plant",
        value="plant",
        className="main-tab",
        selected_className="main-tab--selected",
        children=[
            html.Div(
                id="page-selection",
                className="control-panel",
                children=[
                    html.Span("Plant", className="toggle-label"),
                    dcc.Dropdown(id="page-entity-select", options=[], value=None, placeholder="Select a plant"),
                ],
            ),
            html.Div(id="page-status", className="status-text"),
            html.Div(
                id="page-detail",
                className=with_hidden("control-panel", True),
                children=[
                    _controls_row("page", config["PAGE_DEFAULT_SENSOR_KIND"]),
                    html.Div(
                        className="controls-row",
                        children=[
                            html.Button("Other Plant", id="page-switch-entity-btn", className="btn btn-secondary", n_clicks=0),
                            html.Button("Edit Plant", id="page-edit-plant-btn", className="btn btn-primary", n_clicks=0),
                            html.Button("Edit Group", id="page-edit-group-btn", className="btn btn-primary", n_clicks=0),
                            html.Button("Delete Plant", id="page-delete-btn", className="btn btn-danger", n_clicks=0),
                        ],
                    ),
                    dcc.Graph(id="page-graph", config={"displaylogo": False}),
                    html.Div(
                        id="page-edit-panel",
                        className=with_hidden("edit-panel", True),
                        children=[
                            build_edit_form(PAGE_FORM_PREFIX),
                            html.Div(
                                className="modal-actions",
                                children=[
                                    html.Button("Cancel", id="page-edit-cancel-btn", className="btn btn-secondary", n_clicks=0),
                                    html.Button("Save", id="page-edit-save-btn", className="btn btn-primary", n_clicks=0),
                                ],
                            ),
                        ],
                    ),
                ],
            ),
            html.Div(
                id="page-delete-modal",
                className=with_hidden("modal-overlay", True),
                children=[
                    html.Div(
                        className="modal-card",
                        children=[
                            html.H3("Delete plant", className="modal-title"),
                            html.P("The plant and its record will be removed permanently."),
                            html.Div(
                                className="modal-actions",
                                children=[
                                    html.Button("Cancel", id="page-delete-cancel", className="btn btn-secondary", n_clicks=0),
                                    html.Button("Delete", id="page-delete-confirm", className="btn btn-danger", n_clicks=0),
                                ],
                            ),
                        ],
                    )
                ],
            ),
        ],
    )


def _logs_tab():
    return dcc.Tab(
        label="Logs",
        value="logs",
        className="main-tab",
        selected_className="main-tab--selected",
        children=[
            html.Div(
                className="controls-row",
                children=[
                    html.Span("Component", className="toggle-label"),
                    dcc.Dropdown(
                        id="logs-component-filter",
                        options=[],
                        value=None,
                        placeholder="All components",
                        className="control-dropdown",
                    ),
                ],
            ),
            html.Div(id="session-logs", className="logs-container"),
        ],
    )


def build_dashboard_layout(config):
    return html.Div(
        className="app-container",
        children=[
            html.Header(
                className="app-header",
                children=[
                    html.Div(
                        className="app-header-copy",
                        children=[
                            html.H1("PlantBuddy", className="app-title"),
                            html.P("Sensor telemetry and care settings for plants and plant groups.", className="app-subtitle"),
                        ],
                    )
                ],
            ),
            dcc.Interval(id="interval-component", interval=1000, n_intervals=0),
            dcc.Store(id="page-action"),
            dcc.Store(id="overview-action"),
            dcc.Store(id="page-form-noop"),
            dcc.Store(id="overview-form-noop"),
            dcc.Tabs(
                id="main-tabs",
                value="overview",
                className="main-tabs",
                parent_className="main-tabs-parent",
                children=[_overview_tab(config), _plant_tab(config), _logs_tab()],
            ),
        ],
    )
