import logging
import threading
import time

import dash
from dash import Dash, Input, Output, State, callback_context, html
from dash.exceptions import PreventUpdate

from dashboard.intents import (
    OVERVIEW_FORM_PREFIX,
    PAGE_FORM_PREFIX,
    dispatch_intent,
    edit_action_from_input,
    form_input_ids,
    overview_intent_from_trigger,
    page_intent_from_trigger,
)
from dashboard.layout import build_dashboard_layout
from dashboard.plotting import DEFAULT_PLOT_THEME, create_chart_figure
from dashboard.ui_state import (
    entity_options,
    form_values_from_buffers,
    overview_modal_state,
    page_panel_state,
    page_status_text,
    with_hidden,
)
from runtime.paths import get_assets_dir
from shared_state import session_log_components, session_logs_tail
from time_utils import get_config_tz, now_utc

PAGE_TRIGGER_IDS = (
    "page-entity-select",
    "page-sensor-kind",
    "page-window-select",
    "page-switch-entity-btn",
    "page-edit-plant-btn",
    "page-edit-group-btn",
    "page-edit-cancel-btn",
    "page-edit-save-btn",
    "page-delete-confirm",
)

OVERVIEW_TRIGGER_IDS = (
    "overview-sensor-kind",
    "overview-window-select",
    "overview-refresh-btn",
    "overview-create-plant-btn",
    "overview-create-group-btn",
    "overview-create-cancel-btn",
    "overview-create-save-btn",
    "overview-delete-group-btn",
)

_VALUE_TRIGGERS = {"page-entity-select", "page-sensor-kind", "page-window-select", "overview-sensor-kind", "overview-window-select"}


def _trigger_input(trigger_id):
    return Input(trigger_id, "value" if trigger_id in _VALUE_TRIGGERS else "n_clicks")


def _parse_trigger():
    triggered = callback_context.triggered or []
    if not triggered:
        return None, None
    entry = triggered[0]
    return str(entry.get("prop_id", "")).split(".", 1)[0], entry.get("value")


def _log_row(entry):
    parts = [
        html.Span(f"[{entry['timestamp']}] ", className="log-timestamp"),
        html.Span(f"{entry['level']}: ", className=f"log-level log-level-{entry['level'].lower()}"),
    ]
    if entry.get("component"):
        parts.append(html.Span(f"{entry['component']} ", className="log-component"))
    parts.append(html.Span(entry["message"], className="log-message"))
    return html.Div(parts)


def build_dashboard_app(config, shared_data, page, overview):
    """Create the Dash app and register every callback against the two controllers."""
    app = Dash(
        __name__,
        suppress_callback_exceptions=True,
        assets_folder=get_assets_dir(__file__),
        title="PlantBuddy",
    )
    app.layout = build_dashboard_layout(config)

    tz = get_config_tz(config)
    plot_theme = dict(DEFAULT_PLOT_THEME)
    page_form_ids = form_input_ids(PAGE_FORM_PREFIX)
    overview_form_ids = form_input_ids(OVERVIEW_FORM_PREFIX)

    def _action_token(intent):
        return {"kind": intent["kind"], "at": now_utc().isoformat()}

    def _updated_label(snapshot):
        if snapshot.last_updated is None:
            return ""
        return f" Updated {snapshot.last_updated.astimezone(tz).strftime('%Y-%m-%d %H:%M:%S')}."

    # --- Detail page ---

    @app.callback(
        Output("page-entity-select", "options"),
        [Input("main-tabs", "value"), Input("page-action", "data")],
        prevent_initial_call=False,
    )
    def update_entity_options(active_tab, _page_action):
        if active_tab != "plant":
            raise PreventUpdate
        return entity_options(page.list_entities())

    @app.callback(
        [
            Output("page-action", "data"),
            Output("page-entity-select", "value"),
            Output("page-sensor-kind", "value"),
        ],
        [_trigger_input(trigger_id) for trigger_id in PAGE_TRIGGER_IDS],
        prevent_initial_call=True,
    )
    def handle_page_controls(*_args):
        trigger_id, value = _parse_trigger()
        intent = page_intent_from_trigger(trigger_id, value=value)
        if intent is None:
            raise PreventUpdate
        logging.info("Dashboard: page intent %s %s", intent["kind"], intent["payload"])
        dispatch_intent(page, intent)

        entity_value = None if intent["kind"] == "page.switch_entity" else dash.no_update
        kind_value = page.default_kind.canonical_name if intent["kind"] == "page.select_entity" else dash.no_update
        return _action_token(intent), entity_value, kind_value

    @app.callback(
        Output("page-delete-modal", "className"),
        [
            Input("page-delete-btn", "n_clicks"),
            Input("page-delete-cancel", "n_clicks"),
            Input("page-delete-confirm", "n_clicks"),
        ],
        prevent_initial_call=True,
    )
    def toggle_delete_modal(_delete_clicks, _cancel_clicks, _confirm_clicks):
        trigger_id, _value = _parse_trigger()
        return with_hidden("modal-overlay", trigger_id != "page-delete-btn")

    @app.callback(
        [Output(input_id, "value") for input_id in page_form_ids],
        Input("page-action", "data"),
        prevent_initial_call=True,
    )
    def populate_page_form(page_action):
        if not page_action or page_action.get("kind") != "page.open_edit":
            raise PreventUpdate
        return form_values_from_buffers(page.snapshot().buffers)

    @app.callback(
        Output("page-form-noop", "data"),
        [Input(input_id, "value") for input_id in page_form_ids],
        prevent_initial_call=True,
    )
    def push_page_form_edits(*_values):
        trigger_id, value = _parse_trigger()
        action = edit_action_from_input(PAGE_FORM_PREFIX, trigger_id, value)
        if action is None:
            raise PreventUpdate
        page.apply_edit(action)
        return trigger_id

    @app.callback(
        [
            Output("page-status", "children"),
            Output("page-selection", "className"),
            Output("page-detail", "className"),
            Output("page-edit-panel", "className"),
            Output("page-plant-form", "className"),
            Output("page-group-form", "className"),
            Output("page-edit-plant-btn", "disabled"),
            Output("page-edit-group-btn", "disabled"),
            Output("page-delete-btn", "disabled"),
            Output("page-graph", "figure"),
        ],
        [Input("interval-component", "n_intervals"), Input("page-action", "data")],
        prevent_initial_call=False,
    )
    def render_page(_n_intervals, _page_action):
        snapshot = page.snapshot()
        panels = page_panel_state(snapshot)
        status = page_status_text(snapshot) + _updated_label(snapshot)
        return (
            status,
            with_hidden("control-panel", panels["selection_hidden"]),
            with_hidden("control-panel", panels["detail_hidden"]),
            with_hidden("edit-panel", panels["edit_hidden"]),
            with_hidden("form-section", panels["plant_form_hidden"]),
            with_hidden("form-section", panels["group_form_hidden"]),
            panels["actions_disabled"],
            panels["actions_disabled"],
            panels["actions_disabled"],
            create_chart_figure(snapshot.chart, f"page-{snapshot.entity_id}", plot_theme),
        )

    # --- Overview ---

    @app.callback(
        Output("overview-action", "data"),
        [_trigger_input(trigger_id) for trigger_id in OVERVIEW_TRIGGER_IDS],
        State("overview-delete-group-id", "value"),
        prevent_initial_call=True,
    )
    def handle_overview_controls(*args):
        delete_group_id = args[-1]
        trigger_id, value = _parse_trigger()
        if trigger_id == "overview-delete-group-btn":
            value = delete_group_id
        intent = overview_intent_from_trigger(trigger_id, value=value)
        if intent is None:
            raise PreventUpdate
        logging.info("Dashboard: overview intent %s %s", intent["kind"], intent["payload"])
        dispatch_intent(overview, intent)
        return _action_token(intent)

    @app.callback(
        [Output(input_id, "value") for input_id in overview_form_ids],
        Input("overview-action", "data"),
        prevent_initial_call=True,
    )
    def populate_overview_form(overview_action):
        kind = (overview_action or {}).get("kind")
        if kind not in {"overview.open_create_plant", "overview.open_create_group"}:
            raise PreventUpdate
        return form_values_from_buffers(overview.snapshot().buffers)

    @app.callback(
        Output("overview-form-noop", "data"),
        [Input(input_id, "value") for input_id in overview_form_ids],
        prevent_initial_call=True,
    )
    def push_overview_form_edits(*_values):
        trigger_id, value = _parse_trigger()
        action = edit_action_from_input(OVERVIEW_FORM_PREFIX, trigger_id, value)
        if action is None:
            raise PreventUpdate
        overview.apply_edit(action)
        return trigger_id

    @app.callback(
        [
            Output("overview-status", "children"),
            Output("overview-group-list", "children"),
            Output("overview-create-modal", "className"),
            Output("overview-plant-form", "className"),
            Output("overview-group-form", "className"),
            Output("overview-create-modal-title", "children"),
            Output("overview-create-error", "children"),
            Output("overview-graph", "figure"),
        ],
        [Input("interval-component", "n_intervals"), Input("overview-action", "data")],
        prevent_initial_call=False,
    )
    def render_overview(_n_intervals, _overview_action):
        snapshot = overview.snapshot()
        modal = overview_modal_state(snapshot)
        status = f"{len(snapshot.groups)} groups, {len(snapshot.plants)} plants."
        if snapshot.refreshing:
            status += " Refreshing..."
        status += _updated_label(snapshot)
        if snapshot.last_error and modal["modal_hidden"]:
            status += f" Error: {snapshot.last_error}"

        group_rows = [html.Tr([html.Td(group_id), html.Td(name)]) for group_id, name in snapshot.groups]
        group_table = html.Table(
            className="summary-table",
            children=[html.Thead(html.Tr([html.Th("Id"), html.Th("Name")])), html.Tbody(group_rows)],
        )
        return (
            status,
            group_table,
            with_hidden("modal-overlay", modal["modal_hidden"]),
            with_hidden("form-section", modal["plant_form_hidden"]),
            with_hidden("form-section", modal["group_form_hidden"]),
            modal["title"],
            snapshot.last_error or "",
            create_chart_figure(snapshot.chart, "overview", plot_theme),
        )

    # --- Logs ---

    @app.callback(
        [Output("session-logs", "children"), Output("logs-component-filter", "options")],
        [
            Input("interval-component", "n_intervals"),
            Input("main-tabs", "value"),
            Input("logs-component-filter", "value"),
        ],
        prevent_initial_call=False,
    )
    def render_session_logs(_n_intervals, active_tab, component):
        if active_tab != "logs":
            raise PreventUpdate
        options = [{"label": name, "value": name} for name in session_log_components(shared_data)]
        entries = session_logs_tail(shared_data, limit=200, component=component)
        if not entries:
            return [html.Div("No logs yet.", className="logs-empty")], options
        rows = [_log_row(entry) for entry in reversed(entries)]
        return rows, options

    return app


def dashboard_agent(config, shared_data, page, overview):
    """Dash dashboard serving the overview and plant detail pages."""
    logging.info("Dashboard: agent started.")

    app = build_dashboard_app(config, shared_data, page, overview)
    dashboard_host = str(config.get("DASHBOARD_HOST", "127.0.0.1"))
    dashboard_port = int(config.get("DASHBOARD_PORT", 8050))

    def run_app():
        app.run(host=dashboard_host, port=dashboard_port, debug=False, threaded=True)

    thread = threading.Thread(target=run_app, daemon=True)
    thread.start()
    logging.info("Dashboard: serving on http://%s:%s", dashboard_host, dashboard_port)

    while not shared_data["shutdown_event"].is_set():
        time.sleep(1)

    logging.info("Dashboard: agent stopped.")
