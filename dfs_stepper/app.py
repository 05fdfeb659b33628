import logging

import dash
from dash import html, dcc
from dash_extensions.enrich import DashProxy, Trigger, TriggerTransform
from dash.dependencies import Output, Input, State

from .config import DEFAULT_SPEED, DEFAULT_START_NODE, MIN_SPEED, MAX_SPEED, SPEED_STEP
from .engine import DFSEngine, Snapshot, clamp_speed
from .graph import sample_graph
from .view import LEGEND_ITEMS, NODE_COLORS, build_figure

LOG = logging.getLogger(__name__)

# ---------- STYLES ----------
button_style = {
    "padding": "8px 16px",
    "borderRadius": "4px",
    "border": "none",
    "color": "white",
    "cursor": "pointer",
    "margin": "0 8px",
    "fontWeight": "bold",
    "fontFamily": "Roboto, sans-serif",
    "fontSize": "14px",
}
start_button_style = {**button_style, "backgroundColor": "#3b82f6"}
pause_button_style = {**button_style, "backgroundColor": "#f59e0b"}
step_button_style = {**button_style, "backgroundColor": "#10b981"}
reset_button_style = {**button_style, "backgroundColor": "#ef4444"}
hidden = {"display": "none"}

box_style = {
    "background": "white",
    "padding": "12px",
    "borderRadius": "8px",
    "boxShadow": "0 1px 3px rgba(0,0,0,0.12)",
    "fontFamily": "Roboto, sans-serif",
}

external_stylesheets = [
    "https://fonts.googleapis.com/css2?family=Roboto:wght@400;700&display=swap"
]

# trigger id -> engine action
ACTIONS = {
    "start-btn": "start",
    "pause-btn": "pause",
    "step-btn": "step",
    "reset-btn": "reset",
    "speed-slider": "speed",
    "auto-step": "tick",
    "dfs-graph": "select",
}


# ---------- STATE HELPERS ----------
def load_snapshot(data):
    if not data:
        return Snapshot()
    try:
        return Snapshot.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        LOG.warning("Discarding malformed run state %r: %s", data, e)
        return Snapshot()


def clicked_node(click_data):
    if not click_data:
        return None
    points = click_data.get("points") or []
    if not points:
        return None
    # only the node trace carries customdata
    return points[0].get("customdata")


def apply_action(graph, data, action, start_node, payload=None):
    """
    Run one control-panel action against the stored run state.

    Returns (snapshot dict, start node). The engine is rebuilt from the store
    on every call; the browser's dcc.Interval plays the role of the timer, so
    no scheduler is attached.
    """
    engine = DFSEngine.restore(graph, load_snapshot(data))

    if action == "start":
        engine.start(start_node)
    elif action == "pause":
        engine.pause()
    elif action == "step":
        engine.step()
    elif action == "tick":
        engine.tick()
    elif action == "reset":
        engine.reset()
    elif action == "speed":
        engine.set_speed(clamp_speed(payload))
    elif action == "select":
        snap = engine.snapshot()
        if payload is not None and not snap.is_running and not snap.is_done:
            start_node = payload
            engine.reset()
    else:
        raise ValueError(f"Unknown action {action!r}")

    return engine.snapshot().to_dict(), start_node


def trigger_id(triggered):
    """Component id of the first entry in callback_context.triggered."""
    if not triggered:
        return None
    return triggered[0]["prop_id"].split(".")[0]


def handle_trigger(graph, triggered, speed_value, click_data, run_data, current_start):
    """Body of the store-updating callback; (no_update, no_update) when nothing applies."""
    action = ACTIONS.get(trigger_id(triggered))
    if action is None:
        return dash.no_update, dash.no_update

    payload = None
    if action == "speed":
        payload = speed_value
    elif action == "select":
        payload = clicked_node(click_data)
        if payload is None:
            # edge or background click
            return dash.no_update, dash.no_update

    new_data, new_start = apply_action(graph, run_data, action, current_start, payload)
    LOG.debug("%s -> %s", action, new_data)
    return new_data, new_start


def render_run(graph, run_data, current_start):
    snapshot = load_snapshot(run_data)
    running, done = snapshot.is_running, snapshot.is_done
    step_blocked = running or done
    return (
        build_figure(graph, snapshot),
        create_info_panel(snapshot, current_start),
        snapshot.speed,
        not running,
        "Restart" if done else "Start",
        {**start_button_style, **hidden} if running else start_button_style,
        pause_button_style if running else {**pause_button_style, **hidden},
        step_blocked,
        {**step_button_style, "opacity": 0.5, "cursor": "not-allowed"} if step_blocked
        else step_button_style,
        f"{snapshot.speed}ms",
    )


# ---------- LAYOUT ----------
def create_color_legend():
    rows = []
    for state, label in LEGEND_ITEMS:
        rows.append(html.Div([
            html.Span("⬤", style={"color": NODE_COLORS[state]["fill"], "marginRight": "8px"}),
            html.Span(label, style={"fontSize": "14px"}),
        ], style={"marginBottom": "4px"}))
    return html.Div(
        [html.Div("Legend", style={"fontWeight": "bold", "marginBottom": "8px"})] + rows,
        style=box_style,
    )


def create_info_panel(snapshot, start_node):
    def row(label, value):
        return html.Div([
            html.Span(f"{label}: ", style={"fontWeight": "bold"}),
            value,
        ], style={"marginBottom": "4px"})

    return html.Div([
        html.Div("Algorithm State", style={"fontWeight": "bold", "marginBottom": "8px"}),
        row("Start Node", str(start_node)),
        row("Status", snapshot.status.value.capitalize()),
        row("Current Node", str(snapshot.current) if snapshot.current is not None else "None"),
        row("Stack", "[" + ", ".join(map(str, snapshot.stack)) + "]"),
        row("Visited", "[" + ", ".join(map(str, snapshot.visited)) + "]"),
        row("Steps", str(snapshot.steps)),
    ])


def create_layout(graph, start_node, speed):
    snapshot = Snapshot(speed=speed)
    return html.Div([
        html.Div([
            html.H1("Graph DFS Visualization",
                    style={"margin": "0 0 16px 0", "fontSize": "24px", "fontWeight": "bold"}),
            html.Div([
                html.Button("Start", id="start-btn", n_clicks=0, style=start_button_style),
                html.Button("Pause", id="pause-btn", n_clicks=0, style={**pause_button_style, **hidden}),
                html.Button("Step", id="step-btn", n_clicks=0, style=step_button_style),
                html.Button("Reset", id="reset-btn", n_clicks=0, style=reset_button_style),
                html.Span("Speed:", style={"marginLeft": "16px", "marginRight": "8px"}),
                html.Div(
                    dcc.Slider(id="speed-slider", min=MIN_SPEED, max=MAX_SPEED, step=SPEED_STEP,
                               value=speed, marks=None),
                    style={"width": "160px"},
                ),
                html.Span(f"{speed}ms", id="speed-label", style={"marginLeft": "8px"}),
            ], style={"display": "flex", "alignItems": "center", "gap": "8px"}),
        ], style={"padding": "16px", "borderBottom": "1px solid #e5e7eb"}),

        html.Div([
            html.Div([
                dcc.Graph(id="dfs-graph", figure=build_figure(graph, snapshot),
                          config={"displayModeBar": False}, style={"height": "75vh"}),
                html.Div("Click on a node to set it as the starting point",
                         style={"fontSize": "12px", "color": "#6b7280"}),
            ], style={"flex": 3, "position": "relative"}),
            html.Div([
                create_color_legend(),
                html.Div(id="info-box", style={**box_style, "marginTop": "12px"},
                         children=create_info_panel(snapshot, start_node)),
            ], style={"flex": 1, "padding": "16px", "borderLeft": "1px solid #e5e7eb"}),
        ], style={"flex": 1, "display": "flex"}),

        dcc.Interval(id="auto-step", interval=speed, disabled=True),
        dcc.Store(id="run-store", data=snapshot.to_dict()),
        dcc.Store(id="start-node-store", data=start_node),
    ], style={"width": "100vw", "height": "100vh", "display": "flex", "flexDirection": "column"})


# ---------- APP ----------
def create_app(graph=None, start_node=DEFAULT_START_NODE, speed=DEFAULT_SPEED):
    graph = graph if graph is not None else sample_graph()
    speed = clamp_speed(speed)

    app = DashProxy(__name__,
                    external_stylesheets=external_stylesheets,
                    transforms=[TriggerTransform()])
    app.title = "Graph DFS Visualization"
    app.layout = create_layout(graph, start_node, speed)

    @app.callback(
        Output("run-store", "data"),
        Output("start-node-store", "data"),
        Trigger("start-btn", "n_clicks"),
        Trigger("pause-btn", "n_clicks"),
        Trigger("step-btn", "n_clicks"),
        Trigger("reset-btn", "n_clicks"),
        Trigger("auto-step", "n_intervals"),
        Input("speed-slider", "value"),
        Input("dfs-graph", "clickData"),
        State("run-store", "data"),
        State("start-node-store", "data"),
        prevent_initial_call=True
    )
    def unified_callback(speed_value, click_data, run_data, current_start):
        return handle_trigger(graph, dash.callback_context.triggered,
                              speed_value, click_data, run_data, current_start)

    @app.callback(
        Output("dfs-graph", "figure"),
        Output("info-box", "children"),
        Output("auto-step", "interval"),
        Output("auto-step", "disabled"),
        Output("start-btn", "children"),
        Output("start-btn", "style"),
        Output("pause-btn", "style"),
        Output("step-btn", "disabled"),
        Output("step-btn", "style"),
        Output("speed-label", "children"),
        Input("run-store", "data"),
        Input("start-node-store", "data"),
    )
    def render(run_data, current_start):
        return render_run(graph, run_data, current_start)

    return app
