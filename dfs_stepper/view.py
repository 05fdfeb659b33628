import plotly.graph_objs as go

# ---------- STATE -> COLOUR ----------
NODE_COLORS = {
    "current": {"fill": "#fbbf24", "border": "#92400e"},
    "visited": {"fill": "#4ade80", "border": "#166534"},
    "stack": {"fill": "#93c5fd", "border": "#1e40af"},
    "unvisited": {"fill": "#d1d5db", "border": "#374151"},
}

EDGE_STYLES = {
    "active": {"color": "#3b82f6", "width": 3, "dash": "dot"},
    "visited": {"color": "#22c55e", "width": 2, "dash": "solid"},
    "default": {"color": "#9ca3af", "width": 1, "dash": "solid"},
}

LEGEND_ITEMS = [
    ("current", "Current Node"),
    ("visited", "Visited Node"),
    ("stack", "Node in Stack"),
    ("unvisited", "Unvisited Node"),
]


def node_state(snapshot, node_id):
    if node_id == snapshot.current:
        return "current"
    if node_id in snapshot.visited:
        return "visited"
    if node_id in snapshot.stack:
        return "stack"
    return "unvisited"


def edge_status(snapshot, edge):
    source, target = edge
    if source in snapshot.visited and target in snapshot.visited:
        return "visited"
    current = snapshot.current
    if (current == source and target in snapshot.stack) or (
        current == target and source in snapshot.stack
    ):
        return "active"
    return "default"


def build_figure(graph, snapshot, title="Graph DFS Visualization"):
    pos = {node.id: (node.x, node.y) for node in graph.nodes}
    fig = go.Figure()

    for edge in graph.edges:
        # dangling edges have nowhere to be drawn
        if edge.source not in pos or edge.target not in pos:
            continue
        x0, y0 = pos[edge.source]
        x1, y1 = pos[edge.target]
        style = EDGE_STYLES[edge_status(snapshot, edge)]
        fig.add_trace(go.Scatter(
            x=[x0, x1, None],
            y=[y0, y1, None],
            mode="lines",
            line=dict(width=style["width"], color=style["color"], dash=style["dash"]),
            hoverinfo="text",
            text=[f"{edge.source} → {edge.target}"] * 3,
            showlegend=False,
        ))
        fig.add_annotation(
            x=x1, y=y1, ax=x0, ay=y0,
            xref="x", yref="y", axref="x", ayref="y",
            showarrow=True, arrowhead=2, arrowsize=1.2,
            arrowwidth=style["width"], arrowcolor=style["color"],
            standoff=18, text="",
        )

    states = [node_state(snapshot, node.id) for node in graph.nodes]
    fig.add_trace(go.Scatter(
        x=[node.x for node in graph.nodes],
        y=[node.y for node in graph.nodes],
        mode="markers+text",
        marker=dict(
            size=36,
            color=[NODE_COLORS[s]["fill"] for s in states],
            line=dict(width=2, color=[NODE_COLORS[s]["border"] for s in states]),
        ),
        text=[node.id for node in graph.nodes],
        textposition="middle center",
        textfont=dict(size=16, color="#111"),
        customdata=[node.id for node in graph.nodes],
        hovertext=[f"{node.id}: {s}" for node, s in zip(graph.nodes, states)],
        hoverinfo="text",
        showlegend=False,
    ))

    fig.update_layout(
        title=title,
        xaxis=dict(visible=False),
        # screen coordinates grow downwards
        yaxis=dict(visible=False, autorange="reversed", scaleanchor="x"),
        margin=dict(l=20, r=20, b=20, t=40),
        plot_bgcolor="white",
        showlegend=False,
    )
    return fig
