#!/usr/bin/env python3
"""Tree view CLI - offline layout/check plus commands for a running backend."""

import argparse
import json
import logging
import os
import sys
import urllib.request
import urllib.error
import urllib.parse

from treeview_core import (
    DescriptionError,
    LayoutConfig,
    UnreachedPolicy,
    build_graph,
    layout_tree,
    load_description,
    validate_graph,
    validation_summary,
)

API_BASE = os.environ.get("TREEVIEW_API", "http://127.0.0.1:8765/api")


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _api_request(method, endpoint, data=None):
    """Make a request to the tree view backend."""
    url = f"{API_BASE}{endpoint}"

    headers = {"Content-Type": "application/json"}
    body = json.dumps(data).encode() if data else None

    req = urllib.request.Request(url, data=body, headers=headers, method=method)

    try:
        with urllib.request.urlopen(req, timeout=30) as response:
            return json.loads(response.read().decode())
    except urllib.error.HTTPError as e:
        error_body = e.read().decode()
        try:
            error_data = json.loads(error_body)
            _json_out({"status": "error", "error": f"API error: {error_data.get('detail', 'Unknown error')}"}, 1)
        except json.JSONDecodeError:
            _json_out({"status": "error", "error": f"API error ({e.code}): {error_body}"}, 1)
    except urllib.error.URLError as e:
        _json_out({"status": "error", "error": f"Connection failed: {e.reason}. Is the tree view backend running?"}, 1)


def _load_graph(file_path):
    try:
        return build_graph(load_description(file_path))
    except DescriptionError as e:
        _json_out({"status": "error", "error": str(e)}, 1)


# ── Offline ──────────────────────────────────────────────────────────────────

def cmd_layout(args):
    graph = _load_graph(args.file)
    options = {"root_id": args.root, "unreached": UnreachedPolicy(args.unreached)}
    if args.h_spacing is not None:
        options["horizontal_spacing"] = args.h_spacing
    if args.v_spacing is not None:
        options["vertical_spacing"] = args.v_spacing
    config = LayoutConfig(**options)

    result = layout_tree(graph.nodes, graph.edges, config)
    _json_out({
        "status": "ok",
        "root_id": result.root_id,
        "unreached": result.unreached,
        "nodes": [n.to_render_dict() for n in result.nodes],
        "edges": [e.to_render_dict() for e in graph.edges],
    })


def cmd_check(args):
    graph = _load_graph(args.file)
    issues = validate_graph(graph, args.root)
    summary = validation_summary(issues)
    _json_out({
        "status": "ok" if summary["valid"] else "invalid",
        "issues": [i.to_dict() for i in issues],
        "summary": summary,
    }, 0 if summary["valid"] else 1)


def cmd_serve(args):
    import uvicorn
    from treeview_backend.config import Settings
    from treeview_backend.main import create_app

    overrides = {}
    if args.data:
        overrides["data_source"] = args.data
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    settings = Settings(**overrides)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


# ── Backend ──────────────────────────────────────────────────────────────────

def cmd_graph(args):
    _json_out(_api_request("GET", "/graph"))


def cmd_focus(args):
    _json_out(_api_request("GET", f"/nodes/{urllib.parse.quote(args.node_id)}"))


def cmd_move(args):
    _json_out(_api_request(
        "PATCH",
        f"/nodes/{urllib.parse.quote(args.node_id)}/position",
        data={"x": args.x, "y": args.y},
    ))


def cmd_connect(args):
    _json_out(_api_request("POST", "/edges", data={
        "source": args.source,
        "target": args.target,
        "id": args.edge_id,
    }))


def cmd_disconnect(args):
    _json_out(_api_request("DELETE", f"/edges/{urllib.parse.quote(args.edge_id)}"))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Tree view CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # Offline
    p = sub.add_parser("layout")
    p.add_argument("file")
    p.add_argument("--root", default=None)
    p.add_argument("--unreached", default=UnreachedPolicy.DROP.value,
                   choices=[policy.value for policy in UnreachedPolicy])
    p.add_argument("--h-spacing", type=float, default=None)
    p.add_argument("--v-spacing", type=float, default=None)

    p = sub.add_parser("check")
    p.add_argument("file")
    p.add_argument("--root", default=None)

    p = sub.add_parser("serve")
    p.add_argument("--data", default=None)
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)

    # Backend
    sub.add_parser("graph")

    p = sub.add_parser("focus")
    p.add_argument("node_id")

    p = sub.add_parser("move")
    p.add_argument("node_id")
    p.add_argument("x", type=float)
    p.add_argument("y", type=float)

    p = sub.add_parser("connect")
    p.add_argument("source")
    p.add_argument("target")
    p.add_argument("--edge-id", default=None)

    p = sub.add_parser("disconnect")
    p.add_argument("edge_id")

    args = parser.parse_args(argv)

    cmd_map = {
        "layout": cmd_layout,
        "check": cmd_check,
        "serve": cmd_serve,
        "graph": cmd_graph,
        "focus": cmd_focus,
        "move": cmd_move,
        "connect": cmd_connect,
        "disconnect": cmd_disconnect,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
