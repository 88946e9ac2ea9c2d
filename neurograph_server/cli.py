#!/usr/bin/env python3
"""NeuroGraph CLI - drive the diagram editor backend from the shell."""

import argparse
import json
import os
import sys
import urllib.request
import urllib.error
import urllib.parse

API_BASE = os.environ.get("NEUROGRAPH_API", "http://127.0.0.1:8765/api")


def _json_out(data):
    print(json.dumps(data))
    sys.exit(0)


def _api_request(method, endpoint, data=None, params=None, raw=False):
    """Make a request to the NeuroGraph backend."""
    url = f"{API_BASE}{endpoint}"

    if params:
        filtered = {k: v for k, v in params.items() if v is not None}
        if filtered:
            url = f"{url}?{urllib.parse.urlencode(filtered)}"

    headers = {"Content-Type": "application/json"}
    body = json.dumps(data).encode() if data is not None else None

    req = urllib.request.Request(url, data=body, headers=headers, method=method)

    try:
        with urllib.request.urlopen(req, timeout=30) as response:
            payload = response.read().decode()
            return payload if raw else json.loads(payload)
    except urllib.error.HTTPError as e:
        error_body = e.read().decode()
        try:
            error_data = json.loads(error_body)
            _json_out({"status": "error", "error": f"API error: {error_data.get('detail', 'Unknown error')}"})
        except json.JSONDecodeError:
            _json_out({"status": "error", "error": f"API error ({e.code}): {error_body}"})
    except urllib.error.URLError as e:
        _json_out({"status": "error", "error": f"Connection failed: {e.reason}. Is `neurograph serve` running?"})


def _parse_list_arg(value):
    """Parse a comma separated list argument."""
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _str_to_bool(value):
    return str(value).lower() not in ("false", "0", "no")


# ── Service ──────────────────────────────────────────────────────────────────

def cmd_serve(args):
    from .main import run
    run()


# ── Core ─────────────────────────────────────────────────────────────────────

def cmd_get_current(args):
    _json_out(_api_request("GET", "/diagram"))


def cmd_new(args):
    _json_out(_api_request("POST", "/diagram/new", params={"sample": str(not args.empty).lower()}))


def cmd_clear(args):
    _json_out(_api_request("POST", "/diagram/clear"))


# ── Nodes ────────────────────────────────────────────────────────────────────

def cmd_add_node(args):
    node_data = {"kind": args.kind, "label": args.label}
    for field in ("sub_label", "symbol", "x", "y", "width", "height", "color"):
        value = getattr(args, field)
        if value is not None:
            node_data[field] = value
    _json_out(_api_request("POST", "/nodes", data=node_data))


def cmd_update_node(args):
    updates = {}
    for field in ("kind", "label", "sub_label", "symbol", "x", "y", "width", "height", "color"):
        value = getattr(args, field)
        if value is not None:
            updates[field] = value

    _json_out(_api_request("PATCH", f"/nodes/{args.node_id}", data=updates))


def cmd_delete_node(args):
    _json_out(_api_request("DELETE", f"/nodes/{args.node_id}"))


# ── Edges ────────────────────────────────────────────────────────────────────

def cmd_add_edge(args):
    _json_out(_api_request("POST", "/edges", data={
        "source": args.from_node,
        "target": args.to_node,
        "label": args.label,
        "dashed": args.dashed,
    }))


def cmd_update_edge(args):
    updates = {}
    if args.label is not None:
        updates["label"] = args.label
    if args.dashed is not None:
        updates["dashed"] = _str_to_bool(args.dashed)

    _json_out(_api_request("PATCH", f"/edges/{args.edge_id}", data=updates))


def cmd_delete_edge(args):
    _json_out(_api_request("DELETE", f"/edges/{args.edge_id}"))


# ── Selection & Layout ───────────────────────────────────────────────────────

def cmd_select(args):
    if args.clear:
        _json_out(_api_request("DELETE", "/selection"))
    _json_out(_api_request("POST", "/selection", data={
        "node_ids": _parse_list_arg(args.node_ids) or [],
        "edge_id": args.edge_id,
    }))


def cmd_align(args):
    _json_out(_api_request("POST", "/layout/align", data={
        "directive": args.directive,
        "node_ids": _parse_list_arg(args.node_ids),
    }))


# ── Export & Analysis ────────────────────────────────────────────────────────

def cmd_export(args):
    content = _api_request("GET", "/export/svg", raw=True)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(content)
        _json_out({"status": "exported", "path": os.path.abspath(args.output)})
    sys.stdout.write(content)
    sys.exit(0)


def cmd_validate(args):
    result = _api_request("GET", "/diagram/validate")
    issues = result.get("issues", [])
    summary = result.get("summary", {})

    output = {
        "valid": summary.get("valid", True),
        "summary": f"{summary.get('errors', 0)} errors, {summary.get('warnings', 0)} warnings, {summary.get('info', 0)} info",
        "issues": issues,
    }
    _json_out(output)


# ── Main ─────────────────────────────────────────────────────────────────────

KINDS = ["LAYER", "OPERATION", "INPUT", "OUTPUT", "NOTE"]
SYMBOLS = ["SUM", "MULT", "CONCAT", "DOT"]
DIRECTIVES = ["left", "right", "center-x", "top", "bottom", "center-y", "distribute-h", "distribute-v"]


def main():
    parser = argparse.ArgumentParser(description="NeuroGraph diagram editor CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # Service
    sub.add_parser("serve")

    # Core
    sub.add_parser("get-current")

    p = sub.add_parser("new")
    p.add_argument("--empty", action="store_true", help="Start without the example diagram")

    sub.add_parser("clear")

    # Nodes
    p = sub.add_parser("add-node")
    p.add_argument("--kind", type=str.upper, choices=KINDS, default="LAYER")
    p.add_argument("--label", default="Node")
    p.add_argument("--sub-label", dest="sub_label", default=None)
    p.add_argument("--symbol", type=str.upper, choices=SYMBOLS, default=None)
    p.add_argument("--x", type=float, default=None)
    p.add_argument("--y", type=float, default=None)
    p.add_argument("--width", type=float, default=None)
    p.add_argument("--height", type=float, default=None)
    p.add_argument("--color", default=None, help="Color token, e.g. bg-blue-100")

    p = sub.add_parser("update-node")
    p.add_argument("--node-id", required=True)
    p.add_argument("--kind", type=str.upper, choices=KINDS, default=None)
    p.add_argument("--label", default=None)
    p.add_argument("--sub-label", dest="sub_label", default=None)
    p.add_argument("--symbol", type=str.upper, choices=SYMBOLS, default=None)
    p.add_argument("--x", type=float, default=None)
    p.add_argument("--y", type=float, default=None)
    p.add_argument("--width", type=float, default=None)
    p.add_argument("--height", type=float, default=None)
    p.add_argument("--color", default=None)

    p = sub.add_parser("delete-node")
    p.add_argument("--node-id", required=True)

    # Edges
    p = sub.add_parser("add-edge")
    p.add_argument("--from-node", required=True)
    p.add_argument("--to-node", required=True)
    p.add_argument("--label", default=None)
    p.add_argument("--dashed", action="store_true")

    p = sub.add_parser("update-edge")
    p.add_argument("--edge-id", required=True)
    p.add_argument("--label", default=None)
    p.add_argument("--dashed", default=None, help="true/false")

    p = sub.add_parser("delete-edge")
    p.add_argument("--edge-id", required=True)

    # Selection & Layout
    p = sub.add_parser("select")
    p.add_argument("--node-ids", default=None, help="Comma separated node ids")
    p.add_argument("--edge-id", default=None)
    p.add_argument("--clear", action="store_true")

    p = sub.add_parser("align")
    p.add_argument("--directive", required=True, choices=DIRECTIVES)
    p.add_argument("--node-ids", default=None, help="Comma separated node ids (default: current selection)")

    # Export & Analysis
    p = sub.add_parser("export")
    p.add_argument("--output", default=None, help="File to write (default: stdout)")

    sub.add_parser("validate")

    args = parser.parse_args()

    commands = {
        "serve": cmd_serve,
        "get-current": cmd_get_current,
        "new": cmd_new,
        "clear": cmd_clear,
        "add-node": cmd_add_node,
        "update-node": cmd_update_node,
        "delete-node": cmd_delete_node,
        "add-edge": cmd_add_edge,
        "update-edge": cmd_update_edge,
        "delete-edge": cmd_delete_edge,
        "select": cmd_select,
        "align": cmd_align,
        "export": cmd_export,
        "validate": cmd_validate,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()
