"""Snapshot codec — moves a page's global scope into a Python graph.

The in-page script walks ``globalThis`` and encodes every reachable object
once, as a node holding ``[name, value]`` members where ``value`` is either
a string or ``{"ref": index}`` pointing at another node. Decoding builds one
Python dict per node and wires references to the shared dict, so identity
and cycles survive the trip and the scanner can break cycles exactly as it
would in the page.

The script pre-prunes ignored names and stops at ``maxDepth``/``maxNodes``
to bound the payload. It always captures at least what the scanner would
read, so the scanner's own limits remain authoritative.
"""

from __future__ import annotations

from typing import Any

import jsonschema

from objector.contracts.load import validate_instance
from objector.errors import SnapshotError

SNAPSHOT_SCHEMA = "snapshot.schema.json"
SNAPSHOT_VERSION = 1

SNAPSHOT_SCRIPT = """
(options) => {
    const maxDepth = options.maxDepth;
    const maxNodes = options.maxNodes;
    const ignored = new Set(options.ignoredNames || []);
    const ids = new Map();
    const nodes = [];
    const pending = [];
    let truncated = false;

    function ref(obj, depth) {
        if (ids.has(obj)) {
            return { ref: ids.get(obj) };
        }
        if (nodes.length >= maxNodes) {
            truncated = true;
            return null;
        }
        const index = nodes.length;
        const node = { members: [] };
        ids.set(obj, index);
        nodes.push(node);
        pending.push([obj, node, depth]);
        return { ref: index };
    }

    ref(globalThis, 0);
    // Breadth-first, so every object is recorded at its shallowest depth.
    for (let i = 0; i < pending.length; i++) {
        const [obj, node, depth] = pending[i];
        if (depth >= maxDepth) continue;
        let names;
        try {
            names = [];
            for (const name in obj) names.push(name);
        } catch (e) {
            node.error = String(e);
            continue;
        }
        for (const name of names) {
            try {
                const value = obj[name];
                if (typeof value === 'string') {
                    node.members.push([name, value]);
                } else if (value && typeof value === 'object' && !ignored.has(name)) {
                    const r = ref(value, depth + 1);
                    if (r) node.members.push([name, r]);
                }
            } catch (e) {
                // guarded accessor
            }
        }
    }
    return { version: 1, root: 0, truncated: truncated, nodes: nodes };
}
"""


def snapshot_arguments(max_depth: int, ignored_names: frozenset[str], max_nodes: int) -> dict[str, Any]:
    """Argument object passed to ``SNAPSHOT_SCRIPT``."""
    return {
        "maxDepth": max_depth,
        "ignoredNames": sorted(ignored_names),
        "maxNodes": max_nodes,
    }


def decode_snapshot(payload: Any) -> dict[str, Any]:
    """Rebuild the root object from a snapshot payload.

    Raises ``SnapshotError`` if the payload is malformed.
    """
    try:
        validate_instance(payload, SNAPSHOT_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise SnapshotError(f"malformed snapshot: {exc.message}") from exc

    nodes = payload["nodes"]
    graph: list[dict[str, Any]] = [{} for _ in nodes]
    root = payload["root"]
    if root >= len(graph):
        raise SnapshotError(f"snapshot root {root} out of range ({len(graph)} nodes)")

    for node, target in zip(nodes, graph):
        for name, value in node["members"]:
            if isinstance(value, str):
                target[name] = value
                continue
            index = value["ref"]
            if index >= len(graph):
                raise SnapshotError(f"dangling reference {index} at member {name!r}")
            target[name] = graph[index]
    return graph[root]
