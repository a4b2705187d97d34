"""Structural metrics for an assembly, computed on a NetworkX view of the graph.

Nodes are cell ids in ascending order, labelled with mode, role, polygon and
position; edges carry link strength and the two connection-point names.
"""

from __future__ import annotations

from typing import Any

import networkx as nx
import numpy as np

from modular_assembly.domain.graph import ConnectivityGraph


def to_networkx(graph: ConnectivityGraph) -> nx.Graph:
    """Build an undirected labelled NetworkX graph from the assembly."""
    g = nx.Graph()
    for cell in graph.cells_in_order():
        g.add_node(
            cell.cell_id,
            mode=cell.mode.value,
            role=cell.structural_role,
            polygon_id=cell.polygon_id,
            x=cell.pose.x,
            z=cell.pose.z,
        )
    for a, b, conn in graph.get_edges():
        g.add_edge(
            a,
            b,
            strength=conn.strength,
            points=(conn.local_point.value, conn.remote_point.value),
        )
    return g


def structure_summary(graph: ConnectivityGraph) -> dict[str, Any]:
    """Connectivity figures for the whole assembly.

    ``diameter`` is measured on the largest connected component and is 0 for
    an empty graph.
    """
    g = to_networkx(graph)
    if g.number_of_nodes() == 0:
        return {
            "n_components": 0,
            "n_independent_cycles": 0,
            "mean_degree": 0.0,
            "max_degree": 0,
            "degree_histogram": [],
            "diameter": 0,
        }

    degrees = np.array([d for _, d in g.degree()], dtype=np.int64)
    largest = max(nx.connected_components(g), key=len)
    return {
        "n_components": nx.number_connected_components(g),
        "n_independent_cycles": len(nx.cycle_basis(g)),
        "mean_degree": float(degrees.mean()),
        "max_degree": int(degrees.max()),
        "degree_histogram": np.bincount(degrees).tolist(),
        "diameter": nx.diameter(g.subgraph(largest)),
    }
