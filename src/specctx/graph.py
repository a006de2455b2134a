"""Dependency graph operations for specification workspaces.

Provides a transient, arena-style graph built from loaded specifications:
- Nodes are spec IDs in ascending order, addressed by position
- Edges are adjacency lists of node positions, sorted and de-duplicated

Design decisions:
- Built fresh for every validation run, never persisted
- Uses iterative algorithms to avoid recursion limits on deep graphs
- All traversals follow ascending ID order so results are deterministic
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from specctx.validators.protocols import ValidatableSpec

# Relationship kinds that imply ordering or hierarchy. "related_to" is
# informational and never forms a cycle.
FORWARD_KINDS = frozenset({"blocked_by", "child_of"})
REVERSED_KINDS = frozenset({"parent_of"})

_WHITE, _GREY, _BLACK = 0, 1, 2


@dataclass(frozen=True)
class DependencyGraph:
    """Directed graph of ordering dependencies between specs.

    An edge ``a -> b`` means ``a`` comes after ``b``: ``a`` is blocked by
    ``b`` or is a child of ``b``. ``parent_of`` links are stored reversed
    so that both hierarchy kinds point from child to parent.

    Attributes:
        nodes: Spec IDs in ascending order.
        adjacency: For each node position, sorted positions of its targets.
    """

    nodes: tuple[str, ...]
    adjacency: tuple[tuple[int, ...], ...]

    @classmethod
    def from_specs(cls, specs: Iterable[ValidatableSpec]) -> DependencyGraph:
        """Build the graph from loaded specs.

        Self-loops and links to unknown specs are left out; they are
        reported by other checks.

        Args:
            specs: Specifications to include as nodes.

        Returns:
            A new DependencyGraph.
        """
        spec_list = list(specs)
        nodes = tuple(sorted({spec.id_str() for spec in spec_list}))
        index = {spec_id: position for position, spec_id in enumerate(nodes)}
        edges: list[set[int]] = [set() for _ in nodes]

        for spec in spec_list:
            source = index[spec.id_str()]
            for target_id, kind in spec.dependency_links():
                target = index.get(target_id)
                if target is None or target == source:
                    continue
                if kind in FORWARD_KINDS:
                    edges[source].add(target)
                elif kind in REVERSED_KINDS:
                    edges[target].add(source)

        return cls(nodes=nodes, adjacency=tuple(tuple(sorted(e)) for e in edges))

    def __len__(self) -> int:
        return len(self.nodes)

    def find_cycles(self) -> list[list[str]]:
        """Find cycles using a three-colour depth-first traversal.

        Nodes are unvisited (white), in progress (grey) or done (black).
        A back-edge to a grey node closes a cycle consisting of the current
        traversal path from that node onwards. Each distinct cycle is
        reported once, keyed by its rotation starting at the smallest node.

        Returns:
            Cycles as lists of spec IDs in traversal order, without repeating
            the first ID at the end. Empty if the graph is acyclic.
        """
        color = [_WHITE] * len(self.nodes)
        cycles: list[list[str]] = []
        signatures: set[tuple[int, ...]] = set()

        for start in range(len(self.nodes)):
            if color[start] != _WHITE:
                continue

            color[start] = _GREY
            path = [start]
            stack = [(start, iter(self.adjacency[start]))]

            while stack:
                node, successors = stack[-1]
                descended = False

                for successor in successors:
                    if color[successor] == _WHITE:
                        color[successor] = _GREY
                        path.append(successor)
                        stack.append((successor, iter(self.adjacency[successor])))
                        descended = True
                        break
                    if color[successor] == _GREY:
                        cycle = path[path.index(successor):]
                        signature = _canonical(cycle)
                        if signature not in signatures:
                            signatures.add(signature)
                            cycles.append([self.nodes[p] for p in cycle])

                if not descended:
                    stack.pop()
                    path.pop()
                    color[node] = _BLACK

        return cycles


def _canonical(cycle: list[int]) -> tuple[int, ...]:
    pivot = cycle.index(min(cycle))
    return tuple(cycle[pivot:] + cycle[:pivot])
