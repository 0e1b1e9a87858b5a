"""Parent DAG checks over the signature element edge set"""

import networkx as nx
from typing import Iterable, List, Set, Tuple


class ParentGraph:
    """Directed graph of element edges, parent -> child

    Single Responsibility: Graph checks for parent replacement

    Handles:
    - Self-parent and cycle detection before an edge set is written
    - Ancestor queries
    """

    def __init__(self, edges: Iterable[Tuple[int, int]]):
        """
        Args:
            edges: (child_id, parent_id) pairs as stored in signature_element_parents
        """
        self.graph = nx.DiGraph()
        self.graph.add_edges_from((parent_id, child_id) for child_id, parent_id in edges)

    def creates_cycle(self, element_id: int, parent_ids: Iterable[int]) -> List[int]:
        """Return the proposed parents that would close a cycle through element_id

        The element's current parent edges are ignored since the new set
        replaces them. A parent closes a cycle when it is the element itself
        or is reachable from the element through child edges.
        """
        graph = self.graph.copy()
        if graph.has_node(element_id):
            graph.remove_edges_from(list(graph.in_edges(element_id)))

        offending = []
        for parent_id in sorted(set(parent_ids)):
            if parent_id == element_id:
                offending.append(parent_id)
            elif graph.has_node(element_id) and graph.has_node(parent_id) \
                    and nx.has_path(graph, element_id, parent_id):
                offending.append(parent_id)
        return offending

    def ancestors(self, element_id: int) -> Set[int]:
        """All transitive parents of an element"""
        if not self.graph.has_node(element_id):
            return set()
        return nx.ancestors(self.graph, element_id)
