"""
Evaluation engine.

pull(graph, node_id, visited) - targeted evaluation. Walks upstream depth-first from
                                node_id and processes dirty operators after their inputs.
push(graph, node_id)          - localized propagation. Processes node_id and then
                                everything downstream of it, in topological order.

Both share the rule that a clean operator has clean ancestors (dirtiness is
downward-closed), so a walk stops at the first clean operator it meets. The
visited set holds every id handled in the current pass, which is what keeps an
operator with several consumers from being looked at, or run, more than once.
"""

import collections
import logging

logger = logging.getLogger(__name__)


def pull(graph, node_id, visited):
    """Make node_id clean, evaluating its dirty ancestors first."""
    stack = [(node_id, False)]
    while stack:
        (nid, expanded) = stack.pop()
        if expanded:
            graph.node(nid).process()
            continue
        if nid in visited:
            continue
        visited.add(nid)
        if not graph.node(nid).dirty:
            continue
        stack.append((nid, True))
        for up_id in reversed(graph.upstream(nid)):
            stack.append((up_id, False))


def pull_all(graph):
    """Evaluate every sink in one pass. Operators that feed no sink are left alone."""
    visited = set()
    for nid in graph.sinks():
        pull(graph, nid, visited)


def downstream_order(graph, node_id):
    """Operators reachable downstream of node_id, breadth-first in topological order.
    An operator comes after every operator in the set that feeds it."""
    reach = graph.descendants(node_id)
    indegree = collections.Counter()
    for nid in reach | {node_id}:
        for d in graph.node(nid).downstream:
            if d in reach:
                indegree[d] += 1
    order = []
    queue = collections.deque([node_id])
    while queue:
        nid = queue.popleft()
        for d in graph.node(nid).downstream:
            if d not in reach:
                continue
            indegree[d] -= 1
            if indegree[d]==0:
                order.append(d)
                queue.append(d)
    return order


def push(graph, node_id):
    """Process node_id, then each dirty operator downstream of it exactly once.
    Meant for after a parameter change on node_id when its inputs are known to be up to date.
    If they are not, the stale ancestors are evaluated first rather than read."""
    stale = [up_id for up_id in graph.upstream(node_id) if graph.node(up_id).dirty]
    if stale:
        logger.warning("propagate_from(%s): upstream %s dirty, evaluating them first",node_id,stale)
    visited = set()
    pull(graph, node_id, visited)
    for nid in downstream_order(graph, node_id):
        pull(graph, nid, visited)
