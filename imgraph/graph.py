"""
Graph.

The Graph owns every operator, indexed by an integer id it hands out itself.
Operators refer to each other only by id: through the connections recorded on
their ports and through their downstream lists. The Graph is the only thing
that adds or removes connections, and it validates each one first, so the
graph is always a DAG whose edges join an output to an input of the same kind.

Calls must be serialized by the caller; nothing here is thread safe.
"""

import sys
import collections
import itertools
import logging
from operator import index as as_index

from .errors import UnknownNode, PortOutOfRange, IncompatibleConnection, CycleDetected
from .port import Connection, Link
from .operator import Operator, Source, Sink, Value
from .adjust import BrightnessContrast
from .blur import Blur
from . import engine

logger = logging.getLogger(__name__)

OPERATOR_KINDS = {
    'source': Source,
    'sink': Sink,
    'value': Value,
    'brightness_contrast': BrightnessContrast,
    'blur': Blur,
}


def operator_class(kind):
    if isinstance(kind, type) and issubclass(kind, Operator):
        return kind
    try:
        return OPERATOR_KINDS[kind]
    except (KeyError, TypeError):
        raise ValueError(f"unknown operator kind {kind!r}; must be one of {sorted(OPERATOR_KINDS)}") from None


class Graph:
    """A graph of image operators that re-evaluates only what a change affects"""
    def __init__(self, verbose=False, debug=False):
        self.nodes = {}
        self._ids = itertools.count(1)
        self.verbose = verbose
        self.debug   = debug
        package_logger = logging.getLogger(__package__)
        if debug:
            package_logger.setLevel(logging.DEBUG)
        elif verbose:
            package_logger.setLevel(logging.INFO)
        else:
            package_logger.setLevel(logging.WARNING)

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, node_id):
        return node_id in self.nodes

    def node(self, node_id):
        try:
            return self.nodes[node_id]
        except (KeyError, TypeError):
            raise UnknownNode(node_id) from None

    def add_node(self, kind, params=None, name=None):
        """Create an operator of the given kind and return its id.
        :param kind: a name in OPERATOR_KINDS or an Operator subclass
        :param params: initial parameter values, set through the operator's setters
        """
        op = operator_class(kind)(name=name)
        for (k,v) in (params or {}).items():
            op.set_parameter(k, v)
        op.id = next(self._ids)
        op.graph = self
        op.dirty = True
        self.nodes[op.id] = op
        logger.info("add %s",op)
        return op.id

    def remove_node(self, node_id):
        """Remove the operator and every connection touching it.
        Operators it fed are marked dirty."""
        op = self.node(node_id)
        for link in self.links_of(node_id):
            self._unlink(link)
        del self.nodes[node_id]
        op.graph = None
        logger.info("remove %s",op)

    ## structure queries

    def upstream(self, node_id):
        """ids of the operators feeding node_id, in input port order"""
        return [conn.node_id for port in self.node(node_id).inputs for conn in port.connections]

    def downstream(self, node_id):
        """ids of the operators fed by node_id, one per connection"""
        return list(self.node(node_id).downstream)

    def _walk(self, node_id, step):
        seen = set()
        queue = collections.deque(step(node_id))
        while queue:
            nid = queue.popleft()
            if nid in seen:
                continue
            seen.add(nid)
            queue.extend(step(nid))
        return seen

    def descendants(self, node_id):
        return self._walk(node_id, self.downstream)

    def ancestors(self, node_id):
        return self._walk(node_id, self.upstream)

    def can_reach(self, from_id, to_id):
        """True if to_id is from_id or is downstream of it"""
        return from_id == to_id or to_id in self.descendants(from_id)

    def links(self):
        """Every connection in the graph"""
        return [Link(nid, i, conn.node_id, conn.port_index)
                for (nid, op) in sorted(self.nodes.items())
                for (i, port) in enumerate(op.outputs)
                for conn in port.connections]

    def links_of(self, node_id):
        """Every connection into or out of node_id"""
        return [link for link in self.links() if node_id in (link.src_id, link.dst_id)]

    def sinks(self):
        return [nid for (nid, op) in sorted(self.nodes.items()) if op.is_sink]

    ## mutation

    @staticmethod
    def _port_index(index, op, what, count):
        """index as a plain int. numpy integers are fine, bools and floats are not."""
        try:
            if isinstance(index, bool):
                raise TypeError(index)
            i = as_index(index)
        except TypeError:
            raise PortOutOfRange(f"{op.name}: {what} port {index!r} is not an integer") from None
        if not 0 <= i < count:
            raise PortOutOfRange(f"{op.name} has no {what} port {index}")
        return i

    def connect(self, src_id, src_port, dst_id, dst_port):
        """Connect output src_port of src_id to input dst_port of dst_id.
        Every check happens before anything is changed."""
        src = self.node(src_id)
        dst = self.node(dst_id)
        if self.can_reach(dst_id, src_id):
            raise CycleDetected(f"connecting {src.name} to {dst.name} would create a cycle")
        src_port = self._port_index(src_port, src, 'output', len(src.outputs))
        dst_port = self._port_index(dst_port, dst, 'input', len(dst.inputs))
        out = src.outputs[src_port]
        inp = dst.inputs[dst_port]
        if not out.accepts(inp):
            raise IncompatibleConnection(f"cannot connect {src.name}.{out.name} ({out.direction.value} {out.kind.value}) "
                                         f"to {dst.name}.{inp.name} ({inp.direction.value} {inp.kind.value})")
        if inp.connected:
            raise IncompatibleConnection(f"{dst.name}.{inp.name} is already connected")

        out.connections.append(Connection(dst_id, dst_port))
        inp.connections.append(Connection(src_id, src_port))
        src.downstream.append(dst_id)
        logger.info("connect %s.%s -> %s.%s",src.name,out.name,dst.name,inp.name)
        self.invalidate(dst_id)

    def disconnect(self, src_id, src_port, dst_id, dst_port):
        self.node(src_id)
        self.node(dst_id)
        link = Link(src_id, src_port, dst_id, dst_port)
        if link not in self.links_of(src_id):
            raise IncompatibleConnection(f"no connection {link}")
        self._unlink(link)

    def _unlink(self, link):
        src = self.node(link.src_id)
        dst = self.node(link.dst_id)
        src.outputs[link.src_port].connections.remove(Connection(link.dst_id, link.dst_port))
        dst.inputs[link.dst_port].connections.remove(Connection(link.src_id, link.src_port))
        src.downstream.remove(link.dst_id)
        logger.info("disconnect %s",link)
        self.invalidate(link.dst_id)

    def invalidate(self, node_id):
        """Mark node_id and everything downstream of it dirty"""
        op = self.node(node_id)
        op.dirty = True
        for nid in self.descendants(node_id):
            self.nodes[nid].dirty = True

    def set_parameter(self, node_id, name, value):
        self.node(node_id).set_parameter(name, value)
        logger.info("set %s.%s=%s",node_id,name,value)

    ## evaluation

    def evaluate(self, node_id):
        """Bring node_id up to date and return its result. Raises EmptyResult if there is none."""
        op = self.node(node_id)
        engine.pull(self, node_id, set())
        return op.result

    def propagate_from(self, node_id):
        """Process node_id and everything downstream of it."""
        self.node(node_id)
        engine.push(self, node_id)

    def evaluate_all(self):
        engine.pull_all(self)

    def print_stats(self, out=None):
        if out is None:
            out = sys.stdout
        for (nid, op) in sorted(self.nodes.items()):
            name = op.__class__.__name__
            print(f"{nid} {name}: calls: {op.count}  mean: {op.t_mean:.2}s  stddev: {op.t_stddev:.2}",
                  file=out)
