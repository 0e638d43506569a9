"""
Ports and connections.

A Port is a typed socket on an operator. Output ports cache the value the
operator last computed. Input ports have no storage; they read through their
connection.

Connections are recorded on both ports. The output port holds the (node_id, port_index)
of every input it feeds, and the input port holds the (node_id, port_index) of the
output feeding it. Only the Graph adds or removes them, and always both halves together.
"""

import collections
from enum import Enum


class Direction(Enum):
    INPUT  = "input"
    OUTPUT = "output"


class DataKind(Enum):
    IMAGE     = "image"
    PARAMETER = "parameter"


# One half of a connection: the peer operator id and the peer port index.
Connection = collections.namedtuple('Connection', ['node_id', 'port_index'])

# A whole connection, as reported by Graph.links()
Link = collections.namedtuple('Link', ['src_id', 'src_port', 'dst_id', 'dst_port'])


class Port:
    __slots__ = ('direction', 'kind', 'name', 'required', 'connections', 'value')

    def __init__(self, direction, kind, name, required=False):
        self.direction = direction
        self.kind = kind
        self.name = name
        self.required = required
        self.connections = []
        self.value = None

    @classmethod
    def input(cls, kind, name, required=False):
        return cls(Direction.INPUT, kind, name, required=required)

    @classmethod
    def output(cls, kind, name):
        return cls(Direction.OUTPUT, kind, name)

    def __repr__(self):
        return f"<Port {self.name} {self.direction.value} {self.kind.value} connections={self.connections}>"

    @property
    def is_input(self):
        return self.direction == Direction.INPUT

    @property
    def is_output(self):
        return self.direction == Direction.OUTPUT

    @property
    def connected(self):
        return len(self.connections) > 0

    def accepts(self, other):
        """True if an edge from this port to other has the right directions and kinds"""
        return self.is_output and other.is_input and self.kind == other.kind
