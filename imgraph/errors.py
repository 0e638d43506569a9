"""
Exceptions raised by the graph, the operators and the image collaborators.
"""

class GraphError(RuntimeError):
    """Base class for everything the graph core raises."""


class UnknownNode(GraphError):
    """No operator with that id in the graph."""
    def __init__(self, node_id):
        super().__init__(f"unknown node {node_id}")
        self.node_id = node_id


class ParameterError(GraphError):
    """Unknown parameter name or a value that cannot be converted."""


class InvalidConnection(GraphError):
    """connect() or disconnect() was rejected. The graph was not modified."""


class PortOutOfRange(InvalidConnection):
    """Port index does not exist on the operator."""


class IncompatibleConnection(InvalidConnection):
    """Wrong direction, mismatched data kind, or input already connected."""


class CycleDetected(InvalidConnection):
    """The connection would make the graph cyclic."""


class EvalError(GraphError):
    """An evaluation pass failed."""


class MissingInput(EvalError):
    """A required input port has no connection."""


class EmptyResult(EvalError):
    """Result queried before anything was produced."""


class ImageIOError(OSError):
    """Image could not be loaded or saved."""


class NotImageError(ImageIOError):
    """cv2 cannot decode the bytes as an image"""
