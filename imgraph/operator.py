"""
Operator implementation and some simple operators.
"""

import math
import time
import logging
from abc import ABC, abstractmethod

from .constants import C
from .errors import MissingInput, EmptyResult, ParameterError
from .port import Port, DataKind
from .buffer import PixelBuffer, load, save

logger = logging.getLogger(__name__)


def clamp(v, lo, hi):
    return max(lo, min(hi, v))

def to_float(name, value):
    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise ParameterError(f"{name}: {value!r} is not a number") from e
    if math.isnan(v):
        raise ParameterError(f"{name}: NaN is not allowed")
    return v

def to_int(name, value):
    v = to_float(name, value)
    if math.isinf(v):
        return v
    return int(round(v))


class Operator(ABC):
    """Abstract base class for the processing DAG.

    Operators are created by Graph.add_node(), which assigns the id and sets
    self.graph. Subclasses create their ports in __init__ and implement compute().
    """

    title = "Operator"
    parameters = ()

    def __init__(self, name=None):
        self.id = None
        self.name = name if name is not None else self.title
        self.graph = None       # my graph
        self.inputs = []
        self.outputs = []
        self.downstream = []    # ids of the operators fed by my outputs, one per connection
        self.dirty = True
        self.sum_t  = 0
        self.sum_t2 = 0
        self.count  = 0

    def __repr__(self):
        return f"<{self.__class__.__name__} id={self.id} name={self.name!r} dirty={self.dirty}>"

    def process(self):
        """Recompute the outputs if dirty, then mark clean. A no-op when clean.
        Upstream operators must already be clean; the evaluation engine guarantees that.
        If compute() raises, the operator stays dirty."""
        if not self.dirty:
            return
        logger.debug("<%s %s> processing",self.__class__.__name__,self.id)
        t0 = time.time()
        self.compute()
        t = time.time() - t0
        self.sum_t  += t
        self.sum_t2 += (t*t)
        self.count  += 1
        self.mark_clean()

    @abstractmethod
    def compute(self):
        """Read the inputs and set the value of every output port."""

    def input_value(self, i):
        """The cached value of the output port feeding input i.
        None if the input is optional and not connected."""
        port = self.inputs[i]
        if not port.connections:
            if port.required:
                raise MissingInput(f"{self.name}: input '{port.name}' is not connected")
            return None
        conn = port.connections[0]
        return self.graph.node(conn.node_id).outputs[conn.port_index].value

    def parameter_input(self, i, current, convert, lo, hi):
        """Value for a parameter that may be driven by PARAMETER input i.
        Connected values are clamped exactly as the setter would."""
        v = self.input_value(i)
        if v is None:
            return current
        return clamp(convert(self.inputs[i].name, v), lo, hi)

    def mark_clean(self):
        self.dirty = False

    def mark_dirty(self):
        """Mark this operator and everything downstream of it dirty."""
        if self.graph is not None:
            self.graph.invalidate(self.id)
        else:
            self.dirty = True

    def set_parameter(self, name, value):
        if name not in self.parameters:
            raise ParameterError(f"{self.name} has no parameter '{name}'")
        getattr(self, 'set_' + name)(value)

    def get_parameters(self):
        return {name: getattr(self, name) for name in self.parameters}

    @property
    def result(self):
        """The value a targeted evaluation returns: the first output."""
        if not self.outputs or self.outputs[0].value is None:
            raise EmptyResult(f"{self.name} has produced no output")
        return self.outputs[0].value

    @property
    def is_sink(self):
        return len(self.outputs) == 0

    @property
    def t_mean(self):
        return self.sum_t / self.count if self.count>0 else float("nan")

    @property
    def t2_mean(self):
        return self.sum_t2 / self.count if self.count>0 else float("nan")

    @property
    def t_variance(self):
        return self.t2_mean - self.t_mean * self.t_mean

    @property
    def t_stddev(self):
        return math.sqrt(max(self.t_variance, 0.0)) if self.count>0 else float("nan")


class Source(Operator):
    """Holds a loaded image and publishes a copy of it"""
    title = "Image Input"

    def __init__(self, name=None, buffer=None):
        super().__init__(name)
        self.outputs.append(Port.output(DataKind.IMAGE, "Output"))
        self.buffer = None
        if buffer is not None:
            self.set_buffer(buffer)

    def load(self, url):
        """Load the image at url. Raises ImageIOError and leaves the old image if it cannot."""
        self.set_buffer(load(url))

    def set_buffer(self, buffer):
        if buffer is not None and not isinstance(buffer, PixelBuffer):
            buffer = PixelBuffer(buffer)
        self.buffer = buffer
        self.mark_dirty()

    def compute(self):
        self.outputs[0].value = self.buffer.copy() if self.buffer is not None else None


class Sink(Operator):
    """Stores its input as the final output of the graph"""
    title = "Image Output"
    parameters = ('format', 'quality')

    def __init__(self, name=None):
        super().__init__(name)
        self.inputs.append(Port.input(DataKind.IMAGE, "Input"))
        self.format = C.DEFAULT_FORMAT
        self.quality = C.DEFAULT_QUALITY
        self.stored = None

    def set_format(self, fmt):
        fmt = str(fmt).upper()
        if fmt not in C.FORMATS:
            raise ParameterError(f"format must be one of {sorted(C.FORMATS)}, not {fmt}")
        self.format = C.FORMAT_JPG if fmt=='JPEG' else fmt
        self.mark_dirty()

    def set_quality(self, quality):
        self.quality = clamp(to_int('quality', quality), C.QUALITY_MIN, C.QUALITY_MAX)
        self.mark_dirty()

    def compute(self):
        value = self.input_value(0)
        self.stored = value.copy() if value is not None else None

    @property
    def result(self):
        if self.stored is None:
            raise EmptyResult(f"{self.name} has no result")
        return self.stored

    def save(self, url):
        """Write the result using this sink's format and quality"""
        save(url, self.result, self.format, self.quality)


class Value(Operator):
    """Publishes a number on a PARAMETER port so it can drive other operators"""
    title = "Value"
    parameters = ('value',)

    def __init__(self, name=None, value=0.0):
        super().__init__(name)
        self.outputs.append(Port.output(DataKind.PARAMETER, "Value"))
        self.value = to_float('value', value)

    def set_value(self, value):
        self.value = to_float('value', value)
        self.mark_dirty()

    def compute(self):
        self.outputs[0].value = self.value
