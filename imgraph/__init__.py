"""Design document.

Abstractions related to image content:

PixelBuffer - An image held in memory as a height x width x 3 uint8 array
              in RGB order. Buffers are immutable; an operator that
              changes pixels makes a new buffer. load() and save() move
              buffers to and from files or s3 objects.

Abstractions related to image processing:

Port -  A typed socket on an operator. Ports are INPUT or OUTPUT and
        carry IMAGE or PARAMETER data. Output ports cache the value
        last computed.

Operator - the nodes of the graph. Each has fixed input and output
        ports, a dirty flag, and process(), which recomputes the
        outputs from the inputs when dirty. Parameter setters mark the
        operator, and everything downstream of it, dirty.

        "Operator" is a class that is subclassed: Source, Sink, Value,
        BrightnessContrast and Blur. Each node is an instance.

Graph - Holds all of the operators, keyed by id, and all of the
        connections between them. connect() refuses anything that
        would create a cycle or join ports of different kinds.

Engine - Decides what to run. evaluate() pulls from a target,
         running each dirty ancestor once; propagate_from() pushes
         from a changed operator to everything downstream of it.

"""
