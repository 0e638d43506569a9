#!/usr/bin/env python3
"""
Load an image, run it through brightness/contrast and a blur, and save the result.
"""

import sys
import logging

from imgraph.graph import Graph
from imgraph.blur import BlurMode
from imgraph.constants import C

if __name__=="__main__":
    import argparse
    parser = argparse.ArgumentParser(description="Adjust and blur an image with an operator graph",
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    parser.add_argument("infile", help='Image to read (path or s3:// url)')
    parser.add_argument("outfile", help="Where to write the result (path or s3:// url)")
    parser.add_argument("--brightness", type=int, default=C.DEFAULT_BRIGHTNESS)
    parser.add_argument("--contrast", type=float, default=C.DEFAULT_CONTRAST)
    parser.add_argument("--radius", type=int, default=C.DEFAULT_RADIUS)
    parser.add_argument("--mode", choices=[m.value for m in BlurMode], default=BlurMode.UNIFORM.value)
    parser.add_argument("--angle", type=float, default=C.DEFAULT_ANGLE)
    parser.add_argument("--amount", type=float, default=0.0, help="0 disables the blur")
    parser.add_argument("--format", choices=sorted(C.FORMATS), default=C.DEFAULT_FORMAT)
    parser.add_argument("--quality", type=int, default=C.DEFAULT_QUALITY)
    parser.add_argument("--show-kernel", help="Print the blur kernel", action='store_true')
    parser.add_argument("--show", help="Show the result in a window", action='store_true')
    parser.add_argument("--stats", help="Print operator statistics", action='store_true')
    parser.add_argument("--verbose", action='store_true')
    parser.add_argument("--debug", action='store_true')
    args = parser.parse_args()

    logging.basicConfig(format='%(asctime)s %(name)s %(levelname)s %(message)s')

    g = Graph(verbose=args.verbose, debug=args.debug)
    source = g.add_node('source')
    bc = g.add_node('brightness_contrast', {'brightness':args.brightness, 'contrast':args.contrast})
    blur = g.add_node('blur', {'radius':args.radius, 'mode':args.mode,
                               'angle':args.angle, 'amount':args.amount})
    sink = g.add_node('sink', {'format':args.format, 'quality':args.quality})
    g.connect(source, 0, bc, 0)
    g.connect(bc, 0, blur, 0)
    g.connect(blur, 0, sink, 0)

    g.node(source).load(args.infile)
    result = g.evaluate(sink)
    g.node(sink).save(args.outfile)

    if args.show_kernel:
        for row in g.node(blur).kernel:
            print(" ".join(f"{v:.3f}" for v in row))
    if args.show:
        result.show(title=args.outfile)
    if args.stats:
        g.print_stats(out=sys.stdout)
