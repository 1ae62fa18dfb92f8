import argparse
import logging
import sys

import numpy as np

import networks
from netplot_core import DEFAULT_WHITESPACE, MM, NetPlotError
from visualize import DEFAULT_SIZE_CM, netplot

EXAMPLES = ("doc", "mlp", "recurrent")


def build_network(args):
    rng = np.random.default_rng(args.seed)
    if args.example == "doc":
        return networks.make_doc_example()
    if args.example == "mlp":
        return networks.make_mlp(args.sizes, density=args.density, rng=rng)
    return networks.make_recurrent(args.sizes[0], n_conns=args.conns, rng=rng)


def main(argv=None):
    ap = argparse.ArgumentParser(description="Draw a layered network diagram as SVG")
    ap.add_argument("--example", choices=EXAMPLES, default="doc")
    ap.add_argument("--sizes", type=int, nargs="+", default=[3, 12, 2],
                    help="neurons per layer (mlp) or layer size (recurrent)")
    ap.add_argument("--density", type=float, default=0.5)
    ap.add_argument("--conns", type=int, default=8, help="synapses in the recurrent example")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--mask", type=int, default=None,
                    help="collapse layers with more neurons than this (default 10)")
    ap.add_argument("--whitespace", type=float, default=DEFAULT_WHITESPACE)
    ap.add_argument("--weight_scale", type=float, default=1.0, help="line width in mm per unit weight")
    ap.add_argument("--size", type=float, nargs=2, default=list(DEFAULT_SIZE_CM), metavar=("W", "H"),
                    help="canvas size in cm")
    ap.add_argument("--names", nargs="+", default=None)
    ap.add_argument("--out", type=str, default="network.svg")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    nodes, synapses = build_network(args)
    print(f"[INFO] Drawing {len(nodes)} layers, {len(synapses)} synapses...")
    try:
        netplot(nodes, synapses,
                canvas_args={"size": tuple(args.size), "fname": args.out},
                layer_mask=args.mask,
                whitespace=args.whitespace,
                weight_scale=args.weight_scale * MM,
                layer_name=args.names)
    except NetPlotError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    print(f"Saved network diagram to {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
