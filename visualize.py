import io
import logging
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.patches import Ellipse, PathPatch, Rectangle
from matplotlib.path import Path
from matplotlib.transforms import offset_copy

from netplot_core import (
    DEFAULT_WEIGHT_SCALE, DEFAULT_WHITESPACE, NEURON_RADIUS, POSITIVE_COLOR,
    CanvasArgsError, Connector, Diagram, layout_network,
)

logger = logging.getLogger(__name__)

CM = 1 / 2.54             # inches per centimetre
DEFAULT_SIZE_CM = (10, 10)
OUTER_MARGIN = 0.1
NAME_OFFSET_PT = 5
NAME_FONTSIZE = 8
NEURON_FONTSIZE = 6
SUMMARY_FONTSIZE = 6
LAYER_FILL = "silver"
LAYER_EDGE = "lightgray"
CANVAS_KEYS = ("size", "fname", "dpi", "background")

_CURVE_CODES = [Path.MOVETO, Path.CURVE4, Path.CURVE4, Path.CURVE4]
_LINE_CODES = [Path.MOVETO, Path.LINETO]


def _canvas_options(canvas_args) -> dict:
    opts = dict(canvas_args or {})
    unknown = sorted(set(opts) - set(CANVAS_KEYS))
    if unknown:
        raise CanvasArgsError(f"unknown canvas option(s): {', '.join(unknown)}")
    size = opts.get("size", DEFAULT_SIZE_CM)
    try:
        w_cm, h_cm = (float(v) for v in size)
    except (TypeError, ValueError):
        raise CanvasArgsError(f"size must be (width, height) in cm, got {size!r}") from None
    if w_cm <= 0 or h_cm <= 0:
        raise CanvasArgsError(f"size must be positive, got {size!r}")
    opts["size"] = (w_cm, h_cm)
    opts.setdefault("fname", None)
    opts.setdefault("dpi", None)
    opts.setdefault("background", "white")
    return opts


def _connector_patch(c: Connector, gid: str) -> PathPatch:
    codes = _CURVE_CODES if c.kind == "curve" else _LINE_CODES
    return PathPatch(Path(list(c.points), codes), fill=False,
                     edgecolor=c.style.color, linewidth=c.style.width,
                     linestyle=(0, c.style.dash) if c.style.dash else "solid",
                     capstyle="round", zorder=1, gid=gid)


def _draw_layers(ax, diagram: Diagram, name_transform):
    for box in diagram.layers:
        cx, cy = box.center
        ax.text(cx, box.top, box.name, ha="center", va="bottom", fontsize=NAME_FONTSIZE,
                transform=name_transform, gid=f"layer-name-{box.index}")
        if box.masked:
            ax.add_patch(Rectangle((box.left, box.top), box.width, box.height,
                                   facecolor=LAYER_FILL, edgecolor="none", zorder=0,
                                   gid=f"layer-{box.index}"))
            ax.text(cx, cy, f"({box.count} neurons)", rotation=90, ha="center", va="center",
                    fontsize=NAME_FONTSIZE, zorder=3, gid=f"layer-count-{box.index}")
        else:
            ax.add_patch(Rectangle((box.left, box.top), box.width, box.height,
                                   fill=False, edgecolor=LAYER_EDGE, linewidth=0.5, zorder=0,
                                   gid=f"layer-{box.index}"))


def _draw_neurons(ax, diagram: Diagram, ax_w: float, ax_h: float):
    # radius in inches so circles stay round on non-square canvases
    for n in diagram.neurons:
        r = NEURON_RADIUS * min(n.band_width * ax_w, n.band_height * ax_h)
        ax.add_patch(Ellipse((n.x, n.y), 2 * r / ax_w, 2 * r / ax_h,
                             facecolor=LAYER_FILL, edgecolor="black", linewidth=1, zorder=2,
                             gid=f"neuron-{n.layer}-{n.index}"))
        ax.text(n.x, n.y, str(n.id), ha="center", va="center", fontsize=NEURON_FONTSIZE,
                zorder=3, gid=f"label-{n.layer}-{n.index}")


def _draw_connectors(ax, diagram: Diagram):
    for k, c in enumerate(diagram.connectors):
        ax.add_patch(_connector_patch(c, f"synapse-{k}"))
    for c in diagram.summaries:
        sign = "pos" if c.style.color == POSITIVE_COLOR else "neg"
        gid = f"summary-{c.layers[0]}-{c.layers[1]}-{sign}"
        ax.add_patch(_connector_patch(c, gid))
        ax.text(c.label_xy[0], c.label_xy[1], c.label, ha="center", va="center",
                fontsize=SUMMARY_FONTSIZE, zorder=3, gid=f"{gid}-label",
                bbox=dict(boxstyle="round,pad=0.2", facecolor="white", edgecolor="none"))


def render_diagram(diagram: Diagram, canvas_args=None) -> str:
    """Draw a computed diagram with matplotlib and return the SVG text.

    ``canvas_args`` may hold ``size`` (width, height in cm), ``fname`` (path or
    stream the SVG is also written to), ``dpi`` and ``background``.
    """
    opts = _canvas_options(canvas_args)
    w_cm, h_cm = opts["size"]
    # no date stamp, so repeated renders are byte-identical
    save_kwargs = {"format": "svg", "facecolor": opts["background"], "metadata": {"Date": None}}
    if opts["dpi"] is not None:
        save_kwargs["dpi"] = opts["dpi"]

    rc = {"svg.fonttype": "none", "svg.hashsalt": "netplot", "lines.scale_dashes": False}
    with plt.rc_context(rc):
        fig = plt.figure(figsize=(w_cm * CM, h_cm * CM))
        try:
            ax = fig.add_axes([OUTER_MARGIN, OUTER_MARGIN, 1 - 2 * OUTER_MARGIN, 1 - 2 * OUTER_MARGIN])
            ax.set_xlim(0, 1)
            ax.set_ylim(1, 0)
            ax.axis("off")
            ax_w = w_cm * CM * (1 - 2 * OUTER_MARGIN)
            ax_h = h_cm * CM * (1 - 2 * OUTER_MARGIN)

            name_transform = offset_copy(ax.transData, fig=fig, y=NAME_OFFSET_PT, units="points")
            _draw_layers(ax, diagram, name_transform)
            _draw_neurons(ax, diagram, ax_w, ax_h)
            _draw_connectors(ax, diagram)

            buf = io.StringIO()
            fig.savefig(buf, **save_kwargs)
            if opts["fname"] is not None:
                fig.savefig(opts["fname"], **save_kwargs)
                logger.debug("wrote SVG to %r", opts["fname"])
        finally:
            plt.close(fig)
    return buf.getvalue()


def netplot(nodes, synapses, canvas_args=None, layer_mask=None, whitespace=DEFAULT_WHITESPACE,
            weight_scale=DEFAULT_WEIGHT_SCALE, layer_name=None) -> Optional[str]:
    """Draw a layered network as an SVG diagram.

    ``nodes`` lists the neuron ids of each layer, ``synapses`` holds
    ``(source id, target id, weight)`` triplets. ``layer_mask`` is either a
    neuron count above which a layer is collapsed into a summary box, or one
    flag per layer. Line widths are ``abs(weight) * weight_scale`` points.
    Returns the SVG text, or None when ``nodes`` is empty.

    Example:
        n = [[1, 2, 3], range(6, 101), [4, 5]]
        s = [(2, 7, 3.3), (7, 5, -0.3), (4, 5, 2), (5, 4, -2)]
        netplot(n, s, layer_name=["Input", "Hidden", "Output"])
    """
    diagram = layout_network(nodes, synapses, layer_mask=layer_mask, whitespace=whitespace,
                             weight_scale=weight_scale, layer_name=layer_name)
    if diagram is None:
        return None
    return render_diagram(diagram, canvas_args)
