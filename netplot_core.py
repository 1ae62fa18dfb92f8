import logging
import numbers
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# ---- Defaults ----
MM = 72 / 25.4            # points per millimetre
DEFAULT_THRESHOLD = 10
DEFAULT_WHITESPACE = 0.2
DEFAULT_WEIGHT_SCALE = MM
MIN_LAYER_HEIGHT = 0.1
NEURON_RADIUS = 0.4       # fraction of the smaller side of a neuron band
DASH = (2 * MM, 2 * MM)
POSITIVE_COLOR = "red"
NEGATIVE_COLOR = "blue"
SUMMARY_SPREAD = 0.05     # vertical offset of split summary branches
SUMMARY_LOOP = 0.25       # half height of a same-layer summary loop


# ---- Errors ----
class NetPlotError(Exception):
    pass

class LayerMaskError(NetPlotError, ValueError):
    pass

class LayoutError(NetPlotError, ValueError):
    pass

class UnknownNeuronError(NetPlotError, KeyError):
    def __str__(self):
        return str(self.args[0]) if self.args else ""

class CanvasArgsError(NetPlotError, TypeError):
    pass


# ---- Inputs ----
@dataclass(frozen=True)
class Synapse:
    source: Hashable
    target: Hashable
    weight: float

@dataclass(frozen=True)
class Threshold:
    limit: int

@dataclass(frozen=True)
class Explicit:
    flags: Tuple[bool, ...]

MaskSpec = Union[None, Threshold, Explicit]


def mask_spec(layer_mask) -> MaskSpec:
    """Coerce a raw ``layer_mask`` argument (None, int or bool sequence)."""
    if layer_mask is None or isinstance(layer_mask, (Threshold, Explicit)):
        return layer_mask
    if isinstance(layer_mask, bool):
        raise LayerMaskError("layer_mask must be a threshold or one flag per layer, not a bare bool")
    if isinstance(layer_mask, numbers.Integral):
        return Threshold(int(layer_mask))
    if isinstance(layer_mask, str):
        raise LayerMaskError(f"unsupported layer_mask {layer_mask!r}")
    try:
        return Explicit(tuple(bool(f) for f in layer_mask))
    except TypeError:
        raise LayerMaskError(f"unsupported layer_mask {layer_mask!r}") from None


def resolve_mask(spec: MaskSpec, counts: Sequence[int]) -> Tuple[bool, ...]:
    if spec is None:
        spec = Threshold(DEFAULT_THRESHOLD)
    if isinstance(spec, Threshold):
        if spec.limit < 0:
            raise LayerMaskError(f"mask threshold must be non-negative, got {spec.limit}")
        return tuple(c > spec.limit for c in counts)
    if len(spec.flags) != len(counts):
        raise LayerMaskError(
            f"layer_mask has {len(spec.flags)} flags but the network has {len(counts)} layers")
    return spec.flags


# ---- Drawing records ----
@dataclass(frozen=True)
class Style:
    color: str
    width: float
    dash: Optional[Tuple[float, float]] = None


def synapse_style(weight: float, weight_scale: float, backward: bool) -> Style:
    color = NEGATIVE_COLOR if weight < 0 else POSITIVE_COLOR
    return Style(color, abs(weight) * weight_scale, DASH if backward else None)


@dataclass
class LayerBox:
    index: int
    name: str
    count: int
    masked: bool
    left: float
    top: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return (self.left + self.width / 2, self.top + self.height / 2)

@dataclass
class NeuronGlyph:
    id: Hashable
    layer: int
    index: int
    x: float
    y: float
    band_width: float
    band_height: float

    @property
    def radius(self) -> float:
        # in units of a square canvas; the renderer corrects for aspect
        return NEURON_RADIUS * min(self.band_width, self.band_height)

@dataclass
class Position:
    layer: int
    index: int
    xy: Point

@dataclass
class Connector:
    kind: str                      # 'line' or 'curve' (cubic, four points)
    points: Tuple[Point, ...]
    style: Style
    layers: Tuple[int, int]
    synapse: Optional[Synapse] = None
    label: Optional[str] = None
    label_xy: Optional[Point] = None

    @property
    def backward(self) -> bool:
        return self.style.dash is not None

@dataclass
class HiddenEdgeAggregate:
    count_pos: int = 0
    count_neg: int = 0
    sum_pos: float = 0.0
    sum_neg: float = 0.0

    def add(self, weight: float):
        if weight < 0:
            self.count_neg += 1
            self.sum_neg += weight
        else:
            self.count_pos += 1
            self.sum_pos += weight

    @property
    def total(self) -> int:
        return self.count_pos + self.count_neg

    @property
    def mean_pos(self) -> float:
        return self.sum_pos / self.count_pos if self.count_pos else 0.0

    @property
    def mean_neg(self) -> float:
        return self.sum_neg / self.count_neg if self.count_neg else 0.0

@dataclass
class Diagram:
    layers: List[LayerBox]
    neurons: List[NeuronGlyph]
    positions: Dict[Hashable, Position]
    connectors: List[Connector] = field(default_factory=list)
    aggregates: Dict[Tuple[int, int], HiddenEdgeAggregate] = field(default_factory=dict)
    summaries: List[Connector] = field(default_factory=list)
    gap: float = 0.0

    @property
    def mask(self) -> Tuple[bool, ...]:
        return tuple(l.masked for l in self.layers)


def summary_label(count: int, mean: float) -> str:
    return f"{count}× avg {mean:.2f}"


def _midpoint(p1: Point, p2: Point) -> Point:
    return ((p1[0] + p2[0]) / 2, (p1[1] + p2[1]) / 2)

def _bezier_mid(p1: Point, ctrl: Point, p2: Point) -> Point:
    # cubic with both control points at ctrl, evaluated at t = 0.5
    return (0.125 * p1[0] + 0.75 * ctrl[0] + 0.125 * p2[0],
            0.125 * p1[1] + 0.75 * ctrl[1] + 0.125 * p2[1])


# ---- Layout ----
def layout_network(nodes, synapses, layer_mask=None, whitespace=DEFAULT_WHITESPACE,
                   weight_scale=DEFAULT_WEIGHT_SCALE, layer_name=None) -> Optional[Diagram]:
    """Compute the diagram for a layered network.

    All coordinates are normalized to the unit square with y pointing down.
    Returns None for an empty network.
    """
    layers = [list(l) for l in nodes]
    if not layers:
        logger.debug("empty network, nothing to draw")
        return None
    if not 0.0 <= whitespace < 1.0:
        raise LayoutError(f"whitespace must lie in [0, 1), got {whitespace}")
    if weight_scale < 0:
        raise LayoutError(f"weight_scale must be non-negative, got {weight_scale}")

    n_layers = len(layers)
    counts = [len(l) for l in layers]
    mask = resolve_mask(mask_spec(layer_mask), counts)
    visible = [c for c, m in zip(counts, mask) if not m]
    visible_max = max(visible) if visible and max(visible) > 0 else 1

    if layer_name is None:
        names = [f"Layer {j}" for j in range(1, n_layers + 1)]
    else:
        if isinstance(layer_name, str):
            raise LayoutError(f"layer_name must be one name per layer, not a single string {layer_name!r}")
        names = [str(n) for n in layer_name]
        if len(names) != n_layers:
            raise LayoutError(f"got {len(names)} layer names for {n_layers} layers")
    logger.debug("layer sizes %s, mask %s", counts, mask)

    width = (1.0 - whitespace) / n_layers
    if n_layers > 1:
        gap = whitespace / (n_layers - 1)
        lefts = [j * (width + gap) for j in range(n_layers)]
    else:
        gap = whitespace
        lefts = [whitespace / 2]

    boxes: List[LayerBox] = []
    neurons: List[NeuronGlyph] = []
    positions: Dict[Hashable, Position] = {}
    membership: Dict[Hashable, Tuple[int, int]] = {}   # every neuron, masked or not
    for j, ids in enumerate(layers):
        height = 1.0 if mask[j] else max(MIN_LAYER_HEIGHT, counts[j] / visible_max)
        box = LayerBox(j, names[j], counts[j], mask[j], lefts[j], 0.5 - height / 2, width, height)
        boxes.append(box)
        band = height / counts[j] if counts[j] else height
        for i, nid in enumerate(ids):
            if nid in membership:
                raise LayoutError(f"neuron {nid!r} is listed more than once")
            membership[nid] = (j, i)
            if mask[j]:
                continue
            xy = (box.left + width / 2, box.top + (i + 0.5) * band)
            positions[nid] = Position(j, i, xy)
            neurons.append(NeuronGlyph(nid, j, i, xy[0], xy[1], width, band))

    diagram = Diagram(boxes, neurons, positions, gap=gap)

    def lookup(nid):
        try:
            return membership[nid]
        except KeyError:
            raise UnknownNeuronError(f"synapse refers to unknown neuron {nid!r}") from None

    def anchor(nid, layer):
        return boxes[layer].center if mask[layer] else positions[nid].xy

    for syn in synapses:
        s = syn if isinstance(syn, Synapse) else Synapse(*syn)
        l1, n1 = lookup(s.source)
        l2, n2 = lookup(s.target)
        if mask[l1] and mask[l2]:
            diagram.aggregates.setdefault((l1, l2), HiddenEdgeAggregate()).add(s.weight)
            continue
        p1, p2 = anchor(s.source, l1), anchor(s.target, l2)
        if l1 == l2:
            backward = n2 < n1
            mid = _midpoint(p1, p2)
            ctrl = (mid[0] + (-1 if backward else 1) * (gap + width) / 2, mid[1])
            diagram.connectors.append(Connector(
                "curve", (p1, ctrl, ctrl, p2), synapse_style(s.weight, weight_scale, backward),
                (l1, l2), synapse=s))
        else:
            backward = l2 < l1
            diagram.connectors.append(Connector(
                "line", (p1, p2), synapse_style(s.weight, weight_scale, backward),
                (l1, l2), synapse=s))

    for key in sorted(diagram.aggregates):
        diagram.summaries.extend(_summary_connectors(diagram, key, weight_scale))
    if diagram.aggregates:
        logger.debug("hidden edges per layer pair: %s",
                     {k: a.total for k, a in sorted(diagram.aggregates.items())})
    return diagram


def _summary_connectors(diagram: Diagram, key: Tuple[int, int], weight_scale: float) -> List[Connector]:
    l1, l2 = key
    agg = diagram.aggregates[key]
    branches = [(True, agg.count_pos, agg.mean_pos), (False, agg.count_neg, agg.mean_neg)]
    branches = [b for b in branches if b[1]]
    split = len(branches) == 2
    src, dst = diagram.layers[l1], diagram.layers[l2]

    out = []
    for positive, count, mean in branches:
        style = synapse_style(mean, weight_scale, backward=l2 < l1)
        label = summary_label(count, mean)
        if l1 == l2:
            cx, cy = src.center
            side = 1 if positive or not split else -1
            p1, p2 = (cx, cy - SUMMARY_LOOP), (cx, cy + SUMMARY_LOOP)
            ctrl = (cx + side * (diagram.gap + src.width) / 2, cy)
            out.append(Connector("curve", (p1, ctrl, ctrl, p2), style, key,
                                 label=label, label_xy=_bezier_mid(p1, ctrl, p2)))
        else:
            # both directions present: forward lane above the midline, backward below
            lane = 0.0
            if (l2, l1) in diagram.aggregates:
                lane = 2 * SUMMARY_SPREAD * (-1 if l1 < l2 else 1)
            offset = lane + (0.0 if not split else (-SUMMARY_SPREAD if positive else SUMMARY_SPREAD))
            p1 = (src.center[0], src.center[1] + offset)
            p2 = (dst.center[0], dst.center[1] + offset)
            out.append(Connector("line", (p1, p2), style, key,
                                 label=label, label_xy=_midpoint(p1, p2)))
    return out
