import io

import matplotlib.pyplot as plt
import pytest

from netplot_core import CanvasArgsError, UnknownNeuronError, layout_network
from visualize import netplot, render_diagram

RED = "#ff0000"
BLUE = "#0000ff"


def test_forward_network_svg():
    svg = netplot([[1, 2, 3], [4, 5]], [(1, 4, 2.0), (2, 5, -1.0)])
    assert svg.lstrip().startswith("<?xml")
    assert "Layer 1" in svg and "Layer 2" in svg
    assert svg.count('id="neuron-') == 5
    assert svg.count('id="synapse-') == 2
    assert RED in svg and BLUE in svg
    assert "stroke-dasharray" not in svg

def test_masked_single_layer_svg():
    svg = netplot([list(range(1, 21))], [])
    assert "(20 neurons)" in svg
    assert 'id="layer-0"' in svg
    assert 'id="neuron-' not in svg
    assert 'id="synapse-' not in svg

def test_backward_synapse_is_dashed():
    svg = netplot([[1], [2]], [(2, 1, 1.0)])
    assert "stroke-dasharray" in svg

def test_hidden_edge_summary_svg():
    a, b = list(range(1, 12)), list(range(20, 32))
    svg = netplot([a, b], [(1, 20, 1.0), (1, 20, 3.0), (1, 20, -2.0)])
    assert 'id="summary-0-1-pos"' in svg
    assert 'id="summary-0-1-neg"' in svg
    assert "2× avg 2.00" in svg
    assert "1× avg -2.00" in svg
    assert 'id="synapse-' not in svg

def test_custom_layer_names():
    svg = netplot([[1], [2]], [(1, 2, 1.0)], layer_name=["Input", "Output"])
    assert "Input" in svg and "Output" in svg
    assert "Layer 1" not in svg

def test_empty_network_returns_none(tmp_path):
    out = tmp_path / "empty.svg"
    assert netplot([], [], canvas_args={"fname": str(out)}) is None
    assert not out.exists()

def test_writes_to_path_and_stream(tmp_path):
    out = tmp_path / "net.svg"
    svg = netplot([[1], [2]], [(1, 2, 1.0)], canvas_args={"fname": str(out), "size": (12, 8)})
    assert out.read_text(encoding="utf-8") == svg

    stream = io.BytesIO()
    netplot([[1], [2]], [(1, 2, 1.0)], canvas_args={"fname": stream})
    assert b"<svg" in stream.getvalue()

def test_canvas_size_in_centimetres():
    svg = netplot([[1]], [], canvas_args={"size": (2.54, 5.08)})
    assert 'width="72pt"' in svg
    assert 'height="144pt"' in svg

def test_unknown_canvas_option():
    d = layout_network([[1]], [])
    with pytest.raises(CanvasArgsError):
        render_diagram(d, {"colour": "red"})

def test_unknown_neuron_produces_no_output(tmp_path):
    out = tmp_path / "bad.svg"
    with pytest.raises(UnknownNeuronError):
        netplot([[1]], [(1, 2, 1.0)], canvas_args={"fname": str(out)})
    assert not out.exists()

def test_figures_are_closed():
    before = len(plt.get_fignums())
    netplot([[1, 2], [3]], [(1, 3, 1.0), (3, 2, -1.0)])
    assert len(plt.get_fignums()) == before

def test_element_ids_unique_for_ids_with_same_text():
    svg = netplot([[1, "1"], [2]], [])
    assert svg.count('id="neuron-0-0"') == 1
    assert svg.count('id="neuron-0-1"') == 1
    assert svg.count('id="neuron-') == 3

@pytest.mark.parametrize("size", [10, (10,), (10, 10, 10), ("wide", 10), (0, 10)])
def test_malformed_canvas_size(size):
    d = layout_network([[1]], [])
    with pytest.raises(CanvasArgsError):
        render_diagram(d, {"size": size})
