import numpy as np

import networks
from netplot_core import layout_network


def test_doc_example_masks_hidden_layer():
    nodes, synapses = networks.make_doc_example()
    d = layout_network(nodes, synapses)
    assert d.mask == (False, True, False)
    # (2, 7) and (7, 5) touch the collapsed layer, (4, 5) and (5, 4) stay inside the output layer
    assert len(d.connectors) == 4
    assert d.aggregates == {}

def test_mlp_ids_unique_and_dense():
    nodes, synapses = networks.make_mlp((3, 4, 2), density=1.0, rng=np.random.default_rng(0))
    flat = [n for layer in nodes for n in layer]
    assert len(flat) == len(set(flat)) == 9
    assert len(synapses) == 3 * 4 + 4 * 2
    assert all(isinstance(w, float) for _, _, w in synapses)

def test_mlp_zero_density_has_no_synapses():
    _, synapses = networks.make_mlp((3, 4), density=0.0, rng=np.random.default_rng(0))
    assert synapses == []

def test_recurrent_single_layer_without_self_loops():
    nodes, synapses = networks.make_recurrent(5, n_conns=20, rng=np.random.default_rng(1))
    assert nodes == [[1, 2, 3, 4, 5]]
    assert len(synapses) == 20
    assert all(s != t for s, t, _ in synapses)
    d = layout_network(nodes, synapses)
    assert all(c.kind == "curve" for c in d.connectors)
