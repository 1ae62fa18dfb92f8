import numpy as np

def make_doc_example():
    nodes = [[1, 2, 3], list(range(6, 101)), [4, 5]]
    synapses = [(2, 7, 3.3), (7, 5, -0.3), (4, 5, 2.0), (5, 4, -2.0)]
    return nodes, synapses

def make_mlp(sizes=(3, 5, 2), density=1.0, w_std=1.0, rng=None):
    if rng is None:
        rng = np.random.default_rng()
    nodes, start = [], 1
    for size in sizes:
        nodes.append(list(range(start, start + size)))
        start += size

    synapses = []
    for src, dst in zip(nodes[:-1], nodes[1:]):
        keep = rng.random((len(src), len(dst))) < density
        w = rng.normal(0, w_std, size=keep.shape)
        for i, j in zip(*np.nonzero(keep)):
            synapses.append((src[i], dst[j], float(w[i, j])))
    return nodes, synapses

def make_recurrent(size=5, n_conns=8, w_std=1.0, rng=None):
    # single layer, no self loops; both directions appear
    if rng is None:
        rng = np.random.default_rng()
    ids = list(range(1, size + 1))
    synapses = []
    if size < 2:
        return [ids], synapses
    for _ in range(n_conns):
        a, b = rng.choice(size, 2, replace=False)
        synapses.append((ids[a], ids[b], float(rng.normal(0, w_std))))
    return [ids], synapses
