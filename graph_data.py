from csp_engine import GraphDataError, GraphModel

# Tried in this order at every assignment point.
GRAPH_COLORS = [
    '#FF5733',
    '#4CAF50',
    '#42A5F5',
]

UNASSIGNED_COLOR = '#888888'

# Mainland states and territories plus Tasmania; pos is in canvas units.
AUSTRALIA_GRAPH = {
    'nodes': [
        {'id': 'WA',  'label': 'Western Australia', 'evaluation_order': 0, 'pos': (1.8, 4.2)},
        {'id': 'NT',  'label': 'Northern Territory', 'evaluation_order': 1, 'pos': (4.4, 6.6)},
        {'id': 'SA',  'label': 'South Australia',   'evaluation_order': 2, 'pos': (4.8, 3.4)},
        {'id': 'Q',   'label': 'Queensland',        'evaluation_order': 3, 'pos': (7.6, 6.4)},
        {'id': 'NSW', 'label': 'New South Wales',   'evaluation_order': 4, 'pos': (8.0, 3.4)},
        {'id': 'V',   'label': 'Victoria',          'evaluation_order': 5, 'pos': (7.0, 1.4)},
        {'id': 'T',   'label': 'Tasmania',          'evaluation_order': 6, 'pos': (7.4, -0.2)},
    ],
    'edges': [
        {'source': 'WA', 'target': 'NT'},
        {'source': 'WA', 'target': 'SA'},
        {'source': 'NT', 'target': 'SA'},
        {'source': 'NT', 'target': 'Q'},
        {'source': 'SA', 'target': 'Q'},
        {'source': 'SA', 'target': 'NSW'},
        {'source': 'SA', 'target': 'V'},
        {'source': 'Q', 'target': 'NSW'},
        {'source': 'NSW', 'target': 'V'},
    ],
}


def sorted_nodes(data):
    """Node records in evaluation order, after checking their shape."""
    if 'nodes' not in data or 'edges' not in data:
        raise GraphDataError("Graph data needs both 'nodes' and 'edges'")

    orders = set()
    for node in data['nodes']:
        for key in ('id', 'evaluation_order'):
            if key not in node:
                raise GraphDataError(f"Node {node!r} is missing {key!r}")
        if node['evaluation_order'] in orders:
            raise GraphDataError(f"Duplicate evaluation order {node['evaluation_order']!r}")
        orders.add(node['evaluation_order'])
    return sorted(data['nodes'], key=lambda n: n['evaluation_order'])


def load_graph(data=None):
    """Validate graph data and build its GraphModel (Australia by default)."""
    if data is None:
        data = AUSTRALIA_GRAPH
    node_ids = [n['id'] for n in sorted_nodes(data)]

    edges = []
    for edge in data['edges']:
        try:
            edges.append((edge['source'], edge['target']))
        except KeyError as exc:
            raise GraphDataError(f"Edge {edge!r} is missing {exc.args[0]!r}") from exc
    return GraphModel(node_ids, edges)
