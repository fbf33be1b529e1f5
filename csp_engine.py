import numpy as np


class GraphDataError(ValueError):
    """Malformed graph or palette, rejected before any search starts."""


class SearchCancelled(Exception):
    """Raised out of a running search after cancel() was requested."""


# ---------------- Graph model ----------------

class GraphModel:
    """Immutable adjacency structure over vertices 0..N-1.

    node_ids must already be sorted by evaluation order: the position of an
    id in that list is its vertex index. Both directions of every edge are
    marked, so adjacency is symmetric whatever direction the data declares.
    """

    def __init__(self, node_ids, edges):
        self.node_ids = tuple(node_ids)
        self._index = {}
        for i, nid in enumerate(self.node_ids):
            if nid in self._index:
                raise GraphDataError(f"Duplicate node id {nid!r}")
            self._index[nid] = i

        n = len(self.node_ids)
        self.adjacency = np.zeros((n, n), dtype=bool)
        self.edges = []
        for source, target in edges:
            for endpoint in (source, target):
                if endpoint not in self._index:
                    raise GraphDataError(f"Edge {source!r}-{target!r} references unknown node {endpoint!r}")
            if source == target:
                raise GraphDataError(f"Edge {source!r}-{target!r} connects a node to itself")
            a, b = self._index[source], self._index[target]
            self.adjacency[a, b] = True
            self.adjacency[b, a] = True
            self.edges.append((a, b))
        self.adjacency.setflags(write=False)

        # unordered adjacent pairs i < j, scanned by the validity check
        self.pairs = [tuple(p) for p in np.argwhere(np.triu(self.adjacency, k=1)).tolist()]

    def __len__(self):
        return len(self.node_ids)

    def index(self, node_id):
        return self._index[node_id]

    def node_id(self, index):
        return self.node_ids[index]

    def is_adjacent(self, i, j):
        return bool(self.adjacency[i, j])

    def neighbors(self, i):
        return [int(j) for j in np.flatnonzero(self.adjacency[i])]

    def arcs(self):
        """Directed arcs in input order, each edge followed by its reverse."""
        out = []
        for a, b in self.edges:
            out.append((a, b))
            out.append((b, a))
        return out


def build_palette(colors):
    palette = tuple(colors)
    if not palette:
        raise GraphDataError("Palette must contain at least one color")
    seen = set()
    for color in palette:
        if color in seen:
            raise GraphDataError(f"Duplicate palette color {color!r}")
        seen.add(color)
    return palette


class BackjumpingEvaluation:
    """Outcome of a backjumping call and the vertices to blame on failure."""

    def __init__(self, is_graph_valid, conflict_set=None):
        self.is_graph_valid = is_graph_valid
        self.conflict_set = set(conflict_set) if conflict_set else set()

    def __repr__(self):
        return f"BackjumpingEvaluation({self.is_graph_valid}, {sorted(self.conflict_set)})"


# ---------------- Solver ----------------

class GraphColoringSolver:
    """Backtracking, backtracking + AC-3 and backjumping over one graph.

    on_step(vertex, color) is called after every assignment and every
    unassignment (color is None then). Pacing belongs to the callback.
    """

    STRATEGIES = {
        'backtracking': 'backtracking',
        'bt': 'backtracking',
        'backtracking-ac3': 'backtracking_ac3',
        'mac-bt': 'backtracking_ac3',
        'backjumping': 'backjumping',
        'bj': 'backjumping',
    }

    def __init__(self, graph, palette, on_step=None):
        self.graph = graph
        self.palette = build_palette(palette)
        self.on_step = on_step
        self._cancel_requested = False
        self.reset()

    # ---------- state ----------

    def reset(self):
        self.coloring = self.empty_coloring()
        self.domains = self.initial_domains()
        self.steps = 0

    def empty_coloring(self):
        return [None] * len(self.graph)

    def initial_domains(self):
        return {v: list(self.palette) for v in range(len(self.graph))}

    @staticmethod
    def copy_domains(domains):
        return {v: list(colors) for v, colors in domains.items()}

    def cancel(self):
        self._cancel_requested = True

    def _paint(self, coloring, vertex, color):
        coloring[vertex] = color
        self.steps += 1
        if self.on_step is not None:
            self.on_step(vertex, color)
        if self._cancel_requested:
            raise SearchCancelled(f"Search cancelled after {self.steps} steps")

    @staticmethod
    def _first_unassigned(coloring):
        for i, color in enumerate(coloring):
            if color is None:
                return i
        return None

    # ---------- validity ----------

    def is_graph_valid(self, coloring):
        for i, j in self.graph.pairs:
            if coloring[i] is None or coloring[j] is None:
                continue
            if coloring[i] == coloring[j]:
                return False
        return True

    # ---------- entry point ----------

    def run_search(self, strategy):
        key = self.STRATEGIES.get(str(strategy).lower())
        if key is None:
            raise ValueError(f"Unknown strategy {strategy!r}")

        self.reset()
        self._cancel_requested = False
        if key == 'backtracking':
            found = self.backtracking(self.coloring)
        elif key == 'backtracking_ac3':
            found = self.backtracking_ac3(self.coloring, self.domains)
        else:
            found = self.backjumping(self.coloring).is_graph_valid
            if not found:
                # a jump out of the first vertex has no ancestor left to clear it
                self._unassign_from(self.coloring, 0)
        return found

    # ---------- plain backtracking ----------

    def backtracking(self, coloring):
        unassigned = self._first_unassigned(coloring)
        if unassigned is None:
            return self.is_graph_valid(coloring)

        for color in self.palette:
            self._paint(coloring, unassigned, color)
            if self.is_graph_valid(coloring) and self.backtracking(coloring):
                return True
            self._paint(coloring, unassigned, None)
        return False

    # ---------- backtracking with AC-3 ----------

    def revise(self, coloring, domains):
        """Prune domains to arc consistency in place. False on a wipeout."""
        for v, color in enumerate(coloring):
            if color is not None:
                domains[v] = [color]

        arcs = self.graph.arcs()
        stabilized = False
        while not stabilized:
            stabilized = True
            for source, target in arcs:
                target_domain = domains[target]
                kept = []
                for color in domains[source]:
                    if len(target_domain) == 1 and target_domain[0] == color:
                        stabilized = False
                    else:
                        kept.append(color)
                if not kept:
                    return False
                domains[source] = kept
        return True

    def backtracking_ac3(self, coloring, domains):
        unassigned = self._first_unassigned(coloring)
        if unassigned is None:
            if not self.is_graph_valid(coloring):
                return False
            self.domains = domains
            return True

        for color in self.palette:
            # branch-local copy; siblings never see each other's pruning
            updated = self.copy_domains(domains)
            self._paint(coloring, unassigned, color)
            if self.is_graph_valid(coloring) and self.revise(coloring, updated):
                if self.backtracking_ac3(coloring, updated):
                    return True
            self._paint(coloring, unassigned, None)
        return False

    # ---------- backjumping ----------

    def _conflicts_with(self, coloring, vertex):
        conflicts = {vertex}
        for nb in self.graph.neighbors(vertex):
            if coloring[nb] == coloring[vertex]:
                conflicts.add(nb)
        return conflicts

    def _unassign_from(self, coloring, vertex):
        # descendants left colored by a jump are cleared deepest first
        for i in range(len(coloring) - 1, vertex - 1, -1):
            if coloring[i] is not None:
                self._paint(coloring, i, None)

    def backjumping(self, coloring):
        unassigned = self._first_unassigned(coloring)
        if unassigned is None:
            return BackjumpingEvaluation(self.is_graph_valid(coloring))

        conflict_set = set()
        for color in self.palette:
            self._paint(coloring, unassigned, color)
            if self.is_graph_valid(coloring):
                evaluation = self.backjumping(coloring)
                if evaluation.is_graph_valid:
                    return BackjumpingEvaluation(True)
                new_conflicts = set(evaluation.conflict_set)
            else:
                new_conflicts = self._conflicts_with(coloring, unassigned)

            if unassigned not in new_conflicts:
                # an ancestor is responsible: jump back past this vertex
                return BackjumpingEvaluation(False, new_conflicts)

            new_conflicts.discard(unassigned)
            conflict_set |= new_conflicts
            self._unassign_from(coloring, unassigned)
        return BackjumpingEvaluation(False, conflict_set)
