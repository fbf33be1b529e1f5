import matplotlib.pyplot as plt
import matplotlib.patches as patches
from matplotlib.widgets import Button, TextBox

import numpy as np

from csp_engine import GraphColoringSolver, SearchCancelled, build_palette
from graph_data import AUSTRALIA_GRAPH, GRAPH_COLORS, UNASSIGNED_COLOR, load_graph, sorted_nodes


class GraphPainter:
    """Animates the coloring strategies over a fixed map graph."""

    STRATEGY_NAMES = {
        'BT': 'Backtracking',
        'MAC-BT': 'Backtracking + AC-3',
        'BJ': 'Backjumping',
    }

    def __init__(self, graph_data=None, palette=None, animation_speed=500, show=True):
        if graph_data is None:
            graph_data = AUSTRALIA_GRAPH
        self.graph = load_graph(graph_data)
        self.palette = build_palette(palette if palette is not None else GRAPH_COLORS)

        # ---- Graph ----
        # nid -> {'pos':(x,y), 'label':str, 'color':str}
        self.nodes = {}
        for node in sorted_nodes(graph_data):
            self.nodes[node['id']] = {
                'pos': tuple(node.get('pos', (0.0, 0.0))),
                'label': node.get('label', node['id']),
                'color': UNASSIGNED_COLOR,
            }
        self.node_radius = 0.7

        # ---- Animation ----
        self.animation_speed = animation_speed  # milliseconds per step
        self.zoom_in_step = 0.1
        self.zoom_out_step = 0.05

        # ---- Search ----
        self.solver = GraphColoringSolver(self.graph, self.palette, on_step=self._on_search_step)
        self.running = False
        self.current_strategy = None
        self.last_result = None
        self.last_painted = None  # nid of the most recent step

        # ---- Performance caches ----
        self.node_patches = {}   # nid -> Circle patch
        self.node_labels = {}    # nid -> Text artist
        self.edge_lines = {}     # (a,b) index tuple -> Line2D
        self.status_text = None
        self._bg = None
        self._blit_enabled = True

        plt.style.use('dark_background')
        self.fig, self.ax = plt.subplots(figsize=(12, 9))
        self.fig.patch.set_facecolor('#1a1a1a')
        self.ax.set_facecolor('#2d2d2d')

        self._build_ui()
        if show:
            plt.show()

    # ---------- UI ----------
    def _build_ui(self):
        plt.subplots_adjust(bottom=0.26, top=0.86, right=0.96, left=0.06)
        self._style_axes_once()
        self._home_limits()

        self.fig.suptitle("Graph Painter", fontsize=22, color='white', fontweight='bold', y=0.95)
        self.fig.text(0.5, 0.895, "Coloring Algorithms", fontsize=13, color='#cccccc', ha='center')

        instructions = (
            "BT: plain backtracking\n"
            "MAC-BT: backtracking + AC-3\n"
            "BJ: conflict-directed backjumping\n"
            "Animation Speed is milliseconds per step."
        )
        self.fig.text(0.98, 0.98, instructions, fontsize=10, color='#cccccc', va='top', ha='right',
                      bbox=dict(boxstyle="round,pad=0.4", facecolor='#3a3a3a',
                                alpha=0.9, edgecolor='#5a5a5a', linewidth=1))

        self._setup_controls()
        self._build_scene()
        self._capture_bg()
        self._update_status()

    def _style_axes_once(self):
        self.ax.set_aspect('equal')
        self.ax.set_xticks([]); self.ax.set_yticks([])
        self.ax.grid(True, alpha=0.1, color='white')

    def _setup_controls(self):
        button_color = '#4a4a4a'
        hover_color = '#6a6a6a'
        bw, bh = 0.13, 0.055

        # Row A: strategies
        self.strategy_buttons = {}
        for i, name in enumerate(self.STRATEGY_NAMES):
            ax_btn = plt.axes([0.07 + i * (bw + 0.03), 0.15, bw, bh])
            btn = Button(ax_btn, name, color='#1D6E5A', hovercolor='#1DE9AC')
            btn.on_clicked(lambda event, name=name: self.run_strategy(name))
            self.strategy_buttons[name] = btn

        ax_stop = plt.axes([0.07 + 3 * (bw + 0.03), 0.15, bw, bh])
        self.btn_stop = Button(ax_stop, 'Stop', color='#6d3d3d', hovercolor='#8c4c4c')
        self.btn_stop.on_clicked(self._stop)

        # Row B: view controls
        view_buttons = [
            ('Center View', self._center_view),
            ('Reset Graph', self._reset_graph),
            ('Zoom In', self._zoom_in),
            ('Zoom Out', self._zoom_out),
        ]
        self.view_buttons = {}
        for i, (label, callback) in enumerate(view_buttons):
            ax_btn = plt.axes([0.07 + i * (bw + 0.03), 0.07, bw, bh])
            btn = Button(ax_btn, label, color=button_color, hovercolor=hover_color)
            btn.on_clicked(callback)
            self.view_buttons[label] = btn

        for btn in list(self.strategy_buttons.values()) + list(self.view_buttons.values()) + [self.btn_stop]:
            btn.label.set_color('white')
            btn.label.set_fontweight('bold')

        self.fig.text(0.72, 0.215, 'Animation Speed (ms)', fontsize=10, color='white', fontweight='bold')
        ax_speed = plt.axes([0.72, 0.15, 0.12, bh], facecolor='#f0f0f0')
        self.box_speed = TextBox(ax_speed, '', initial=self._format_speed(self.animation_speed),
                                 color='#f0f0f0', hovercolor='#ffffff')
        self.box_speed.text_disp.set_color('black')
        self.box_speed.on_submit(self._update_animation_speed)

    # ---------- Scene build & fast updates ----------
    def _build_scene(self):
        """Build (or rebuild) the whole scene once."""
        self.ax.cla()
        self._style_axes_once()
        self.ax.set_xlim(*self.xlim)
        self.ax.set_ylim(*self.ylim)

        self.node_patches.clear()
        self.node_labels.clear()
        self.edge_lines.clear()

        for a, b in self.graph.pairs:
            x1, y1 = self.nodes[self.graph.node_id(a)]['pos']
            x2, y2 = self.nodes[self.graph.node_id(b)]['pos']
            ln = self.ax.plot([x1, x2], [y1, y2], color='white', linewidth=2, alpha=0.85)[0]
            self.edge_lines[(a, b)] = ln

        for nid, data in self.nodes.items():
            x, y = data['pos']
            c = patches.Circle((x, y), self.node_radius, facecolor=data['color'],
                               edgecolor='white', linewidth=3, zorder=2)
            self.ax.add_patch(c)
            self.node_patches[nid] = c
            t = self.ax.text(x, y, nid, ha='center', va='center',
                             fontsize=14, fontweight='bold', color='white', zorder=4)
            self.node_labels[nid] = t

        self.status_text = self.ax.text(
            0.02, 0.98, "", transform=self.ax.transAxes,
            fontsize=12, color='white', fontweight='bold',
            bbox=dict(boxstyle="round,pad=0.4", facecolor='#4a4a4a',
                      alpha=0.9, edgecolor='#6a6a6a', linewidth=1),
            va='top'
        )
        self.fig.canvas.draw_idle()

    def _update_status(self):
        used = len({d['color'] for d in self.nodes.values() if d['color'] != UNASSIGNED_COLOR})
        status = f"Regions: {len(self.nodes)}"
        if used: status += f" | Colors: {used}"
        if self.current_strategy:
            status += f" | {self.STRATEGY_NAMES[self.current_strategy]}"
            status += f" | Steps: {self.solver.steps}"
        if self.last_painted:
            status += f" | Last: {self.nodes[self.last_painted]['label']}"
        status += f" | Speed: {self._format_speed(self.animation_speed)} ms"
        if self.running:
            status += " | RUNNING"
        elif self.last_result:
            status += f" | {self.last_result}"
        if self.status_text:
            self.status_text.set_text(status)
            self.fig.canvas.draw_idle()

    def _capture_bg(self):
        """Grab a clean background for blitting."""
        if not self._blit_enabled:
            return
        self.fig.canvas.draw()
        self._bg = self.fig.canvas.copy_from_bbox(self.ax.bbox)

    def _blit_artists(self, artists):
        """Efficiently redraw just these artists."""
        if not (self._blit_enabled and self._bg is not None):
            self.fig.canvas.draw_idle()
            return
        canvas = self.fig.canvas
        canvas.restore_region(self._bg)
        for a in artists:
            self.ax.draw_artist(a)
        canvas.blit(self.ax.bbox)
        canvas.flush_events()

    def _update_node_color(self, nid, color):
        self.nodes[nid]['color'] = color
        if nid in self.node_patches:
            self.node_patches[nid].set_facecolor(color)
            self._blit_artists([self.node_patches[nid], self.node_labels[nid]])
        self._update_status()

    # ---------- Search ----------
    def _on_search_step(self, vertex, color):
        nid = self.graph.node_id(vertex)
        self.last_painted = nid
        self._update_node_color(nid, color if color is not None else UNASSIGNED_COLOR)
        plt.pause(self.animation_speed / 1000.0)

    def run_strategy(self, name):
        """Run one strategy with animation. Returns the outcome, or None if it did not finish."""
        if name not in self.STRATEGY_NAMES:
            raise ValueError(f"Unknown strategy button {name!r}")
        if self.running:
            print(f"A search is already running; {name} ignored.")
            return None

        self._clear_colors()
        self.current_strategy = name
        self.running = True
        self._update_status()
        print(f"Running {self.STRATEGY_NAMES[name]}...")
        try:
            found = self.solver.run_search(name)
        except SearchCancelled as exc:
            print(exc)
            self.last_result = "Stopped"
            return None
        finally:
            self.running = False
            self._update_status()

        if found:
            self.last_result = "Solved"
            colors_used = len(set(self.solver.coloring))
            print(f"{self.STRATEGY_NAMES[name]} colored the map with {colors_used} colors "
                  f"in {self.solver.steps} steps.")
        else:
            self.last_result = "No solution"
            print(f"{self.STRATEGY_NAMES[name]} found no valid coloring with "
                  f"{len(self.palette)} colors ({self.solver.steps} steps).")
        self._update_status()
        return found

    def _stop(self, event):
        if not self.running:
            return
        self.solver.cancel()

    # ---------- View controls ----------
    def _home_limits(self):
        pos = np.array([d['pos'] for d in self.nodes.values()], dtype=float).reshape(-1, 2)
        if len(pos) == 0:
            lo, hi = np.array([0.0, 0.0]), np.array([10.0, 8.0])
        else:
            margin = self.node_radius * 2
            lo, hi = pos.min(axis=0) - margin, pos.max(axis=0) + margin
        self.xlim = (float(lo[0]), float(hi[0]))
        self.ylim = (float(lo[1]), float(hi[1]))

    def _apply_limits(self):
        self.ax.set_xlim(*self.xlim)
        self.ax.set_ylim(*self.ylim)
        self._capture_bg()

    def _zoom(self, fraction):
        """Shrink (fraction > 0) or grow (fraction < 0) the view around its center."""
        scale = 1.0 - fraction
        cx, cy = np.mean(self.xlim), np.mean(self.ylim)
        hw = (self.xlim[1] - self.xlim[0]) / 2 * scale
        hh = (self.ylim[1] - self.ylim[0]) / 2 * scale
        self.xlim = (float(cx - hw), float(cx + hw))
        self.ylim = (float(cy - hh), float(cy + hh))
        self._apply_limits()

    def _zoom_in(self, event):
        self._zoom(self.zoom_in_step)

    def _zoom_out(self, event):
        self._zoom(-self.zoom_out_step)

    def _center_view(self, event):
        self._home_limits()
        self._apply_limits()

    def _clear_colors(self):
        for nid in self.nodes:
            self.nodes[nid]['color'] = UNASSIGNED_COLOR
            if nid in self.node_patches:
                self.node_patches[nid].set_facecolor(UNASSIGNED_COLOR)
        self._capture_bg()

    def _reset_graph(self, event):
        if self.running:
            print("Stop the running search before resetting the graph.")
            return
        self._clear_colors()
        self.solver.reset()
        self.current_strategy = None
        self.last_result = None
        self.last_painted = None
        self._update_status()
        print("Graph reset (all regions uncolored).")

    # ---------- Animation speed ----------
    @staticmethod
    def _format_speed(ms):
        return f"{ms:g}"

    def _update_animation_speed(self, text):
        try:
            speed = float(text.strip())
        except ValueError:
            speed = None
        if speed is None or not np.isfinite(speed) or speed <= 0:
            print(f"Ignoring animation speed {text!r}; expected a positive number of milliseconds.")
            return
        self.animation_speed = speed
        self._update_status()


def main():
    print("Graph Painter")
    print("=" * 30)
    print("BT, MAC-BT and BJ color the map of Australia with three colors.")
    print("Set 'Animation Speed' (ms per step) before starting a run.")
    print("\nStarting visualizer...")
    GraphPainter()


# -------- Run --------
if __name__ == "__main__":
    main()
