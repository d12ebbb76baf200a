"""Interactive Matplotlib replay of a strategy, one day per step."""

import logging

import networkx as nx
import matplotlib.pyplot as plt
from matplotlib.widgets import Button

from .verifier import Verifier

LOGGER = logging.getLogger(__name__)

# --- CONFIGURATION ---
CLEAN_COLOR = 'lightgreen'
CONTAMINATED_COLOR = 'salmon'
PURSUER_COLOR = 'blue'


def layout(graph, pos_dict=None):
    """Node positions for drawing; falls back to a seeded spring layout."""
    G = graph.to_networkx()
    if pos_dict:
        if len(pos_dict) != G.number_of_nodes():
            LOGGER.warning(
                "Position count (%d) does not match node count (%d). Using auto-layout.",
                len(pos_dict),
                G.number_of_nodes(),
            )
        else:
            return pos_dict
    return nx.spring_layout(G, seed=42)


def render_day(graph, states, strategy, day, ax, pos=None):
    """
    Draws the graph as it stands at the end of ``day`` (counted from zero):
    clean vertices green, contaminated ones red, pursuers ringed in blue.
    """
    G = graph.to_networkx()
    if pos is None:
        pos = layout(graph)

    ax.clear()
    state = states[day]
    clean = [v for v in G.nodes if state[v]]
    contaminated = [v for v in G.nodes if not state[v]]
    pursuers = sorted(set(strategy.days[day]))

    # Draw Base Graph
    nx.draw_networkx_edges(G, pos, ax=ax, edge_color='gray', arrows=True)
    nx.draw_networkx_nodes(G, pos, nodelist=clean, ax=ax, node_color=CLEAN_COLOR, node_size=300, label='Clean')
    nx.draw_networkx_nodes(
        G, pos, nodelist=contaminated, ax=ax, node_color=CONTAMINATED_COLOR, node_size=300, label='Contaminated'
    )
    nx.draw_networkx_labels(G, pos, ax=ax, font_size=7, font_weight='bold')

    # Highlight Pursuers
    nx.draw_networkx_nodes(
        G,
        pos,
        nodelist=pursuers,
        ax=ax,
        node_color='none',
        edgecolors=PURSUER_COLOR,
        linewidths=2.5,
        node_size=450,
        label='Pursuer',
    )

    ax.set_title(
        f"Day {day + 1}/{len(states)}: {len(clean)}/{G.number_of_nodes()} clean",
        fontsize=14,
        fontweight='bold',
    )
    ax.legend(loc="upper right")
    ax.axis('off')
    return pos


def replay(graph, strategy, pos_dict=None, show=True):
    """Self-contained interactive Matplotlib UI stepping through the strategy."""
    states = Verifier(graph).check(strategy.pursuer_count, strategy.length, strategy.days).states
    pos = layout(graph, pos_dict)

    fig, ax = plt.subplots(figsize=(12, 9))
    plt.subplots_adjust(bottom=0.2)  # Leave room for buttons

    current_day = [0]

    def draw(day):
        render_day(graph, states, strategy, day, ax, pos)
        fig.canvas.draw_idle()

    draw(0)

    axprev = plt.axes([0.35, 0.05, 0.1, 0.075])
    axnext = plt.axes([0.55, 0.05, 0.1, 0.075])
    bnext = Button(axnext, 'Next Day')
    bprev = Button(axprev, 'Previous')

    def next_day(event):
        if current_day[0] < len(states) - 1:
            current_day[0] += 1
            draw(current_day[0])

    def prev_day(event):
        if current_day[0] > 0:
            current_day[0] -= 1
            draw(current_day[0])

    bnext.on_clicked(next_day)
    bprev.on_clicked(prev_day)

    if show:
        plt.show()
    # Keep the buttons referenced, otherwise they are garbage collected
    return fig, (bprev, bnext)
