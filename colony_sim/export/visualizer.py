"""Offline rendering of simulation snapshots with matplotlib."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from pathlib import Path
from typing import List, TYPE_CHECKING
from PIL import Image
import io

from ..model.grid import Tile

if TYPE_CHECKING:
    from ..model.state import SimulationState, AgentSnapshot


# Display colors every renderer must honor
TILE_COLORS = {
    Tile.EMPTY: (0.8, 0.8, 0.8),         # Light gray
    Tile.OBSTACLE: (0.2, 0.2, 0.2),      # Dark gray
    Tile.ENERGY: (1.0, 1.0, 0.0),        # Yellow
    Tile.ORE: (0.5, 0.3, 0.1),           # Brown
    Tile.SCIENCE_SITE: (0.0, 0.8, 0.8),  # Cyan
    Tile.STATION: (1.0, 0.0, 0.0),       # Red
}

AGENT_COLORS = {
    'explorer': (0.0, 1.0, 0.0),    # Green
    'ENERGY': (0.0, 0.5, 1.0),      # Blue
    'ORE': (0.5, 0.0, 1.0),         # Violet
}


def agent_color(agent: "AgentSnapshot"):
    """Marker color for an agent: role for explorers, specialization otherwise."""
    if agent.role == 'explorer':
        return AGENT_COLORS['explorer']
    return AGENT_COLORS.get(agent.specialization, (1.0, 1.0, 1.0))


def tiles_to_rgb(tiles: np.ndarray) -> np.ndarray:
    """Map a [y, x] tile array to an RGB image array."""
    palette = np.zeros((max(Tile) + 1, 3))
    for tile, color in TILE_COLORS.items():
        palette[tile] = color
    return palette[tiles]


class Visualizer:
    """
    Generates visual outputs using matplotlib.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    def __init__(self, grid_width: int, grid_height: int):
        self.width = grid_width
        self.height = grid_height
        self.frames: List[Image.Image] = []

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        # Determine figure size based on grid aspect ratio
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(8, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        ax.imshow(tiles_to_rgb(state.tiles), origin='lower', aspect='equal',
                  extent=[-0.5, self.width - 0.5, -0.5, self.height - 0.5])

        # Draw agents
        for agent in state.agents:
            ax.plot(agent.x, agent.y, 'o', color=agent_color(agent),
                    markersize=5, markeredgecolor='black', markeredgewidth=0.3)

        stock = ", ".join(f"{k}: {v}" for k, v in state.stock.items())
        ax.set_title(f'Step {state.step} | Agents: {len(state.agents)} | '
                     f'Stock: {stock} | Ledger: {state.ledger_size}')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')

        # Set axis limits
        ax.set_xlim(-0.5, self.width - 0.5)
        ax.set_ylim(-0.5, self.height - 0.5)

        # Legend
        legend_elements = [
            plt.Line2D([0], [0], marker='o', color='w', label='Explorer',
                       markerfacecolor=AGENT_COLORS['explorer'], markersize=8),
            plt.Line2D([0], [0], marker='o', color='w', label='Energy collector',
                       markerfacecolor=AGENT_COLORS['ENERGY'], markersize=8),
            plt.Line2D([0], [0], marker='o', color='w', label='Ore collector',
                       markerfacecolor=AGENT_COLORS['ORE'], markersize=8),
            plt.Line2D([0], [0], marker='s', color='w', label='Station',
                       markerfacecolor=TILE_COLORS[Tile.STATION], markersize=8),
        ]
        ax.legend(handles=legend_elements, loc='upper right', fontsize=8)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
