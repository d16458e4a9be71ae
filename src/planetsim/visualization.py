"""
Visualization for the planetary system simulation.

Reads the engine through its accessors only:
- 3D snapshot of the current population
- Frame-by-frame animation, ticking the engine once per frame

Distances are plotted in millions of km.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend for saving files
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401
from matplotlib.animation import FuncAnimation, PillowWriter
from typing import List, Tuple

from planetsim.evolution import PlanetarySystem

MKM = 1.0e6  # km per plot unit
DAY = 86400.0  # s


def marker_sizes(masses: np.ndarray, largest: float = 60.0, smallest: float = 2.0) -> np.ndarray:
    """Scatter marker areas proportional to mass^(2/3), i.e. to projected disc area."""
    if len(masses) == 0:
        return np.zeros(0)
    scaled = np.cbrt(masses) ** 2
    return smallest + (largest - smallest) * scaled / np.max(scaled)


def _setup_axes(fig, system_radius: float):
    ax = fig.add_subplot(111, projection='3d')
    lim = system_radius / MKM
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_zlim(-lim, lim)
    ax.set_xlabel('X (10⁶ km)')
    ax.set_ylabel('Y (10⁶ km)')
    ax.set_zlabel('Z (10⁶ km)')
    ax.scatter([0.0], [0.0], [0.0], c='gold', s=200, marker='o',
               edgecolors='orange', linewidths=1, label='Star')
    return ax


def plot_system_snapshot(system: PlanetarySystem, output_path: str):
    """
    Save a 3D scatter plot of the current bodies.

    Args:
        system: Engine to read (not modified)
        output_path: Path to save PNG plot
    """
    positions = system.get_positions().reshape(-1, 3) / MKM
    masses = system.get_masses()

    fig = plt.figure(figsize=(10, 10))
    ax = _setup_axes(fig, system.params.system_radius)

    if len(masses) > 0:
        ax.scatter(positions[:, 0], positions[:, 1], positions[:, 2],
                   c='steelblue', s=marker_sizes(masses), alpha=0.7,
                   edgecolors='none', label='Bodies')

    ax.set_title(f'Day {system.state.time / DAY:.0f}: {system.body_count} bodies')
    ax.legend()

    plt.tight_layout()
    plt.savefig(output_path, dpi=100, bbox_inches='tight')
    plt.close(fig)


def record_frames(system: PlanetarySystem, n_frames: int) -> List[Tuple[float, np.ndarray, np.ndarray]]:
    """
    Tick the engine n_frames times, keeping (time, positions, masses) after each tick.
    """
    frames = []
    for _ in range(n_frames):
        system.tick()
        frames.append((
            system.state.time,
            system.get_positions().reshape(-1, 3),
            system.get_masses(),
        ))
    return frames


def animate_system(system: PlanetarySystem, output_path: str,
                   n_frames: int = 100, fps: int = 20):
    """
    Create a GIF animation of the system, ticking once per frame.

    Args:
        system: Engine to advance (modified in place)
        output_path: Path to save the GIF
        n_frames: Number of ticks / frames
        fps: Frames per second in output animation
    """
    frames = record_frames(system, n_frames)

    fig = plt.figure(figsize=(8, 8))
    ax = _setup_axes(fig, system.params.system_radius)
    body_scatter = ax.scatter([], [], [], c='steelblue', s=4, alpha=0.7, label='Bodies')
    title = ax.set_title('')
    ax.legend()

    def update(frame):
        """Update function for animation."""
        time, positions, masses = frames[frame]
        positions = positions / MKM

        body_scatter._offsets3d = (positions[:, 0], positions[:, 1], positions[:, 2])
        body_scatter.set_sizes(marker_sizes(masses))
        title.set_text(f'Day {time / DAY:.0f}: {len(masses)} bodies')

        return body_scatter, title

    anim = FuncAnimation(fig, update, frames=len(frames), interval=1000 / fps, blit=False)
    anim.save(output_path, writer=PillowWriter(fps=fps))
    plt.close(fig)
