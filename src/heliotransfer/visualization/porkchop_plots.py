"""
Porkchop and transfer plots for mission tables.
Consistent styling, delta-V colour maps, ecliptic-plane orbit drawings.
"""

import logging
import os

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for saving
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap

from heliotransfer.core.constants import au_per_day_to_km_s
from heliotransfer.core.julian import format_date

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PlotStyle -- shared styling helpers
# ---------------------------------------------------------------------------

class PlotStyle:
    """Centralised styling and figure management for mission plots."""

    COLORS = {
        'sun': '#F9A825',
        'origin': '#2E86AB',
        'destination': '#C73E1D',
        'transfer': '#2E7D32',
        'marker': '#000000',
        'neutral': '#546E7A',
    }

    # Low delta-V is blue, high is red
    PORKCHOP_CMAP = LinearSegmentedColormap.from_list(
        'porkchop', ['#0000FF', '#00FFFF', '#00FF00', '#FFFF00', '#FF0000'])

    @staticmethod
    def setup_style():
        """Set matplotlib rcParams for the mission figures."""
        plt.rcParams.update({
            'font.family': 'sans-serif',
            'font.size': 11,
            'axes.labelsize': 12,
            'axes.titlesize': 14,
            'axes.titleweight': 'bold',
            'legend.fontsize': 10,
            'figure.figsize': (10, 8),
            'figure.dpi': 100,
            'figure.facecolor': 'white',
            'savefig.facecolor': 'white',
            'axes.grid': False,
            'axes.spines.top': False,
            'axes.spines.right': False,
            'lines.linewidth': 1.8,
        })

    @staticmethod
    def create_figure(figsize=None):
        """Return (fig, ax)."""
        fig, ax = plt.subplots(1, 1, figsize=figsize)
        return fig, ax

    @staticmethod
    def save_figure(fig, filepath, dpi=150):
        """Save *fig* to *filepath*, creating directories as needed."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fig.tight_layout()
        fig.savefig(filepath, dpi=dpi, facecolor='white', edgecolor='none')
        plt.close(fig)
        logger.info("Saved figure: %s", filepath)


# ---------------------------------------------------------------------------
# Plotting functions
# ---------------------------------------------------------------------------

def plot_porkchop(table, filepath, plan=None):
    """Total delta-V of every feasible cell as an image.

    Departure date runs along x, arrival date along y, both in days from the
    table's start date. Empty cells are left blank.

    Parameters
    ----------
    table : MissionTable
    filepath : str
        Output PNG path.
    plan : MissionPlan or None
        If given, its departure/arrival pair is marked.
    """
    PlotStyle.setup_style()
    t0 = table.start_date()
    departures = np.array([state.date for state in table.departures()]) - t0
    arrivals = np.array([state.date for state in table.arrivals()]) - t0
    grid_km_s = au_per_day_to_km_s(1.0) * table.delta_v_grid()

    cmap = PlotStyle.PORKCHOP_CMAP.copy()
    cmap.set_bad('white')

    fig, ax = PlotStyle.create_figure()
    extent = [departures[0], departures[-1], arrivals[0], arrivals[-1]]
    image = ax.imshow(np.ma.masked_invalid(grid_km_s), origin='lower', aspect='auto',
                      extent=extent, cmap=cmap, interpolation='nearest')
    colorbar = fig.colorbar(image, ax=ax)
    colorbar.set_label('Total delta-V [km/s]')

    if plan is not None:
        ax.plot(plan.departure_date - t0, plan.arrival_date - t0, marker='x',
                markersize=12, markeredgewidth=2.5, color=PlotStyle.COLORS['marker'],
                linestyle='none',
                label=f'Plan: {au_per_day_to_km_s(plan.delta_v_total):.2f} km/s')
        ax.legend(loc='upper left')

    ax.set_xlabel(f'Departure [days after {format_date(t0)}]')
    ax.set_ylabel(f'Arrival [days after {format_date(t0)}]')
    ax.set_title(f'{table.origin().name} to {table.destination().name}')
    PlotStyle.save_figure(fig, filepath)


def plot_transfer(plan, filepath, samples=300):
    """Origin, destination and transfer orbits projected on the ecliptic.

    The flown arc of the transfer conic is drawn solid, the rest dashed.
    """
    PlotStyle.setup_style()
    fig, ax = PlotStyle.create_figure(figsize=(9, 9))

    for world, key in ((plan.origin, 'origin'), (plan.destination, 'destination')):
        ring = world.orbit.sample_positions(samples)
        ring = np.vstack([ring, ring[:1]])
        ax.plot(ring[:, 0], ring[:, 1], color=PlotStyle.COLORS[key], label=world.name)

    transfer = plan.orbit
    ring = transfer.sample_positions(samples)
    ring = np.vstack([ring, ring[:1]])
    ax.plot(ring[:, 0], ring[:, 1], color=PlotStyle.COLORS['transfer'],
            linestyle='--', linewidth=0.8, alpha=0.6)

    times = np.linspace(plan.departure_date, plan.arrival_date, samples)
    arc = np.array([transfer.position(t) for t in times])
    ax.plot(arc[:, 0], arc[:, 1], color=PlotStyle.COLORS['transfer'], label='Transfer')

    start = plan.origin.position(plan.departure_date)
    end = plan.destination.position(plan.arrival_date)
    ax.scatter([start[0]], [start[1]], color=PlotStyle.COLORS['origin'], s=50, zorder=3)
    ax.scatter([end[0]], [end[1]], color=PlotStyle.COLORS['destination'], s=50, zorder=3)
    ax.scatter([0.0], [0.0], color=PlotStyle.COLORS['sun'], s=120, zorder=3, label='Sun')

    ax.set_aspect('equal')
    ax.set_xlabel('X [AU]')
    ax.set_ylabel('Y [AU]')
    ax.set_title(f'{plan.origin.name} to {plan.destination.name}: '
                 f'{format_date(plan.departure_date)} to {format_date(plan.arrival_date)}')
    ax.legend(loc='upper right')
    PlotStyle.save_figure(fig, filepath)
