"""Quick matplotlib plots of a charge configuration and its equipotential lines, useful when experimenting
with the tracer from a script or a notebook."""
from __future__ import annotations

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
import numpy as np

from .charges import ChargeSet
from .contour import ContourLine
from .typing import *

POSITIVE_COLOR = '#D62728'
NEGATIVE_COLOR = '#1F77B4'
LINE_COLOR = '#333333'


def new_figure(figsize=(10, 7)):
    fig = plt.figure(figsize=figsize)
    ax = fig.gca()
    ax.set_aspect('equal')
    ax.set_xlabel('x (m)')
    ax.set_ylabel('y (m)')
    return fig, ax

def plot_charges(charge_set: ChargeSet, ax=None, show_inactive=False, s=80):
    """Scatter plot of the charges, positive charges in red and negative charges in blue.
    Inactive charges are drawn hollow when `show_inactive` is set."""
    ax = ax if ax is not None else plt.gca()

    for c in charge_set:
        if not c.active and not show_inactive:
            continue

        color = POSITIVE_COLOR if c.is_positive() else NEGATIVE_COLOR
        facecolor = color if c.active else 'none'
        ax.scatter(*c.position, s=s, facecolors=facecolor, edgecolors=color, zorder=3)

    return ax

def plot_equipotential_lines(lines: Iterable[ContourLine | None], ax=None, simplified=True, show_labels=False, **kwargs):
    """Plot equipotential lines. `None` entries (seeds through which no line could be traced) are ignored.
    Extra keyword arguments are passed on to `matplotlib.collections.LineCollection`."""
    ax = ax if ax is not None else plt.gca()
    lines = [l for l in lines if l is not None]

    if not lines:
        return ax

    segments = [l.vertices() if simplified else l.positions for l in lines]

    kwargs.setdefault('color', LINE_COLOR)
    kwargs.setdefault('linewidth', 1.)
    ax.add_collection(LineCollection(segments, **kwargs))

    if show_labels:
        for l in lines:
            ax.annotate(f'{l.potential:.3g} V', l.seed, fontsize=8)

    all_points = np.concatenate(segments)
    ax.update_datalim(all_points)
    ax.autoscale_view()
    return ax

def show(legend=False):
    if legend:
        plt.legend()
    plt.show()
