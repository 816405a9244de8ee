import matplotlib.pyplot as plt
import numpy as np

from nweno.initial_conditions import cell_edges, point_coordinates


def plot_reconstruction_on_ax(q, qs, points, ax, exact=None, title=None, fontsize=None, label=None):
    """Plot cell averages as stairs and reconstructed point values as markers."""
    q = np.asarray(q)
    qs = np.asarray(qs)
    nx = q.shape[0]
    xs = cell_edges(nx)
    ax.stairs(q, xs, baseline=None, linewidth=1.0, color="#666666", label="cell averages")
    if exact is not None:
        x_fine = np.linspace(0, 1, 10 * nx)
        ax.plot(x_fine, exact(x_fine), linewidth=0.5, color="black", label="exact")
    ax.scatter(point_coordinates(nx, points).ravel(), qs.ravel(), s=4, color="#d62728", zorder=3, label=label or "reconstruction")
    ax.set_xlabel("Space (x)", fontsize=fontsize)
    ax.grid()
    if title:
        ax.set_title(title, fontsize=fontsize)


def plot_reconstruction(data, points, path=None, return_fig=False, width=4, height=3, dpi=300, title_col=None, exact=None, **kwargs):
    """
    Plot one reconstruction per column.

    Parameters:
      - data: list of (q, qs) pairs, q being (nx,) cell averages and qs (nx, n) reconstructed values.
      - points: reconstruction points in [-1, 1] matching the columns of qs.
      - path: if provided, the figure is saved to this path, otherwise it is shown (unless return_fig is True).
      - exact: optional list of functions (one per column) drawn as reference.
      - kwargs: additional arguments to pass to plot_reconstruction_on_ax.
    """
    ncols = len(data)
    fig, axes = plt.subplots(1, ncols, figsize=(ncols * width, height), dpi=dpi, squeeze=False)
    for j, (q, qs) in enumerate(data):
        title = title_col[j] if title_col is not None else None
        fn = exact[j] if exact is not None else None
        plot_reconstruction_on_ax(q, qs, points, axes[0, j], exact=fn, title=title, **kwargs)
    axes[0, 0].legend(fontsize=6)

    # finish up
    plt.tight_layout()
    if path is not None:
        plt.savefig(path)
    if return_fig:
        return fig
    if path is None:
        plt.show()
    plt.close(fig)
