import argparse

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from rich.console import Console
from rich.table import Table

from nweno import WENO
from nweno.initial_conditions import Riemann, Sine, point_coordinates
from nweno.utils.plotting import plot_reconstruction


def parse_args():
    parser = argparse.ArgumentParser()

    # scheme
    parser.add_argument("--k", type=int, default=3, help="Stencil width (the scheme has order 2k-1).")
    parser.add_argument("--points", nargs="+", type=float, default=[-1.0, 1.0], help="Reconstruction points in [-1, 1].")
    parser.add_argument("--eps", type=float, default=1e-5, help="Regularization of the nonlinear weights.")

    # data
    parser.add_argument("--nx", nargs="+", type=int, default=[20, 40, 80, 160, 320], help="Grid sizes of the convergence study.")
    parser.add_argument("--frequency", type=int, default=1, help="Frequency of the smooth test function.")

    # outputs
    parser.add_argument("--plot", type=str, default=None, help="If set, save a plot of the reconstructions to this path.")
    parser.add_argument("--verbose", action="store_true")

    return parser.parse_args()


def errors(weno, ic, nx):
    """L1 and Linf errors of the reconstruction of `ic` on the cells that have full stencils."""
    q = ic.discretize(nx)
    qs = weno(q).numpy()
    exact = ic(point_coordinates(nx, weno.points))
    imin, imax = weno.cell_range(nx)
    err = np.abs(qs - exact)[imin : imax + 1]
    return np.mean(err), np.max(err)


def convergence_table(weno, ic, nxs):
    table = Table(title=f"{weno} on a smooth function")
    table.add_column("Cells", justify="right", style="cyan")
    table.add_column("L1 error", justify="center", style="green")
    table.add_column("L1 order", justify="center", style="green")
    table.add_column("Linf error", justify="center", style="magenta")
    table.add_column("Linf order", justify="center", style="magenta")

    previous = None
    for nx in nxs:
        l1, linf = errors(weno, ic, nx)
        if previous is None:
            orders = ["-", "-"]
        else:
            ratio = nx / previous[0]
            orders = [f"{np.log(previous[1] / l1) / np.log(ratio):.2f}", f"{np.log(previous[2] / linf) / np.log(ratio):.2f}"]
        table.add_row(str(nx), f"{l1:.2e}", orders[0], f"{linf:.2e}", orders[1])
        previous = (nx, l1, linf)
    return table


def jump_table(weno, ic, nx):
    q = ic.discretize(nx)
    qs = weno(q).numpy()
    table = Table(title=f"{weno} across a jump ({nx} cells)")
    table.add_column("Metric", justify="right", style="cyan")
    table.add_column("Value", justify="center", style="green")
    table.add_row("Overshoot", f"{max(0.0, qs.max() - q.max()):.2e}")
    table.add_row("Undershoot", f"{max(0.0, q.min() - qs.min()):.2e}")
    return table


if __name__ == "__main__":
    matplotlib.use("Agg")
    plt.rcParams["font.family"] = "serif"

    args = parse_args()
    console = Console()

    weno = WENO(k=args.k, points=args.points, eps=args.eps, verbose=args.verbose)
    smooth_ic = Sine(frequency=args.frequency)
    jump_ic = Riemann(1.0, 0.1)

    console.print()
    console.print(convergence_table(weno, smooth_ic, args.nx), justify="center")
    console.print()
    console.print(jump_table(weno, jump_ic, args.nx[0]), justify="center")

    if args.plot is not None:
        nx = args.nx[0]
        data = [(ic.discretize(nx), weno(ic.discretize(nx)).numpy()) for ic in [smooth_ic, jump_ic]]
        plot_reconstruction(
            data,
            weno.points,
            path=args.plot,
            title_col=["Sine", "Riemann"],
            exact=[smooth_ic, jump_ic],
        )
        console.print(f"Saved plot to {args.plot}")
