import matplotlib.pyplot as plt
import numpy as np

from puttlab.physics.ball_roll import HOLE_RADIUS_M


def plot_green(terrain, green, ball=None, hint_path=None, aim_zone=None,
               streamlines=None, out_path: str | None = None, show: bool = False):
    """
    Top-down view: height field, green outline, hole, ball, and optional
    hint path, aim zone (hull + ellipse) and fall-line streamlines.
    """
    fig, ax = plt.subplots(figsize=(8, 8))

    x_axis, z_axis = terrain.axes()
    Y = terrain.height_grid_m()
    half = terrain.world_size / 2.0
    im = ax.imshow(Y * 1000.0, origin="lower", extent=(-half, half, -half, half),
                   cmap="Greens", alpha=0.8)
    fig.colorbar(im, ax=ax, label="height (mm)")

    if green is not None:
        outline = green.outline()
        if not outline.is_empty:
            xs, zs = outline.exterior.xy
            ax.plot(xs, zs, color="black", linewidth=1.5)
        r = green.bounding_radius()
        ax.set_xlim(-r, r)
        ax.set_ylim(-r, r)

    ax.add_patch(plt.Circle((0.0, 0.0), HOLE_RADIUS_M, color="black"))

    if ball is not None:
        ax.scatter([ball.x], [ball.z], s=30, color="white", edgecolors="black", zorder=5)

    for line in streamlines or []:
        if len(line) >= 2:
            pts = np.asarray(line)
            ax.plot(pts[:, 0], pts[:, 1], color="tab:blue", linewidth=0.6, alpha=0.6)

    if hint_path:
        pts = np.asarray(hint_path)
        ax.plot(pts[:, 0], pts[:, 2], color="gray", linewidth=2.0, alpha=0.8, label="hint")
        ax.legend(loc="upper right")

    if aim_zone is not None and not aim_zone.is_empty:
        hull = np.asarray(aim_zone.hull + aim_zone.hull[:1])
        ax.fill(hull[:, 0], hull[:, 1], color="#4488ff", alpha=0.12)
        ax.plot(hull[:, 0], hull[:, 1], color="#4488ff", alpha=0.4)
        if aim_zone.ellipse is not None:
            e = np.asarray(aim_zone.ellipse.outline())
            ax.plot(e[:, 0], e[:, 1], color="white")
        if aim_zone.metrics is not None:
            m = aim_zone.metrics
            ax.plot([m.start[0], aim_zone.ellipse.cx], [m.start[1], aim_zone.ellipse.cz],
                    color="#f0e020", alpha=0.7)
            ax.plot([0.0, m.foot[0]], [0.0, m.foot[1]], color="#ff4444", alpha=0.7)
            ax.text(0.02, 0.02, m.label(), transform=ax.transAxes, fontsize=9,
                    color="#f0e020", bbox=dict(facecolor="black", alpha=0.75, pad=4))

    ax.set_aspect("equal")
    ax.set_xlabel("x (m)")
    ax.set_ylabel("z (m)")
    ax.set_title(f"Green (seed={terrain.seed})")

    if out_path:
        fig.savefig(out_path, dpi=120)
    if show:
        plt.show()
    plt.close(fig)
    return out_path
