"""
visualizer.py — Wind Slice Viewer
==================================
Renders one horizontal slice (constant y) of the wind simulation:
  - Density       → smoke concentration, obstructions outlined
  - Velocity      → X/Z wind arrows over the wind speed
  - Obstructions  → solid cells of the slice

The viewer only reads the simulation's fields between steps; it never
writes them.

Uses matplotlib FuncAnimation for real-time updates.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.animation as animation
from matplotlib.colors import LinearSegmentedColormap

# Custom smoke colormap: black → teal → white
SMOKE_COLORS = ["#000000", "#002a2a", "#00c8b4", "#ffffff"]
smoke_cmap = LinearSegmentedColormap.from_list("smoke", SMOKE_COLORS)

# Wind speed (m/s) drawn as an arrow one cell long
QUIVER_SCALE = 2.0


class WindVisualizer:
    """
    Real-time slice viewer of a WindSimulation.

    Usage (standalone):
        from wind import WindSimulation
        from visualizer import WindVisualizer

        sim = WindSimulation(16, 8, 16)
        sim.fill_velocity((1.0, 0.0, 0.0))
        viz = WindVisualizer(sim)
        viz.run()  # Opens live window
    """

    def __init__(self, simulation, slice_y: int = None, delta: float = 1 / 60,
                 source_every: int = 0):
        """
        Args:
            simulation   : WindSimulation instance
            slice_y      : Field row to show. None = middle of the interior.
            delta        : Timestep per animation frame in seconds
            source_every : Queue a density source every n frames (0 = never)
        """
        self.sim = simulation
        self.delta = delta
        self.source_every = source_every
        height = simulation.field_dim.height
        self.slice_y = height // 2 if slice_y is None else slice_y
        if not 0 <= self.slice_y < height:
            raise ValueError(f"Slice y={self.slice_y} outside of field height {height}")

        self._setup_figure()

    def _setup_figure(self):
        """Initialize the matplotlib figure with 3 subplots."""
        self.fig, self.axes = plt.subplots(1, 3, figsize=(14, 5))
        self.fig.patch.set_facecolor('#0a0a0a')

        titles = ["density", "velocity (x/z)", "obstructions"]
        density, speed, (u, w), solid = self._get_slices()

        for ax, title in zip(self.axes, titles):
            ax.set_facecolor('#0a0a0a')
            ax.set_title(f"{title}  y={self.slice_y}", color='#aaaaaa', fontsize=9,
                         fontfamily='monospace')
            ax.set_xticks([])
            ax.set_yticks([])
            for spine in ax.spines.values():
                spine.set_edgecolor('#333333')

        self.density_img = self.axes[0].imshow(
            density, cmap=smoke_cmap, vmin=0, vmax=1.0,
            interpolation='bilinear', origin='lower', aspect='equal')
        if solid.any():
            self.axes[0].contour(solid, levels=[0.5], colors='#ff4040', linewidths=0.8)

        self.speed_img = self.axes[1].imshow(
            speed, cmap='viridis', vmin=0, vmax=max(1.0, float(speed.max())),
            interpolation='nearest', origin='lower', aspect='equal')
        zs, xs = np.mgrid[0:u.shape[0], 0:u.shape[1]]
        self.quiver = self.axes[1].quiver(xs, zs, u, w, color='#ffffff',
                                          pivot='mid', scale_units='xy',
                                          scale=QUIVER_SCALE)

        self.solid_img = self.axes[2].imshow(
            solid, cmap='gray', vmin=0, vmax=1,
            interpolation='nearest', origin='lower', aspect='equal')

        self.title_text = self.fig.suptitle(
            "Wind Sim — Frame 0", color='#cccccc', fontsize=10, fontfamily='monospace')

        plt.tight_layout()

    def _get_slices(self) -> tuple:
        """
        Extract the y = slice_y plane of every field.

        Arrays are transposed to (z, x) so X runs horizontally.
        """
        y = self.slice_y
        vel = self.sim.velocity
        density = self.sim.density.data[:, y, :].T
        u = vel.x.data[:, y, :].T
        w = vel.z.data[:, y, :].T
        speed = vel.magnitude()[:, y, :].T
        solid = self.sim.obstruction.data[:, y, :].T.astype(np.float32)
        return density, speed, (u, w), solid

    def redraw(self, metrics: dict = None):
        """Refresh every artist from the current fields."""
        density, speed, (u, w), solid = self._get_slices()
        self.density_img.set_data(density)
        self.speed_img.set_data(speed)
        self.quiver.set_UVC(u, w)
        self.solid_img.set_data(solid)

        if metrics:
            self.title_text.set_text(
                f"Wind Sim — Frame {metrics['frame']} | "
                f"{metrics['total_ms']:.1f}ms | "
                f"div_max={metrics['divergence_max']:.5f} | "
                f"density={metrics['density_total']:.2f}")
        return [self.density_img, self.speed_img, self.quiver, self.solid_img, self.title_text]

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates plots."""
        if self.source_every and frame_num % self.source_every == 0:
            self.sim.add_density_source()
        metrics = self.sim.step(self.delta)
        return self.redraw(metrics)

    def run(self, fps: int = 30, frames: int = 500):
        """
        Start the live animation window.

        Args:
            fps    : Target animation frame rate
            frames : Total frames to render
        """
        interval_ms = 1000 // fps
        self.anim = animation.FuncAnimation(
            self.fig,
            self.update,
            frames=frames,
            interval=interval_ms,
            blit=True
        )
        plt.show()

    def save_png(self, path: str = "wind_sim.png"):
        """Save the current state as a still image."""
        self.redraw()
        self.fig.savefig(path, facecolor=self.fig.get_facecolor())
        print(f"Saved: {path}")

    def save_gif(self, path: str = "wind_sim.gif", fps: int = 10, frames: int = 100):
        """Save animation as a GIF (for reports and demos)."""
        print(f"Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, interval=100, blit=True
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")

    def close(self):
        plt.close(self.fig)
