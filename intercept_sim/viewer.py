"""
matplotlib front end for a SimulationSession.

The animation is the per-frame clock: every FuncAnimation frame calls
session.tick() once and redraws from session.snapshot(). Nothing here
changes playback state except through start() / tick() / reset().
"""

import logging

import matplotlib.pyplot as plt
import numpy as np

from .core import CITY_POSITION, InterceptResult, PlaybackPhase
from .session import SimulationSession

logger = logging.getLogger(__name__)

BACKGROUND = '#1a1a2e'
THREAT_COLOR = '#ff6600'        # orange trail, red dot
INTERCEPTOR_COLOR = '#00ffff'   # cyan trail, blue dot


def _scene_bounds(result: InterceptResult, launch_site: np.ndarray):
    """Axis limits covering both trajectories, the city and the launch site."""
    points = np.vstack([result.threat_samples, result.interceptor_samples,
                        CITY_POSITION, launch_site])
    lo, hi = points.min(axis=0), points.max(axis=0)
    margin = max(float((hi - lo).max()) * 0.1, 1.0)
    return lo - margin, hi + margin


def _style_axes(ax, lo, hi):
    ax.set_xlim(lo[0], hi[0])
    ax.set_ylim(lo[1], hi[1])
    ax.set_zlim(min(lo[2], 0.0), hi[2])
    ax.set_xlabel('X', color='white')
    ax.set_ylabel('Y', color='white')
    ax.set_zlabel('Z (altitude)', color='white')
    ax.tick_params(colors='white')


def plot_result(result: InterceptResult, launch_site, save_path: str = None):
    """
    Static 3D plot of both trajectories and the intercept point.

    Args:
        result: Solved intercept
        launch_site: Interceptor base position
        save_path: Optional path to save the figure
    """
    launch_site = np.asarray(launch_site, dtype=float)
    fig = plt.figure(figsize=(12, 9), facecolor=BACKGROUND)
    ax = fig.add_subplot(111, projection='3d', facecolor=BACKGROUND)

    threat, interceptor = result.threat_samples, result.interceptor_samples
    ax.plot(threat[:, 0], threat[:, 1], threat[:, 2], color=THREAT_COLOR, label='Threat')
    ax.plot(interceptor[:, 0], interceptor[:, 1], interceptor[:, 2],
            color=INTERCEPTOR_COLOR, label='Interceptor')
    ax.scatter(*CITY_POSITION, color='black', edgecolors='white', s=80, label='City')
    ax.scatter(*launch_site, color='blue', s=90, label='Launch site')
    ax.scatter(*result.intercept_point, color='red', s=160, alpha=0.7, label='Intercept')

    lo, hi = _scene_bounds(result, launch_site)
    _style_axes(ax, lo, hi)
    title = f'Intercept at t={result.intercept_time:.2f}s'
    if result.is_degenerate:
        title += '  (approximate)'
    ax.set_title(title, color='white')
    ax.legend(loc='upper left')

    if save_path:
        fig.savefig(save_path, facecolor=BACKGROUND)
        logger.info("Saved plot to %s", save_path)
    return fig


def animate_session(session: SimulationSession, interval: int = 50,
                    save_path: str = None, view_elev: float = 25,
                    view_azim: float = -60, rotate_view: bool = False,
                    show: bool = True):
    """
    Animated 3D replay of a session, launched on the first frame.

    Args:
        session: Session to drive (reset and started by the animation)
        interval: Milliseconds between frames
        save_path: Optional path to save animation (requires ffmpeg)
        view_elev: Elevation angle for the 3D view (degrees)
        view_azim: Initial azimuth angle for the 3D view (degrees)
        rotate_view: If True, slowly rotate the camera
        show: Call plt.show() when done setting up
    """
    from matplotlib.animation import FuncAnimation

    result = session.result
    launch_site = session.config.launch_site

    fig = plt.figure(figsize=(14, 10), facecolor=BACKGROUND)
    ax = fig.add_subplot(111, projection='3d', facecolor=BACKGROUND)
    lo, hi = _scene_bounds(result, launch_site)
    _style_axes(ax, lo, hi)

    ax.scatter(*CITY_POSITION, color='black', edgecolors='white', s=80)
    ax.scatter(*launch_site, color='blue', s=110)

    threat, interceptor = result.threat_samples, result.interceptor_samples
    threat_line, = ax.plot(threat[:, 0], threat[:, 1], threat[:, 2], color=THREAT_COLOR)
    interceptor_line, = ax.plot(interceptor[:, 0], interceptor[:, 1], interceptor[:, 2],
                                color=INTERCEPTOR_COLOR)
    threat_dot, = ax.plot([], [], [], 'o', color='red', markersize=8)
    interceptor_dot, = ax.plot([], [], [], 'o', color='blue', markersize=8)
    impact_marker, = ax.plot([], [], [], 'o', color='red', markersize=22, alpha=0.7)

    title_text = ax.text2D(0.5, 0.95, '', transform=ax.transAxes, ha='center',
                           color='white', fontsize=14, fontweight='bold')
    status_text = ax.text2D(0.02, 0.80, '', transform=ax.transAxes, color='white',
                            fontsize=10, family='monospace')

    def draw():
        snap = session.snapshot()
        t_pos, i_pos = snap.threat_position, snap.interceptor_position
        threat_dot.set_data_3d([t_pos[0]], [t_pos[1]], [t_pos[2]])
        interceptor_dot.set_data_3d([i_pos[0]], [i_pos[1]], [i_pos[2]])
        threat_line.set_visible(snap.trajectories_visible)
        interceptor_line.set_visible(snap.trajectories_visible)

        impact_marker.set_visible(snap.impact_visible)
        if snap.impact_visible:
            p = snap.impact_point
            impact_marker.set_data_3d([p[0]], [p[1]], [p[2]])
            impact_marker.set_alpha(float(np.clip(snap.impact_intensity, 0.0, 1.0)))

        # snap.frame is the next frame to show; the one on screen is one behind
        shown = min(max(snap.frame - 1, 0), result.num_samples)
        if snap.phase == PlaybackPhase.SETTLED:
            t = result.intercept_time
        else:
            t = result.sample_times[shown]
        title_text.set_text(f'INTERCEPT REPLAY  |  Time: {t:.2f}s')
        status_text.set_text(
            f'Phase: {snap.phase.name}\n'
            f'Frame: {shown}/{result.num_samples}\n'
            f'Range: {np.linalg.norm(t_pos - i_pos):7.1f}'
        )
        return [threat_dot, interceptor_dot, threat_line, interceptor_line,
                impact_marker, title_text, status_text]

    def init():
        session.reset()
        return draw()

    def animate(frame):
        if frame == 0:
            session.reset()
            session.start()
        elif not session.finished:
            session.tick()

        if rotate_view:
            ax.view_init(elev=view_elev, azim=view_azim + frame * 0.2)
        else:
            ax.view_init(elev=view_elev, azim=view_azim)
        return draw()

    # Frame 0 launches, then one tick per frame until the impact hold runs out
    anim = FuncAnimation(fig, animate, init_func=init,
                         frames=session.total_frames + 1, interval=interval,
                         blit=False, repeat=False)

    if save_path:
        logger.info("Saving animation to %s...", save_path)
        anim.save(save_path, writer='ffmpeg', fps=30,
                  savefig_kwargs={'facecolor': BACKGROUND})
        logger.info("Done!")

    if show:
        plt.tight_layout()
        plt.show()
    return anim
