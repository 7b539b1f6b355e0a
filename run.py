#!/usr/bin/env python3
"""
Intercept Simulation - Entry Point

Run this file to solve the reference scenario and replay it:
    python run.py              # 3D animated replay
    python run.py --static     # static 3D plot of both trajectories
    python run.py --headless   # drive playback without a display, log the result
"""

import logging
import sys

from intercept_sim import SimulationSession


def run_headless(session: SimulationSession):
    snap = session.snapshot()
    ticks = 0
    for snap in session.replay():
        ticks += 1
    p = snap.threat_position
    logging.info("Replay finished after %d ticks: phase=%s, final position (%.1f, %.1f, %.1f)",
                 ticks, snap.phase.name, p[0], p[1], p[2])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    session = SimulationSession()

    if len(sys.argv) > 1 and sys.argv[1] == "--headless":
        run_headless(session)
    elif len(sys.argv) > 1 and sys.argv[1] == "--static":
        import matplotlib.pyplot as plt
        from intercept_sim import plot_result
        plot_result(session.result, session.config.launch_site)
        plt.show()
    else:
        from intercept_sim import animate_session
        animate_session(session)
