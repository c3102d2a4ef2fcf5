# main.py
"""
Main entry point for the Particle Swarm application.

This script orchestrates the entire application lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the camera, particles, simulation and viewer.
4. Runs the frame loop: one simulation tick per rendered frame.
5. Handles clean shutdown and reports a performance profile.
"""
import cProfile
import io
import logging
import pstats
import sys
import time

import numpy as np

from constants import FPS
from utils import load_config, setup_logging


def main(config_path: str = 'config.json'):
    """
    The main function to run the particle swarm.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Particle Swarm Starting ---")

    sim_params = config['simulation_parameters']
    run_params = config['run_control']
    vis_params = config['visualization']

    from interaction import PerspectiveCamera, PointerState
    from particle import ParticleSystem
    from settings import SimulationConfig
    from simulation import Simulation
    from visualization import Visualizer

    # --- Component Initialization ---
    # The visualizer sets the camera aspect ratio from the window size.
    sim_config = SimulationConfig.from_params(sim_params)
    camera = PerspectiveCamera()
    visualizer = Visualizer(
        camera,
        fullscreen=vis_params.get('fullscreen', False),
        show_panel=vis_params.get('show_panel', True)
    )
    particles = ParticleSystem(sim_config, seed=sim_params.get('seed'))
    sim = Simulation(particles, sim_config, camera)
    pointer = PointerState()

    profiler = cProfile.Profile()

    log_throttle = max(1, int(run_params.get('log_throttle_steps', 300)))
    # 0 runs until the window is closed.
    max_steps = run_params.get('max_steps', 0)

    running = True
    step_num = 0
    start_time = time.perf_counter()

    profiler.enable()
    while running:
        sim.step(pointer, time.perf_counter() - start_time)
        step_num += 1

        if not visualizer.draw(particles, sim, pointer):
            running = False
        visualizer.tick(FPS)

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Simulation step {step_num} ({visualizer.clock.get_fps():.1f} FPS)")
            avg_speed = np.mean(np.linalg.norm(particles.velocities, axis=1))
            logging.debug(f"Step {step_num} | Average Speed: {avg_speed:.5f}")

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            running = False
    profiler.disable()

    visualizer.close()
    logging.info("Simulation loop finished.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Swarm Shutting Down ---")


if __name__ == "__main__":
    main(*sys.argv[1:2])
