# main.py

import sys
import pygame
import constants
import json
import logging
import logger_setup
import numpy as np
from config_validation import ConfigurationError
from integrator import PointerStimulus
from simulation_engine import SimulationEngine

# Get the application's dedicated logger
logger = logging.getLogger("particle_life")

import cProfile, pstats

def read_frame_input(events, left_button_down, mouse_pos, screen_size, pointer_strength):
    """
    Translates this frame's polled input into explicit tick arguments, so the
    engine never touches the input subsystem.

    Data Contract:
    - Inputs:
        - events (list): pygame events polled this frame.
        - left_button_down (bool): Whether the left mouse button is held.
        - mouse_pos (tuple): Mouse position in pixels.
        - screen_size (tuple): (width, height) in pixels.
        - pointer_strength (float): Impulse magnitude while the button is held.
    - Outputs: (quit_requested, reset_matrix_requested, pointer_stimulus or None)
    """
    quit_requested = False
    reset_requested = False
    for event in events:
        if event.type == pygame.QUIT:
            quit_requested = True
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            reset_requested = True

    pointer_stimulus = None
    if left_button_down:
        target = (mouse_pos[0] / screen_size[0], mouse_pos[1] / screen_size[1])
        pointer_stimulus = PointerStimulus(target=target, magnitude=pointer_strength)
    return quit_requested, reset_requested, pointer_stimulus

def draw_particles(screen, snapshot):
    """Draws every particle, mapping the unit square onto the window."""
    width, height = screen.get_size()
    palette = constants.PARTICLE_PALETTE
    for color, (x, y) in zip(snapshot.colors, snapshot.positions):
        pygame.draw.circle(
            screen,
            palette[color % len(palette)],
            (int(x * width), int(y * height)),
            constants.PARTICLE_RADIUS
        )

def draw_fps(screen, clock, font):
    text = font.render(f"FPS {clock.get_fps():.0f}", True, constants.WHITE)
    screen.blit(text, constants.FPS_TEXT_POSITION)

def poll_frame_input(screen_size, pointer_strength):
    """Polls pygame once for this frame and hands the result to read_frame_input."""
    return read_frame_input(
        pygame.event.get(),
        pygame.mouse.get_pressed()[0],
        pygame.mouse.get_pos(),
        screen_size,
        pointer_strength
    )

def run_simulation_loop(engine, screen, clock, font, config):
    """
    The frame loop: poll input, advance the engine exactly one tick, then draw
    the finished snapshot. A quit request ends the loop before the next tick.
    """
    log_interval = config.get('log_interval_ticks', 100)
    max_ticks = config.get('max_ticks', 0)
    pointer_strength = engine.config['pointer_strength']

    while True:
        quit_requested, reset_requested, pointer_stimulus = poll_frame_input(
            screen.get_size(), pointer_strength
        )
        if quit_requested:
            break

        snapshot = engine.tick(
            reset_matrix_requested=reset_requested,
            pointer_stimulus=pointer_stimulus
        )

        # --- Logging (throttled) ---
        if log_interval and engine.tick_count % log_interval == 0:
            momentum = engine.get_total_momentum()
            logger.debug(
                f"Tick={engine.tick_count}, "
                f"Kinetic={engine.get_total_kinetic_energy():.4f}, "
                f"Momentum=({momentum[0]:+.4f}, {momentum[1]:+.4f}), "
                f"FPS={clock.get_fps():.1f}"
            )

        # --- Drawing ---
        screen.fill(constants.BLACK)
        draw_particles(screen, snapshot)
        draw_fps(screen, clock, font)
        pygame.display.flip()
        clock.tick(constants.FPS)

        if max_ticks and engine.tick_count >= max_ticks:
            break

def main():
    """
    Main function to initialize and run the particle life simulation.
    """
    # --- Setup ---
    logger_setup.setup_logging()

    with open('config.json', 'r') as f:
        config = json.load(f)

    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    try:
        engine = SimulationEngine(config['simulation'], rng)
    except ConfigurationError as e:
        logger.error(f"Invalid simulation configuration: {e}")
        sys.exit(1)

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT))
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, constants.FPS_TEXT_SIZE)

    if config.get('profile', False):
        profiler = cProfile.Profile()
        profiler.enable()
        run_simulation_loop(engine, screen, clock, font, config)
        profiler.disable()
        logger.info("Profiling complete. Printing stats...")
        stats = pstats.Stats(profiler).sort_stats('cumtime')
        stats.print_stats(20)
    else:
        run_simulation_loop(engine, screen, clock, font, config)

    logger.info(f"Application shutting down after {engine.tick_count} ticks.")
    pygame.quit()

if __name__ == "__main__":
    main()
