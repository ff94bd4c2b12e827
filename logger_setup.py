# logger_setup.py

import logging
import os
import json

LOGGER_NAME = "particle_life"

def setup_logging(config_path='config.json'):
    """
    Routes the simulation's log output for one run.

    Every module of the engine logs through logging.getLogger("particle_life").
    This attaches two handlers to that logger: one echoes to the terminal and
    one appends to runs/<run_id>/simulation.log. The logger does not
    propagate, so compiler chatter from numba on the root logger never ends
    up in a run's log.

    Data Contract:
    - Inputs: config_path (str) - JSON file holding 'run_id' and a 'logging'
      section with 'level' and 'format'.
    - Outputs: logging.Logger - The "particle_life" logger, ready to use.
    - Side Effects:
        - Replaces any handlers previously attached to "particle_life".
        - Creates runs/<run_id>/ under the working directory.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    log_dir = os.path.join('runs', run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'simulation.log')

    formatter = logging.Formatter(log_config['format'])
    run_log = logging.FileHandler(log_file)
    run_log.setFormatter(formatter)
    terminal = logging.StreamHandler()
    terminal.setFormatter(formatter)

    # Re-running setup (e.g. a second run in one process) starts from a clean slate
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.addHandler(run_log)
    logger.addHandler(terminal)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
