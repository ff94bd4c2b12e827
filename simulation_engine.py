# simulation_engine.py

import numpy as np
import logging
from attraction_matrix import AttractionMatrix
from config_validation import ConfigurationError, validate_config
from integrator import Integrator
from population import Population
from spatial_index import build_spatial_index

logger = logging.getLogger("particle_life")


class SimulationEngine:
    """
    Orchestrates one simulation tick and owns the state carried between ticks.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file.
        - rng (np.random.Generator): The master seeded random number generator.
          Used for the initial matrix and population and for every later reset.
        - population (Population, optional): Starting particles. Generated if omitted.
        - attraction_matrix (AttractionMatrix, optional): Starting matrix. Generated if omitted.
    - Outputs: None. tick() returns a read-only PopulationSnapshot.
    - Side Effects: Replaces self.population and, on request, self.attraction_matrix.
    - Invariants: Population size and color count never change. The spatial
      index is rebuilt inside every tick and never outlives it.
    """
    def __init__(self, config: dict, rng: np.random.Generator, population: Population = None,
                 attraction_matrix: AttractionMatrix = None):
        self.config = validate_config(config)
        self.rng = rng
        self.num_colors = self.config['color_count']
        self.time_step = self.config['time_step']
        self.tick_count = 0

        self.integrator = Integrator(
            cutoff_radius=self.config['cutoff_radius'],
            beta=self.config['force_beta'],
            friction_half_life=self.config['friction_half_life'],
        )

        if attraction_matrix is None:
            attraction_matrix = AttractionMatrix.build(self.num_colors, rng)
        elif attraction_matrix.num_colors != self.num_colors:
            raise ConfigurationError(
                f"Attraction matrix covers {attraction_matrix.num_colors} colors, "
                f"expected {self.num_colors}."
            )
        self.attraction_matrix = attraction_matrix

        if population is None:
            population = Population.generate(self.config['particle_count'], self.num_colors, rng)
        elif len(population) != self.config['particle_count'] or population.num_colors != self.num_colors:
            raise ConfigurationError(
                f"Supplied population has {len(population)} particles over {population.num_colors} colors, "
                f"expected {self.config['particle_count']} over {self.num_colors}."
            )
        self.population = population

        logger.info(f"SimulationEngine created for {len(self.population)} particles and {self.num_colors} colors.")
        logger.info(
            f"Physics: cutoff={self.config['cutoff_radius']}, beta={self.config['force_beta']}, "
            f"dt={self.time_step}, friction_half_life={self.config['friction_half_life']}, "
            f"spatial_index={self.config['spatial_index']}"
        )

    def _build_index(self):
        return build_spatial_index(
            self.population.positions,
            strategy=self.config['spatial_index'],
            leaf_capacity=self.config['quadtree_leaf_capacity'],
            max_depth=self.config['quadtree_max_depth'],
        )

    def tick(self, dt: float = None, reset_matrix_requested: bool = False, pointer_stimulus=None):
        """
        Runs one full step:
        1. Regenerate the attraction matrix if the driver asked for it.
        2. Build a fresh spatial index over the current positions.
        3. Integrate forces, velocities, positions and the pointer impulse.
        4. Swap in the new population and hand back a snapshot.
        """
        if dt is None:
            dt = self.time_step

        self.attraction_matrix = self.attraction_matrix.reset(self.rng, reset_matrix_requested)

        index = self._build_index()
        self.population = self.integrator.step(
            self.population, index, self.attraction_matrix, dt, pointer_stimulus
        )
        self.tick_count += 1
        return self.population.snapshot()

    def snapshot(self):
        return self.population.snapshot()

    def get_total_kinetic_energy(self):
        """
        Total kinetic energy with unit mass per particle.
        KE = sum(0.5 * v^2)
        """
        return 0.5 * np.sum(self.population.velocities**2)

    def get_total_momentum(self):
        """
        Sum of velocities with unit mass per particle. The attraction matrix is
        asymmetric, so this drifts over time rather than staying constant.
        """
        return np.sum(self.population.velocities, axis=0)
