"""
Configuration management package

Provides configuration classes for the simulation and its input scenarios.
"""

from .simulation import (
    SimulationConfig,
    BuildingConfig,
    CarConfig
)

from .scenario import (
    ScenarioConfig,
    ScenarioEvent
)

from .config_loader import (
    ConfigLoader,
    load_simulation_config,
    load_scenario_config,
    save_simulation_config,
    save_scenario_config
)

__all__ = [
    # Simulation
    'SimulationConfig',
    'BuildingConfig',
    'CarConfig',

    # Scenario
    'ScenarioConfig',
    'ScenarioEvent',

    # Loader
    'ConfigLoader',
    'load_simulation_config',
    'load_scenario_config',
    'save_simulation_config',
    'save_scenario_config',
]
