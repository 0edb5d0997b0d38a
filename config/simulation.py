"""
Simulation Configuration

Building size, car settings and run control for one simulation.
"""

from dataclasses import dataclass


@dataclass
class BuildingConfig:
    """Building specifications"""
    num_floors: int = 10

    def __post_init__(self):
        if self.num_floors < 2:
            raise ValueError("num_floors must be at least 2")
        if self.num_floors > 255:
            # STATUS replies pack the floor into 8 bits
            raise ValueError("num_floors cannot exceed 255")


@dataclass
class CarConfig:
    """Per-car settings, shared by every car in the bank"""
    num_cars: int = 4
    dwell_ticks: int = 2
    inbox_capacity: int = 32

    def __post_init__(self):
        if self.num_cars < 1:
            raise ValueError("num_cars must be at least 1")
        if self.dwell_ticks < 0:
            raise ValueError("dwell_ticks cannot be negative")
        if self.inbox_capacity < 1:
            raise ValueError("inbox_capacity must be at least 1")


@dataclass
class SimulationConfig:
    """
    Complete simulation configuration

    Combines building and car settings with run control.
    """
    building: BuildingConfig
    car: CarConfig

    # Simulation control
    tick_interval: float = 1.0  # simulation time per dispatcher tick
    duration: float = 200.0
    realtime_factor: float = 0.0  # 0.0 = as fast as possible, 1.0 = wall clock
    command_topic: str = "bus/commands"
    verbose: bool = True

    def __post_init__(self):
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")
        if self.duration <= 0:
            raise ValueError("duration must be positive")
        if self.realtime_factor < 0:
            raise ValueError("realtime_factor cannot be negative")

    @classmethod
    def default(cls) -> 'SimulationConfig':
        return cls(building=BuildingConfig(), car=CarConfig())

    @classmethod
    def from_dict(cls, data: dict) -> 'SimulationConfig':
        """Create SimulationConfig from dictionary"""
        sim_data = data.get('simulation', data)

        building_data = sim_data.get('building', {})
        building = BuildingConfig(
            num_floors=building_data.get('num_floors', 10)
        )

        car_data = sim_data.get('car', {})
        car = CarConfig(
            num_cars=car_data.get('num_cars', 4),
            dwell_ticks=car_data.get('dwell_ticks', 2),
            inbox_capacity=car_data.get('inbox_capacity', 32)
        )

        return cls(
            building=building,
            car=car,
            tick_interval=sim_data.get('tick_interval', 1.0),
            duration=sim_data.get('duration', 200.0),
            realtime_factor=sim_data.get('realtime_factor', 0.0),
            command_topic=sim_data.get('command_topic', 'bus/commands'),
            verbose=sim_data.get('verbose', True)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            'simulation': {
                'building': {
                    'num_floors': self.building.num_floors
                },
                'car': {
                    'num_cars': self.car.num_cars,
                    'dwell_ticks': self.car.dwell_ticks,
                    'inbox_capacity': self.car.inbox_capacity
                },
                'tick_interval': self.tick_interval,
                'duration': self.duration,
                'realtime_factor': self.realtime_factor,
                'command_topic': self.command_topic,
                'verbose': self.verbose
            }
        }

    def validate(self):
        """Validate configuration consistency"""
        if self.duration < self.tick_interval:
            raise ValueError(f"duration ({self.duration}) must cover at least one tick ({self.tick_interval})")
