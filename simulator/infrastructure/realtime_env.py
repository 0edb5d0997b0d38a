"""
Wall-clock paced SimPy environment

The dispatch core counts ticks, never seconds. Pacing a run so that a human
can watch it is a presentation concern and lives here.
"""

import simpy
import time


class RealtimeEnvironment(simpy.Environment):
    """
    simpy.Environment that sleeps between events to follow the wall clock.

    Args:
        speed_factor (float): Simulation seconds per real second.
            1.0 follows the wall clock, 2.0 runs twice as fast,
            0.0 disables pacing entirely.
    """

    def __init__(self, speed_factor=1.0, initial_time=0):
        if speed_factor < 0:
            raise ValueError("speed_factor cannot be negative")
        super().__init__(initial_time=initial_time)
        self.speed_factor = speed_factor
        self._anchor()

    def _anchor(self):
        self.real_start_time = time.monotonic()
        self.sim_start_time = self.now

    def step(self):
        """Process one event, then sleep until the wall clock catches up."""
        super().step()
        if self.speed_factor <= 0:
            return
        target = self.real_start_time + (self.now - self.sim_start_time) / self.speed_factor
        delay = target - time.monotonic()
        if delay > 0:
            time.sleep(delay)

    def set_speed(self, speed_factor):
        """Change pacing mid-run; timing restarts from the current instant."""
        if speed_factor < 0:
            raise ValueError("speed_factor cannot be negative")
        self.speed_factor = speed_factor
        self._anchor()

    def get_speed(self):
        return self.speed_factor
