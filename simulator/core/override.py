from .car import Mode, Power
from .dispatcher import Dispatcher


class OverrideController:
    """
    Applies power and mode changes that pre-empt normal service.

    Powering off or entering FIRE mode discards every pending stop (they are
    not replayed afterwards) and recalls the car to floor 1 inside the same
    call. The dispatcher then stays suspended until the override clears.
    Clearing an override resumes nothing: the car waits at floor 1 for new
    requests.
    """

    def __init__(self, dispatcher: Dispatcher):
        self.dispatcher = dispatcher
        self.car = dispatcher.car

    @property
    def active(self) -> bool:
        return self.car.mode is Mode.FIRE or self.car.power is Power.OFF

    def set_power(self, power: Power):
        if power is Power.OFF:
            self.dispatcher.clear_requests()
            self.car.set_power(Power.OFF)
            self.dispatcher.enter_override()
        else:
            self.car.set_power(Power.ON)
            self.dispatcher.release_override()

    def set_mode(self, mode: Mode):
        if mode is Mode.FIRE:
            self.dispatcher.clear_requests()
            self.car.set_mode(Mode.FIRE)
            self.dispatcher.enter_override()
        else:
            self.car.set_mode(mode)
            self.dispatcher.release_override()

    def set_enabled(self, enabled: bool):
        """Toggle whether the car accepts new requests. Pending stops and power are untouched."""
        self.car.enabled = enabled

    def reset(self):
        """Drop all requests and overrides and return the car to its power-on state at floor 1."""
        self.dispatcher.clear_requests()
        self.car.reset()
        self.dispatcher.reset()
