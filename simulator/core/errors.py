"""
Request rejection errors

All of these are recoverable: they are raised back to whoever submitted the
request and never abort a running simulation.
"""


class RequestRejected(ValueError):
    """Base class for a request the car is not allowed to accept"""

    def __init__(self, floor: int, message: str):
        super().__init__(message)
        self.floor = floor


class InvalidFloor(RequestRejected):
    """Requested floor is outside the building"""

    def __init__(self, floor: int, num_floors: int):
        super().__init__(floor, f"Invalid floor {floor} (valid: 1..{num_floors})")
        self.num_floors = num_floors


class PowerOff(RequestRejected):
    """Car is powered off"""

    def __init__(self, floor: int):
        super().__init__(floor, f"Car is OFF, request for floor {floor} denied")


class FireRestricted(RequestRejected):
    """Car is in FIRE mode and only answers the recall floor"""

    def __init__(self, floor: int, recall_floor: int = 1):
        super().__init__(floor, f"Car is in FIRE mode, only floor {recall_floor} allowed (got {floor})")
        self.recall_floor = recall_floor


class CarDisabled(RequestRejected):
    """Car has been taken out of service by a DISABLE command"""

    def __init__(self, floor: int):
        super().__init__(floor, f"Car is disabled, request for floor {floor} denied")
