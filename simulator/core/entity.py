import simpy
from abc import ABC, abstractmethod
import itertools  # Helper for entity ID counter


class Entity(ABC):
    """
    Abstract base class for entities that live as SimPy processes.

    Gives every entity a unique id, a name, a string state with logged
    transitions, and starts its run() generator as a process on creation.
    """
    # Entity ID counter shared across all class instances
    _entity_id_counter = itertools.count()

    def __init__(self, env: simpy.Environment, name: str = None, verbose: bool = True):
        """
        Initialize the entity.

        Args:
            env: The SimPy simulation environment this entity belongs to.
            name: Entity name. If not specified, generated from class name and ID.
            verbose: Print creation, state transitions and log() lines.
        """
        self.env = env
        self.entity_id: int = next(self._entity_id_counter)
        self.name: str = name if name is not None else f"{self.__class__.__name__}_{self.entity_id}"
        self.verbose = verbose

        # Concrete classes set their own initial state right after this
        self.state: str = "initial_state"

        # run() only starts once the environment steps, so subclasses may
        # finish initialising after calling super().__init__()
        self._process = self.env.process(self.run())

        self.log(f'Entity "{self.name}" ({self.__class__.__name__}, ID:{self.entity_id}) created.')

    @abstractmethod
    def run(self):
        """
        Generator that serves as the entity's SimPy process body.

        Typically an infinite loop that does one unit of work and then
        yields a timeout.
        """
        pass

    def set_state(self, new_state: str):
        """
        Transition the entity's state.

        Args:
            new_state: Target state name.
        """
        if self.state != new_state:
            old_state = self.state
            self.state = new_state
            self._on_state_changed(old_state, new_state)

    def get_state(self) -> str:
        return self.state

    def _on_state_changed(self, old_state: str, new_state: str):
        """Hook called after a state transition. Subclasses extend it."""
        self._log_state_change(old_state, new_state)

    def _log_state_change(self, old_state: str, new_state: str):
        self.log(f'[{self.name}] state transition: {old_state} -> {new_state}')

    def log(self, message: str):
        if self.verbose:
            print(f"{self.env.now:.2f}: {message}")

    @property
    def process(self) -> simpy.Process:
        """SimPy process object for this entity."""
        return self._process
