import simpy

# Well-known topics
COMMAND_TOPIC = "bus/commands"
STATUS_TOPIC = "bus/status"


def car_topic(car_name: str, channel: str) -> str:
    """Topic for one car's channel, e.g. car_topic("Car_1", "status") -> "elevator/Car_1/status"."""
    return f"elevator/{car_name}/{channel}"


class MessageBroker:
    """
    Topic-based publish-subscribe hub between simulation components.

    Each topic is a simpy.Store, so a subscriber waits on get() until a
    publisher put()s. Every publish is copied to one broadcast pipe for the
    recorder, which sees the whole traffic in order.
    """
    def __init__(self, env: simpy.Environment, verbose: bool = True):
        """
        Args:
            env (simpy.Environment): SimPy environment
            verbose (bool): Print a line for each publish
        """
        self.env = env
        self.verbose = verbose
        self.topics = {}  # topic -> Store
        self.broadcast_pipe = simpy.Store(self.env)
        self.published_count = 0

    def get_pipe(self, topic: str) -> simpy.Store:
        """Return the Store behind `topic`, creating it on first use."""
        if topic not in self.topics:
            self.topics[topic] = simpy.Store(self.env)
        return self.topics[topic]

    def put(self, topic: str, message):
        """
        Publish a message on a topic.

        Returns:
            The Store put event (already triggered for unbounded topics)
        """
        if self.verbose:
            print(f"{self.env.now:.2f} [Broker] Publish on '{topic}': {message}")
        self.published_count += 1
        self.broadcast_pipe.put({'topic': topic, 'message': message})
        return self.get_pipe(topic).put(message)

    def get(self, topic: str):
        """Event that fires with the next message on `topic`."""
        return self.get_pipe(topic).get()

    def get_broadcast_pipe(self) -> simpy.Store:
        return self.broadcast_pipe

    def get_current_time(self) -> float:
        """Simulation clock, so controllers need not hold the environment."""
        return self.env.now
