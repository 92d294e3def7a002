"""Exception types raised by the seeding engine."""


class SeedError(Exception):
    """Base class for all seeding failures."""


class ConfigError(SeedError):
    """Invalid seed configuration or unreadable config file."""


class DatasetLoadError(SeedError):
    """The medication catalog is missing or malformed."""


class EmptyInputError(SeedError, ValueError):
    """A sampler was asked to choose from an empty candidate set."""


class PersistenceError(SeedError):
    """The document store rejected a write."""

    def __init__(self, collection: str, message: str):
        super().__init__(f"{collection}: {message}")
        self.collection = collection
