"""Exception types raised by the simulator core."""


class RobosimError(Exception):
    """Base class for simulator errors."""


class ConfigError(RobosimError, ValueError):
    """A model's configuration could not be loaded.

    Fatal to the model being loaded only; the world keeps going.
    """

    def __init__(self, field, message):
        self.field = field
        super().__init__(f"{field}: {message}")


class MissingField(ConfigError):
    def __init__(self, field):
        super().__init__(field, "required property is missing")


class InvalidValue(ConfigError):
    def __init__(self, field, value, reason="invalid value"):
        self.value = value
        super().__init__(field, f"{reason} ({value!r})")


class LifecycleError(RobosimError, RuntimeError):
    """A lifecycle operation was invoked from a state that does not allow it."""


class QueryUnavailable(RobosimError, RuntimeError):
    """The world's spatial index is not ready for ray queries."""
