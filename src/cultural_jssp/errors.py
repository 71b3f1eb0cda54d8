"""Exception types raised by the cultural JSSP optimizer."""


class InvalidInstanceError(ValueError):
    """Problem instance is malformed (empty job, bad machine, bad duration)."""


class ConfigError(ValueError):
    """Configuration value outside its accepted range."""


class EmptyPopulationError(ValueError):
    """Selection or best lookup attempted on an empty population."""


class ScheduleInvariantError(RuntimeError):
    """An operator produced a sequence that is not a valid schedule.

    Raised when the operation multiset differs from the canonical set or a
    job's operations are out of technological order. Indicates a bug, never
    a recoverable condition.
    """
