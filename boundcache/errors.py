from dataclasses import dataclass


@dataclass(eq=False)
class BoundCacheError(Exception):
    message: str
    capacity: object | None = None
    field: str | None = None

    def __str__(self) -> str:
        bits = [self.message]
        if self.field:
            bits.append(f"field={self.field}")
        if self.capacity is not None:
            bits.append(f"capacity={self.capacity!r}")
        return " ".join(bits)


class InvalidCapacityError(BoundCacheError, ValueError):
    pass


class ConfigError(BoundCacheError):
    pass


def validate_capacity(capacity) -> int:
    """Returns capacity unchanged, or raises InvalidCapacityError."""
    # bool is an int subclass, but True is not a capacity
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        raise InvalidCapacityError("capacity must be an integer", capacity=capacity)
    if capacity < 1:
        raise InvalidCapacityError("capacity must be >= 1", capacity=capacity)
    return capacity
