def linear_bounds(start: float, increment: float, count: int) -> list[float]:
    """``count`` bounds ``start, start + increment, ...``."""
    if increment <= 0:
        raise ValueError(f'increment must be positive, got {increment}')
    if count < 0:
        raise ValueError(f'count must not be negative, got {count}')
    return [start + increment * i for i in range(count)]


def geometric_bounds(start: float, ratio: float, count: int) -> list[float]:
    """``count`` bounds ``start, start * ratio, start * ratio ** 2, ...``."""
    if start <= 0:
        raise ValueError(f'start must be positive, got {start}')
    if ratio <= 1:
        raise ValueError(f'ratio must be greater than 1, got {ratio}')
    if count < 0:
        raise ValueError(f'count must not be negative, got {count}')
    return [start * ratio**i for i in range(count)]


def check_bounds(bounds: list[float]) -> None:
    for prev, cur in zip(bounds, bounds[1:], strict=False):
        if cur <= prev:
            raise ValueError(f'bounds must be strictly increasing: {prev} >= {cur}')
