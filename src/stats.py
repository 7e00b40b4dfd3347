import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Stats:
    """Summary statistics for traded volume in one window."""

    avg: float = 0.0
    stdev: float = 0.0
    num: int = 0
    med: float = 0.0
    min: float = 0.0
    max: float = 0.0


def weighted_median(buckets: list[tuple[float, int]], num: int) -> float:
    """Median of bucketed values, buckets sorted by ascending price.

    Walks the cumulative amount until it reaches the middle rank. When an even
    count lands exactly on the lower middle rank, the median is the mean of
    this price and the next one.
    """
    midpoint = (num + 1) / 2
    total = 0

    for index, (price, amount) in enumerate(buckets):
        total += amount

        if total >= midpoint:
            return price

        if total == math.floor(midpoint):
            if index + 1 < len(buckets):
                return (price + buckets[index + 1][0]) / 2
            return price

    raise ValueError(f"Buckets hold fewer than {num} units")


def compute_stats(volumes: dict[float, int]) -> Stats:
    """Compute count, mean, population stdev, median, min and max.

    volumes maps listing price to traded amount. An empty map, or one with no
    traded amount, gives all-zero stats.
    """
    buckets = sorted(
        (price, amount) for price, amount in volumes.items() if amount > 0
    )
    num = sum(amount for _, amount in buckets)
    if num == 0:
        return Stats()

    avg = math.fsum(price * amount for price, amount in buckets) / num
    variance = math.fsum(amount * (price - avg) ** 2 for price, amount in buckets) / num

    return Stats(
        avg=avg,
        stdev=math.sqrt(variance),
        num=num,
        med=weighted_median(buckets, num),
        min=buckets[0][0],
        max=buckets[-1][0],
    )


def pool_stats(records: list[Stats]) -> Stats:
    """Combine per-window stats into stats over their union.

    Mean is volume weighted and variance pooled from each window's variance
    and its mean's distance to the combined mean. The median cannot be
    recovered from summaries and is left at 0.
    """
    filled = [r for r in records if r.num > 0]
    num = sum(r.num for r in filled)
    if num == 0:
        return Stats()

    avg = math.fsum(r.avg * r.num for r in filled) / num
    variance = (
        math.fsum(r.num * (r.stdev**2 + (r.avg - avg) ** 2) for r in filled) / num
    )

    return Stats(
        avg=avg,
        stdev=math.sqrt(variance),
        num=num,
        min=min(r.min for r in filled),
        max=max(r.max for r in filled),
    )
