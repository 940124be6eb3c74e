from bisect import bisect_right
from collections.abc import Iterator
import math
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    SerializerFunctionWrapHandler,
    model_serializer,
    model_validator,
)
from pydantic.alias_generators import to_camel

from messages.buckets import check_bounds
from messages.errors import MetricNotFoundError
from messages.types import Kind
from messages.units import Unit


def _drop_empty(data: Any, keys: tuple[str, ...]) -> Any:
    if isinstance(data, dict):
        for key in keys:
            if key in data and not data[key]:
                del data[key]
    return data


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RangeWithCount(WireModel):
    # lower is ignored for the first range, upper for the last one
    lower: float = 0.0
    upper: float = 0.0
    count: int = Field(0, ge=0)


class Distribution(WireModel):
    """Summary of a set of values bucketed into half-open ranges.

    ``generation`` goes up by exactly one on every successful mutation.
    ``count`` always equals the sum of the range counts.
    """

    min: float = 0.0
    max: float = 0.0
    average: float = 0.0
    median: float = 0.0
    sum: float = 0.0
    count: int = Field(0, ge=0)
    generation: int = Field(0, ge=0)
    is_not_cumulative: bool = False
    ranges: list[RangeWithCount] = Field(default_factory=list)

    @model_validator(mode='after')
    def _check_ranges(self) -> 'Distribution':
        ranges = self.ranges
        for i, (prev, cur) in enumerate(zip(ranges, ranges[1:], strict=False)):
            if cur.lower != prev.upper:
                raise ValueError(
                    f'ranges {i} and {i + 1} are not contiguous: '
                    f'[{prev.lower}, {prev.upper}) and [{cur.lower}, {cur.upper})'
                )
        for r in ranges[1:-1]:
            if r.upper < r.lower:
                raise ValueError(f'range [{r.lower}, {r.upper}) is inverted')
        total = sum(r.count for r in ranges)
        if total != self.count:
            raise ValueError(f'count {self.count} != sum of range counts {total}')
        return self

    @model_serializer(mode='wrap')
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> Any:
        return _drop_empty(
            handler(self), ('is_not_cumulative', 'isNotCumulative', 'ranges')
        )

    @classmethod
    def from_bounds(
        cls, bounds: list[float], is_not_cumulative: bool = False
    ) -> 'Distribution':
        """Empty distribution with ``len(bounds) + 1`` ranges split at bounds."""
        check_bounds(bounds)
        edges = [0.0, *bounds, 0.0]
        ranges = [
            RangeWithCount(lower=lower, upper=upper)
            for lower, upper in zip(edges, edges[1:], strict=False)
        ]
        return cls(ranges=ranges, is_not_cumulative=is_not_cumulative)

    def add(self, value: float) -> None:
        self._bump(self._range_index(value), value)
        self._refresh()

    def remove(self, value: float) -> None:
        """Forget a previously added value.

        min and max stay put: they still bound the remaining values.
        """
        self._require_not_cumulative()
        index = self._populated_range_index(value)
        self._drop(index, value)
        self._refresh()

    def update(self, old_value: float, new_value: float) -> None:
        self._require_not_cumulative()
        old_index = self._populated_range_index(old_value)
        new_index = self._range_index(new_value)
        self._drop(old_index, old_value)
        self._bump(new_index, new_value)
        self._refresh()

    def _require_not_cumulative(self) -> None:
        if not self.is_not_cumulative:
            raise ValueError(
                'values can only be removed from non-cumulative distributions'
            )

    def _range_index(self, value: float) -> int:
        if not self.ranges:
            raise ValueError('distribution has no ranges')
        if not math.isfinite(value):
            raise ValueError(f'cannot record non-finite value {value}')
        return bisect_right([r.lower for r in self.ranges[1:]], value)

    def _populated_range_index(self, value: float) -> int:
        index = self._range_index(value)
        if self.ranges[index].count == 0:
            raise ValueError(f'no value recorded in the range of {value}')
        return index

    def _bump(self, index: int, value: float) -> None:
        if self.count == 0:
            self.min = self.max = value
        else:
            self.min = min(self.min, value)
            self.max = max(self.max, value)
        self.ranges[index].count += 1
        self.count += 1
        self.sum += value

    def _drop(self, index: int, value: float) -> None:
        self.ranges[index].count -= 1
        self.count -= 1
        self.sum -= value

    def _refresh(self) -> None:
        if self.count == 0:
            self.min = self.max = self.sum = self.average = self.median = 0.0
        else:
            self.average = self.sum / self.count
            self.median = self._approximate_median()
        self.generation += 1

    def _approximate_median(self) -> float:
        middle = self.count / 2
        last = len(self.ranges) - 1
        seen = 0
        for i, r in enumerate(self.ranges):
            if r.count and seen + r.count >= middle:
                lower = self.min if i == 0 else max(r.lower, self.min)
                upper = self.max if i == last else min(r.upper, self.max)
                return lower + (upper - lower) * (middle - seen) / r.count
            seen += r.count
        return self.max


class Metric(WireModel):
    """One metric sample.

    The shape of ``value`` depends on ``kind`` and ``sub_type`` and on
    which representation the metric is currently in; see
    ``messages.converters``. ``timestamp`` is a ``Timestamp`` or ``None``
    in the native form and a literal string (``''`` when absent) in the JSON
    form. Metrics sharing a ``group_id`` share their timestamp.
    """

    path: str
    description: str = ''
    unit: Unit = Unit.NONE
    kind: Kind
    sub_type: Kind = Kind.UNKNOWN
    bits: int = 0
    value: Any = None
    timestamp: Any = None
    group_id: int = 0

    @model_validator(mode='after')
    def _default_bits(self) -> 'Metric':
        if not self.bits:
            self.bits = self.kind.bits
        return self

    @model_serializer(mode='wrap')
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> Any:
        return _drop_empty(handler(self), ('unit', 'sub_type', 'subType', 'bits'))


class MetricList(RootModel[list[Metric]]):
    root: list[Metric] = Field(default_factory=list)

    def __iter__(self) -> Iterator[Metric]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, index: int) -> Metric:
        return self.root[index]

    def get(self, path: str) -> Metric:
        for metric in self.root:
            if metric.path == path:
                return metric
        raise MetricNotFoundError(path)
