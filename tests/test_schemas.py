import math

from pydantic import ValidationError
import pytest

from messages.buckets import geometric_bounds, linear_bounds
from messages.errors import MetricNotFoundError
from messages.schemas import Distribution, Metric, MetricList, RangeWithCount
from messages.types import Kind
from messages.units import Unit


def _range_total(dist: Distribution) -> int:
    return sum(r.count for r in dist.ranges)


def test_add_updates_statistics(histogram):
    for value in (5.0, 15.0, 25.0):
        histogram.add(value)

    assert histogram.count == 3
    assert [r.count for r in histogram.ranges] == [1, 1, 1]
    assert histogram.min == 5.0
    assert histogram.max == 25.0
    assert histogram.sum == 45.0
    assert histogram.average == 15.0
    assert histogram.median == 15.0
    assert histogram.generation == 3


def test_ranges_are_half_open(histogram):
    histogram.add(10.0)
    histogram.add(19.999)
    histogram.add(20.0)
    assert [r.count for r in histogram.ranges] == [0, 2, 1]


def test_single_value_median(histogram):
    histogram.add(7.0)
    assert histogram.median == 7.0


def test_every_mutation_keeps_count_and_bumps_generation_once(sliding_histogram):
    steps = [
        lambda d: d.add(1.0),
        lambda d: d.add(12.0),
        lambda d: d.add(30.0),
        lambda d: d.update(12.0, 2.0),
        lambda d: d.remove(30.0),
        lambda d: d.add(11.0),
        lambda d: d.remove(1.0),
    ]
    for step in steps:
        before = sliding_histogram.generation
        step(sliding_histogram)
        assert sliding_histogram.generation == before + 1
        assert sliding_histogram.count == _range_total(sliding_histogram)


def test_cumulative_distribution_rejects_removal(histogram):
    histogram.add(5.0)
    with pytest.raises(ValueError):
        histogram.remove(5.0)
    with pytest.raises(ValueError):
        histogram.update(5.0, 6.0)
    assert histogram.generation == 1
    assert histogram.count == 1


def test_failed_removal_leaves_distribution_untouched(sliding_histogram):
    sliding_histogram.add(15.0)
    snapshot = sliding_histogram.model_copy(deep=True)

    with pytest.raises(ValueError):
        sliding_histogram.remove(25.0)
    with pytest.raises(ValueError):
        sliding_histogram.update(5.0, 15.0)

    assert sliding_histogram == snapshot


def test_removing_last_value_resets_statistics(sliding_histogram):
    sliding_histogram.add(15.0)
    sliding_histogram.remove(15.0)
    assert sliding_histogram.count == 0
    assert sliding_histogram.min == sliding_histogram.max == 0.0
    assert sliding_histogram.sum == sliding_histogram.average == 0.0
    assert sliding_histogram.generation == 2


def test_add_without_ranges_fails():
    dist = Distribution()
    with pytest.raises(ValueError):
        dist.add(1.0)
    assert dist.generation == 0


def test_from_bounds_without_bounds_has_one_range():
    dist = Distribution.from_bounds([])
    dist.add(-1e9)
    dist.add(1e9)
    assert len(dist.ranges) == 1
    assert dist.ranges[0].count == 2


def test_from_bounds_rejects_unsorted_bounds():
    with pytest.raises(ValueError):
        Distribution.from_bounds([2.0, 1.0])


def test_bucket_helpers():
    assert linear_bounds(0.0, 5.0, 3) == [0.0, 5.0, 10.0]
    assert geometric_bounds(1.0, 2.0, 4) == [1.0, 2.0, 4.0, 8.0]
    with pytest.raises(ValueError):
        geometric_bounds(1.0, 1.0, 3)


def test_count_must_match_ranges():
    with pytest.raises(ValidationError):
        Distribution(count=2, ranges=[RangeWithCount(upper=1.0, count=1)])


def test_overlapping_ranges_are_rejected():
    with pytest.raises(ValidationError):
        Distribution(
            ranges=[
                RangeWithCount(upper=10.0),
                RangeWithCount(lower=5.0, upper=20.0),
                RangeWithCount(lower=20.0),
            ]
        )


def test_first_lower_and_last_upper_are_ignored():
    dist = Distribution(
        count=3,
        ranges=[
            RangeWithCount(lower=99.0, upper=1.0, count=1),
            RangeWithCount(lower=1.0, upper=2.0, count=1),
            RangeWithCount(lower=2.0, upper=-99.0, count=1),
        ],
    )
    assert dist.count == 3


def test_distribution_json_omits_empty_fields():
    dumped = Distribution().model_dump(by_alias=True)
    assert set(dumped) == {
        'min',
        'max',
        'average',
        'median',
        'sum',
        'count',
        'generation',
    }


def test_distribution_json_field_names(sliding_histogram):
    sliding_histogram.add(3.0)
    dumped = sliding_histogram.model_dump(mode='json', by_alias=True)
    assert dumped['isNotCumulative'] is True
    assert dumped['ranges'][0] == {'lower': 0.0, 'upper': 10.0, 'count': 1}
    assert Distribution.model_validate(dumped) == sliding_histogram


def test_metric_json_field_names():
    metric = Metric(path='/proc/cpu', kind=Kind.INT32, value=3, timestamp='')
    assert metric.model_dump(mode='json', by_alias=True) == {
        'path': '/proc/cpu',
        'description': '',
        'kind': 'int32',
        'bits': 32,
        'value': 3,
        'timestamp': '',
        'groupId': 0,
    }


def test_metric_from_json_payload():
    metric = Metric.model_validate(
        {
            'path': '/rpc/latency',
            'description': 'latencies',
            'unit': 'milliseconds',
            'kind': 'list',
            'subType': 'duration',
            'value': ['0.001000000'],
            'timestamp': '12.000000000',
            'groupId': 4,
        }
    )
    assert metric.unit is Unit.MILLISECOND
    assert metric.kind is Kind.LIST
    assert metric.sub_type is Kind.DURATION
    assert metric.bits == 0
    assert metric.group_id == 4
    assert metric.model_dump(by_alias=True)['subType'] == 'duration'


def test_metric_rejects_unknown_kind():
    with pytest.raises(ValidationError):
        Metric(path='/x', kind='int128', value=1)


def test_metric_with_distribution_dumps_nested_json(histogram):
    histogram.add(12.0)
    metric = Metric(path='/rpc/size', kind=Kind.DIST, value=histogram, timestamp='')
    value = metric.model_dump(mode='json', by_alias=True)['value']
    assert value['count'] == 1
    assert 'isNotCumulative' not in value
    assert [r['count'] for r in value['ranges']] == [0, 1, 0]


def test_metric_list_lookup():
    metrics = MetricList(
        [
            Metric(path='/a', kind=Kind.BOOL, value=True),
            Metric(path='/b', kind=Kind.STRING, value='up'),
        ]
    )
    assert len(metrics) == 2
    assert metrics.get('/b').value == 'up'
    assert [m.path for m in metrics] == ['/a', '/b']


def test_metric_list_missing_path():
    with pytest.raises(MetricNotFoundError) as exc_info:
        MetricList([]).get('/missing')
    assert isinstance(exc_info.value, LookupError)
    assert not isinstance(exc_info.value, ValueError)
    assert exc_info.value.path == '/missing'


def test_ranges_with_gaps_are_rejected():
    with pytest.raises(ValidationError):
        Distribution(
            ranges=[
                RangeWithCount(upper=10.0),
                RangeWithCount(lower=20.0, upper=30.0),
                RangeWithCount(lower=30.0),
            ]
        )


def test_value_between_bounds_lands_in_its_own_range():
    dist = Distribution(
        ranges=[
            RangeWithCount(upper=10.0),
            RangeWithCount(lower=10.0, upper=30.0),
            RangeWithCount(lower=30.0),
        ]
    )
    dist.add(15.0)
    assert [r.count for r in dist.ranges] == [0, 1, 0]


@pytest.mark.parametrize('value', [math.nan, math.inf, -math.inf])
def test_non_finite_values_are_not_recorded(sliding_histogram, value):
    sliding_histogram.add(5.0)
    with pytest.raises(ValueError):
        sliding_histogram.add(value)
    with pytest.raises(ValueError):
        sliding_histogram.update(5.0, value)
    assert sliding_histogram.generation == 1
    assert sliding_histogram.sum == 5.0
    assert sliding_histogram.count == 1
