import click
import pytest

from token_deployment.types import MinInt


def test_min_int():
    supply = MinInt(0)

    assert supply.convert("1000", None, None) == 1000
    assert supply.convert(0, None, None) == 0


@pytest.mark.parametrize("value, message", [("-1", "less than"), ("many", "not a valid integer")])
def test_min_int_rejects(value, message):
    with pytest.raises(click.BadParameter, match=message):
        MinInt(0).convert(value, None, None)
