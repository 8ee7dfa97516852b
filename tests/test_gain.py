import pytest

from tokf.gain import format_num


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "0"),
        (999, "999"),
        (1000, "1,000"),
        (84320, "84,320"),
        (-73080, "-73,080"),
        (1234567, "1,234,567"),
        (-5, "-5"),
    ],
)
def test_format_num(value, expected):
    assert format_num(value) == expected