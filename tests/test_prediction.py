import pytest

from flacscan.prediction import (
    extend_sign,
    predict_fixed,
    predict_lpc_high_order,
    predict_lpc_low_order,
    rice_to_signed,
)


@pytest.mark.parametrize(
    "value, bits, expected",
    [
        (5, 4, 5),
        (0x3FFE, 15, 0x3FFE),
        (16 - 5, 4, -5),
        (512 - 3, 9, -3),
        (0xFFFF, 16, -1),
        (0xFFFE, 16, -2),
        (0x7FFF, 15, -1),
    ],
)
def test_extend_sign_16_bit_cases(value, bits, expected):
    assert extend_sign(value, bits) == expected


@pytest.mark.parametrize(
    "value, bits, expected",
    [
        (5, 4, 5),
        (0x3FFFFFFE, 31, 0x3FFFFFFE),
        (16 - 5, 4, -5),
        (512 - 3, 9, -3),
        (0xFFFE, 16, -2),
        (0xFFFFFFFF, 32, -1),
        (0xFFFFFFFE, 32, -2),
        (0x7FFFFFFF, 31, -1),
        (124680, 17, -6392),
        (124467, 17, -6605),
        (124222, 17, -6850),
        (124011, 17, -7061),
    ],
)
def test_extend_sign_32_bit_cases(value, bits, expected):
    assert extend_sign(value, bits) == expected


def test_extend_sign_ignores_high_bits():
    assert extend_sign(0xF5, 4) == 5


@pytest.mark.parametrize("bits", [0, 33])
def test_extend_sign_rejects_bad_width(bits):
    with pytest.raises(ValueError):
        extend_sign(1, bits)


@pytest.mark.parametrize(
    "value, expected", [(0, 0), (1, -1), (2, 1), (3, -2), (4, 2)]
)
def test_rice_to_signed(value, expected):
    assert rice_to_signed(value) == expected


def test_rice_to_signed_largest_value():
    assert rice_to_signed(0xFFFFFFFF) == -(2**31)


def test_predict_fixed_order_3_real_data():
    buffer = [-729, -722, -667, -19, -16, 17, -23, -7,
              16, -16, -5, 3, -8, -13, -15, -1]
    predict_fixed(3, buffer)
    assert buffer == [-729, -722, -667, -583, -486, -359, -225, -91,
                      59, 209, 354, 497, 630, 740, 812, 845]


def test_predict_fixed_order_2_overflow_prone_data():
    buffer = [21877, 27482, -6513]
    predict_fixed(2, buffer)
    assert buffer == [21877, 27482, 26574]


def test_predict_fixed_order_0_leaves_buffer_unchanged():
    buffer = [3, -4, 5]
    predict_fixed(0, buffer)
    assert buffer == [3, -4, 5]


def test_predict_fixed_wraps_at_32_bits():
    buffer = [2**31 - 1, 1]
    predict_fixed(1, buffer)
    assert buffer == [2**31 - 1, -(2**31)]


def test_predict_fixed_rejects_bad_order():
    with pytest.raises(ValueError):
        predict_fixed(5, [0] * 8)


def test_predict_fixed_rejects_short_buffer():
    with pytest.raises(ValueError):
        predict_fixed(3, [1, 2])


def test_predict_lpc_low_order_real_data():
    coefficients = [-75, 166, 121, -269, -75, -399, 1042]
    buffer = [-796, -547, -285, -32, 199, 443, 670, -2,
              -23, 14, 6, 3, -4, 12, -2, 10]
    predict_lpc_low_order(coefficients, 9, buffer)
    assert buffer == [-796, -547, -285, -32, 199, 443, 670, 875,
                      1046, 1208, 1343, 1454, 1541, 1616, 1663, 1701]


def test_predict_lpc_low_order_overflow_prone_data():
    coefficients = [119, -255, 555, -836, 879, -1199, 1757]
    buffer = [-21363, -21951, -22649, -24364, -27297, -26870, -30017, 3157]
    predict_lpc_low_order(coefficients, 10, buffer)
    assert buffer == [-21363, -21951, -22649, -24364, -27297, -26870, -30017, -29718]


def test_predict_lpc_high_order_real_data():
    coefficients = [
        709, -2589, 4600, -4612, 1350, 4220, -9743, 12671, -12129, 8586,
        -3775, -645, 3904, -5543, 4373, 182, -6873, 13265, -15417, 11550,
    ]
    buffer = [
        213238, 210830, 234493, 209515, 235139, 201836, 208151, 186277, 157720, 148176,
        115037, 104836, 60794, 54523, 412, 17943, -6025, -3713, 8373, 11764, 30094,
    ]
    predict_lpc_high_order(coefficients, 12, buffer)
    assert buffer == [
        213238, 210830, 234493, 209515, 235139, 201836, 208151, 186277, 157720, 148176,
        115037, 104836, 60794, 54523, 412, 17943, -6025, -3713, 8373, 11764, 33931,
    ]


def test_predict_lpc_low_order_rejects_negative_shift():
    with pytest.raises(ValueError):
        predict_lpc_low_order([1], -1, [0, 0])


def test_predict_lpc_low_order_rejects_high_order():
    with pytest.raises(ValueError):
        predict_lpc_low_order([1] * 13, 0, [0] * 20)


def test_predict_lpc_high_order_rejects_low_order():
    with pytest.raises(ValueError):
        predict_lpc_high_order([1] * 12, 0, [0] * 20)


def test_predict_lpc_rejects_short_buffer():
    with pytest.raises(ValueError):
        predict_lpc_low_order([1, 2, 3], 0, [0, 0])