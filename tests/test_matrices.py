import numpy as np
import pytest

from facewarp.matrices import (
    clone,
    concatenate,
    every,
    every_pair,
    eye,
    for_each_pair,
    less_than_or_equal_to,
    matrix_dimensions_equal_p,
    ones,
    reduce_with_key,
    remove_if_not,
    some,
    valid_column_index_p,
    valid_matrix_index_p,
    valid_row_index_p,
    vector_lengths_equal_p,
    vector_of_value,
    vector_of_zeros,
    zeros,
)


def test_every_true_and_false():
    assert every([1, 2, 3], lambda x: x > 0) is True
    assert every([1, -2, 3], lambda x: x > 0) is False


def test_every_empty_is_true():
    assert every([], lambda x: False) is True


def test_every_stops_at_first_failure():
    seen = []

    def predicate(x):
        seen.append(x)
        return x < 2

    assert every([1, 2, 3], predicate) is False
    assert seen == [1, 2]


def test_every_pair_stops_at_shorter():
    assert every_pair([1, 2, 3], [1, 2], lambda a, b: a == b) is True
    assert every_pair([1, 2], [1, 5], lambda a, b: a == b) is False


def test_some():
    assert some([0, 0, 1], bool) is True
    assert some([0, 0], bool) is False
    assert some([], bool) is False


def test_remove_if_not_keeps_order():
    assert remove_if_not([5, 1, 4, 2, 3], lambda x: x % 2 == 1) == [5, 1, 3]


def test_for_each_pair_visits_pairs():
    pairs = []
    for_each_pair("abc", [1, 2], lambda a, b: pairs.append((a, b)))
    assert pairs == [("a", 1), ("b", 2)]


def test_reduce_with_key():
    words = ["a", "bbb", "cc"]
    assert reduce_with_key(words, 0, lambda acc, n: acc + n, len) == sum(map(len, words))
    assert reduce_with_key([], "start", lambda acc, n: acc + n, str) == "start"


def test_vector_lengths_equal_p():
    assert vector_lengths_equal_p([1, 2], "ab", (3, 4)) is True
    assert vector_lengths_equal_p([1, 2], "abc") is False
    with pytest.raises(TypeError):
        vector_lengths_equal_p([1])


def test_index_validity():
    m = zeros(2, 3)
    assert valid_row_index_p(m, 0) and valid_row_index_p(m, 1)
    assert not valid_row_index_p(m, 2)
    assert not valid_row_index_p(m, -1)
    assert valid_column_index_p(m, 2)
    assert not valid_column_index_p(m, 3)
    assert valid_matrix_index_p(m, 1, 2)
    assert not valid_matrix_index_p(m, 2, 0)
    assert not valid_matrix_index_p(m, 0, 3)


def test_ones_zeros_eye():
    assert np.array_equal(ones(2, 3), np.full((2, 3), 1.0))
    assert np.array_equal(zeros(3, 2), np.full((3, 2), 0.0))
    identity = eye(3, 3)
    assert np.array_equal(identity @ ones(3, 2), ones(3, 2))
    rectangular = eye(2, 3)
    assert rectangular.shape == (2, 3)
    assert rectangular.sum() == 2


def test_vector_of_zeros_independent():
    items = vector_of_zeros(3, 2, 2)
    assert len(items) == 3
    items[0][0, 0] = 7.0
    assert items[1][0, 0] == 0.0
    assert all(item.shape == (2, 2) for item in items)


def test_vector_of_value_copies():
    value = ones(1, 2)
    items = vector_of_value(2, value)
    items[0][0, 1] = 9.0
    assert np.array_equal(items[1], value)
    assert value[0, 1] == 1.0


def test_less_than_or_equal_to():
    a = np.array([[1.0, 2.0], [3.0, 4.0]])
    assert less_than_or_equal_to(a, a) is True
    assert less_than_or_equal_to(a, a + 1) is True
    assert less_than_or_equal_to(a + 1, a) is False


def test_less_than_or_equal_to_shape_mismatch():
    with pytest.raises(ValueError):
        less_than_or_equal_to(zeros(2, 2), zeros(2, 3))


def test_matrix_dimensions_equal_p():
    assert matrix_dimensions_equal_p([]) is True
    assert matrix_dimensions_equal_p([zeros(2, 2)]) is True
    assert matrix_dimensions_equal_p([zeros(2, 2), ones(2, 2)]) is True
    assert matrix_dimensions_equal_p([zeros(2, 2), ones(2, 3)]) is False


def test_concatenate():
    a = [1, 2]
    b = [3]
    result = concatenate(a, b)
    assert result == [1, 2, 3]
    assert a == [1, 2]


def test_clone_matrix_is_independent():
    original = ones(2, 2)
    copy = clone(original)
    copy[0, 0] = 5.0
    assert original[0, 0] == 1.0
    assert np.array_equal(copy[1], original[1])


def test_clone_list_is_deep():
    originals = [ones(1, 1), zeros(1, 2)]
    copies = clone(originals)
    copies[0][0, 0] = 3.0
    assert originals[0][0, 0] == 1.0
    assert len(copies) == len(originals)
    assert np.array_equal(copies[1], originals[1])