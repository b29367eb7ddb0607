import itertools

import pytest

from globetrotter.services.reorder import move_activity, move_day
from globetrotter.utils.exceptions import InvalidMoveError


@pytest.fixture
def three_days(make_day):
    return [make_day('D1', 0), make_day('D2', 1), make_day('D3', 2)]


@pytest.fixture
def five_days(make_day):
    return [make_day(f'D{n}', n - 1) for n in range(1, 6)]


def ids(items):
    return [item.id for item in items]


@pytest.mark.unit
def test_move_last_day_to_front(three_days):
    result = move_day(three_days, 2, 0)

    assert [day.title for day in result] == ['D3', 'D1', 'D2']
    assert [day.order for day in result] == [0, 1, 2]


@pytest.mark.unit
def test_move_day_does_not_mutate_input(three_days):
    move_day(three_days, 0, 2)

    assert [day.title for day in three_days] == ['D1', 'D2', 'D3']
    assert [day.order for day in three_days] == [0, 1, 2]


@pytest.mark.unit
def test_move_day_to_same_position_is_identity(three_days):
    result = move_day(three_days, 1, 1)

    assert result == three_days
    assert result is not three_days


@pytest.mark.unit
def test_move_day_preserves_elements_for_every_pair(five_days):
    for source, dest in itertools.product(range(5), repeat=2):
        result = move_day(five_days, source, dest)
        assert sorted(ids(result)) == sorted(ids(five_days)), (source, dest)
        assert result[dest].id == five_days[source].id


@pytest.mark.unit
def test_move_day_orders_are_dense_after_every_move(five_days):
    for source, dest in itertools.product(range(5), repeat=2):
        result = move_day(five_days, source, dest)
        assert [day.order for day in result] == list(range(5)), (source, dest)


@pytest.mark.unit
def test_move_day_inverse_move_restores_sequence(five_days):
    for source, dest in itertools.product(range(5), repeat=2):
        there = move_day(five_days, source, dest)
        back = move_day(there, dest, source)
        assert ids(back) == ids(five_days), (source, dest)
        assert [day.order for day in back] == [day.order for day in five_days]


@pytest.mark.unit
def test_move_day_repairs_sparse_orders(make_day):
    days = [make_day('D1', 3), make_day('D2', 7), make_day('D3', 9)]

    result = move_day(days, 0, 1)

    assert [day.title for day in result] == ['D2', 'D1', 'D3']
    assert [day.order for day in result] == [0, 1, 2]


@pytest.mark.unit
@pytest.mark.parametrize('source, dest', [(3, 0), (0, 3), (-1, 0), (0, -1)])
def test_move_day_rejects_out_of_range_indices(three_days, source, dest):
    with pytest.raises(InvalidMoveError):
        move_day(three_days, source, dest)


@pytest.mark.unit
def test_move_day_on_empty_list_fails(make_day):
    with pytest.raises(IndexError):
        move_day([], 0, 0)


@pytest.mark.unit
def test_same_day_move_to_end(make_activity):
    x, y, z = make_activity('X'), make_activity('Y'), make_activity('Z')

    new_source, new_dest = move_activity([x, y, z], [], 0, 2, same_day=True)

    assert ids(new_source) == ['y', 'z', 'x']
    assert new_dest == new_source


@pytest.mark.unit
def test_same_day_move_to_same_position_is_identity(make_activity):
    activities = [make_activity('X'), make_activity('Y'), make_activity('Z')]

    for index in range(3):
        new_source, new_dest = move_activity(activities, activities, index, index, same_day=True)
        assert new_source == activities
        assert new_dest == activities


@pytest.mark.unit
def test_same_day_ignores_destination_list(make_activity):
    x, y = make_activity('X'), make_activity('Y')
    unrelated = [make_activity('P')]

    new_source, new_dest = move_activity([x, y], unrelated, 1, 0, same_day=True)

    assert ids(new_source) == ['y', 'x']
    assert ids(new_dest) == ['y', 'x']
    assert ids(unrelated) == ['p']


@pytest.mark.unit
def test_cross_day_move_into_middle(make_activity):
    x, y = make_activity('X'), make_activity('Y')
    p, q = make_activity('P'), make_activity('Q')

    new_a, new_b = move_activity([x, y], [p, q], 0, 1, same_day=False)

    assert ids(new_a) == ['y']
    assert ids(new_b) == ['p', 'x', 'q']


@pytest.mark.unit
def test_cross_day_move_keeps_total_count_and_content(make_activity):
    source = [make_activity('X', cost=12.5, category='food'), make_activity('Y')]
    dest = [make_activity('P'), make_activity('Q'), make_activity('R')]

    for source_index in range(len(source)):
        for dest_index in range(len(dest) + 1):
            new_source, new_dest = move_activity(source, dest, source_index, dest_index, same_day=False)
            assert len(new_source) == len(source) - 1
            assert len(new_dest) == len(dest) + 1
            assert new_dest[dest_index] == source[source_index]

    assert ids(source) == ['x', 'y']
    assert ids(dest) == ['p', 'q', 'r']


@pytest.mark.unit
def test_cross_day_move_into_empty_day(make_activity):
    new_source, new_dest = move_activity([make_activity('X')], [], 0, 0, same_day=False)

    assert new_source == []
    assert ids(new_dest) == ['x']


@pytest.mark.unit
def test_cross_day_move_rejects_bad_indices(make_activity):
    source = [make_activity('X')]
    dest = [make_activity('P')]

    with pytest.raises(InvalidMoveError):
        move_activity(source, dest, 1, 0, same_day=False)
    with pytest.raises(InvalidMoveError):
        move_activity(source, dest, 0, 2, same_day=False)


@pytest.mark.unit
def test_same_day_move_rejects_append_position(make_activity):
    activities = [make_activity('X'), make_activity('Y')]

    with pytest.raises(InvalidMoveError) as excinfo:
        move_activity(activities, [], 0, 2, same_day=True)

    assert excinfo.value.index == 2
    assert excinfo.value.length == 2
