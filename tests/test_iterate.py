"""
Iterate replays competitions batch by batch through a recursive rule
"""
import pytest
from ratpack import (
    Elo,
    EloF,
    Colley,
    Massey,
    Revert,
    Iterate,
    SampleIterate,
    RatingsList,
    RatingsTable,
    make_competitions,
    update_ratings,
    update_info,
)
from ratpack.core.base import Computation, StateModel, InputType
from ratpack.core.exceptions import InvalidParameterError, RecordingOverflowWarning, UnsupportedOperationError


def games():
    return make_competitions(
        ['A', 'B', 'C', 'A', 'D', 'B', 'C'],
        ['B', 'C', 'D', 'C', 'A', 'D', 'A'],
        [1, -1, 0, 1, -1, 1, 1],
    )


def initial_ratings():
    return RatingsList(['A', 'B', 'C', 'D'], {'A': 1500.0, 'B': 1450.0, 'C': 1600.0, 'D': 1520.0})


def test_iterate_one_batch_matches_sub_rule():
    table = games()
    rule = Iterate(Elo(), batch_size=table.height)
    assert rule.update_ratings(initial_ratings(), table) == Elo().update_ratings(initial_ratings(), table)


def test_iterate_batch_size_one_is_sequential():
    table = games()
    expected = initial_ratings()
    for idx in range(table.height):
        expected = Elo().update_ratings(expected, table.slice(idx, 1))
    assert Iterate(Elo(), batch_size=1).update_ratings(initial_ratings(), table) == expected


def test_iterate_last_batch_is_shorter():
    table = games()
    expected = initial_ratings()
    for start in (0, 3, 6):
        expected = Elo().update_ratings(expected, table.slice(start, 3))
    assert Iterate(Elo(), batch_size=3).update_ratings(initial_ratings(), table) == expected


def test_iterate_differs_from_one_shot():
    table = games()
    sequential = Iterate(Elo(), batch_size=1).update_ratings(initial_ratings(), table)
    assert sequential != Elo().update_ratings(initial_ratings(), table)


def test_iterate_leaves_input_alone():
    ratings = initial_ratings()
    Iterate(Elo(), batch_size=2).update_ratings(ratings, games())
    assert ratings == initial_ratings()


def test_iterate_records_each_batch():
    table = games()
    record = RatingsTable(table.height)
    final = update_ratings(Iterate(Elo(), batch_size=1), initial_ratings(), table, record=record)
    assert record.filled() == table.height
    expected = initial_ratings()
    for idx in range(table.height):
        expected = Elo().update_ratings(expected, table.slice(idx, 1))
        assert record[idx] == expected
    assert record[table.height - 1] == final


def test_iterate_recording_overflow_warns_and_continues():
    table = games()
    record = RatingsTable(3)
    with pytest.warns(RecordingOverflowWarning) as caught:
        final = Iterate(Elo(), batch_size=1).update_ratings(initial_ratings(), table, record=record)
    overflow = [w for w in caught if issubclass(w.category, RecordingOverflowWarning)]
    assert len(overflow) == table.height - 3
    assert record.filled() == 3
    assert final == Iterate(Elo(), batch_size=1).update_ratings(initial_ratings(), table)


def test_overflow_warning_points_at_the_same_place_either_way():
    table = games()
    with pytest.warns(RecordingOverflowWarning) as direct:
        Iterate(Elo()).update_ratings(initial_ratings(), table, record=RatingsTable(6))
    with pytest.warns(RecordingOverflowWarning) as dispatched:
        update_ratings(Iterate(Elo()), initial_ratings(), table, record=RatingsTable(6))
    assert direct[0].filename == dispatched[0].filename
    assert direct[0].filename.endswith('iterate.py')


def test_iterate_needs_recursive_rule():
    with pytest.raises(InvalidParameterError):
        Iterate(Colley())
    with pytest.raises(InvalidParameterError):
        Iterate(Massey(), batch_size=5)


def test_iterate_needs_positive_batch_size():
    with pytest.raises(InvalidParameterError):
        Iterate(Elo(), batch_size=0)
    with pytest.raises(InvalidParameterError):
        Iterate(Elo(), batch_size=1.5)


def test_iterate_info_passes_through():
    info = update_info(Iterate(EloF(), batch_size=4))
    sub_info = update_info(EloF())
    assert info.name == 'Iterate'
    assert info.computation == Computation.SEQUENTIAL
    assert info.state_model == StateModel.RECURSIVE
    assert info.record
    assert info.input == InputType.OUTCOME
    assert info.output == sub_info.output
    assert info.ties == sub_info.ties
    assert info.factors
    assert info.parameters[:2] == ('rule (default=Elo)', 'batch_size (default=1)')
    assert info.parameters[2:] == sub_info.parameters


def test_iterate_predicts_like_sub_rule():
    rule = Iterate(EloF(k=10.0), batch_size=2)
    assert rule.predict_outcome(1600.0, 1500.0, 1.0, None) == EloF(k=10.0).predict_outcome(1600.0, 1500.0, 1.0, None)


def test_only_recording_rules_accept_a_table():
    with pytest.raises(UnsupportedOperationError):
        update_ratings(Elo(), initial_ratings(), games(), record=RatingsTable(2))


def test_iterate_nested():
    table = games()
    inner = Iterate(Elo(), batch_size=1)
    outer = Iterate(inner, batch_size=2)
    assert outer.update_ratings(initial_ratings(), table) == inner.update_ratings(initial_ratings(), table)


def test_iterate_revert():
    ratings = RatingsList(['A', 'B'], {'A': 1700.0, 'B': 1300.0})
    table = make_competitions(['A', 'A'], ['B', 'B'], [0, 0])
    new_ratings = Iterate(Revert(r0=1500.0, fraction=0.5), batch_size=1).update_ratings(ratings, table)
    assert new_ratings['A'] == pytest.approx(1550.0)
    assert new_ratings['B'] == pytest.approx(1450.0)


def test_iterate_empty_table():
    record = RatingsTable(2)
    new_ratings = Iterate(Elo()).update_ratings(initial_ratings(), games().slice(0, 0), record=record)
    assert new_ratings == initial_ratings()
    assert record.filled() == 0


def test_iterate_empty_table_seeds_unrated_players():
    empty = games().slice(0, 0)
    for rule in (Iterate(Elo(r0=1200.0)), SampleIterate(Elo(r0=1200.0), batch_size=2)):
        new_ratings = rule.update_ratings(RatingsList(['A', 'B'], {'A': 1600.0}), empty)
        assert new_ratings.is_complete()
        assert new_ratings == Elo(r0=1200.0).update_ratings(RatingsList(['A', 'B'], {'A': 1600.0}), empty)
        assert new_ratings['B'] == 1200.0


def test_sample_iterate_is_seeded():
    table = games()
    first = SampleIterate(Elo(), batch_size=2, seed=3).update_ratings(initial_ratings(), table)
    second = SampleIterate(Elo(), batch_size=2, seed=3).update_ratings(initial_ratings(), table)
    assert first == second


def test_sample_iterate_batches():
    table = games()
    rule = SampleIterate(Elo(), batch_size=2, n_batches=5, seed=1)
    batches = list(rule.batches(table))
    assert len(batches) == 5
    assert all(batch.height == 2 for batch in batches)
    assert len(list(SampleIterate(Elo(), batch_size=2).batches(table))) == 4

    record = RatingsTable(5)
    rule.update_ratings(initial_ratings(), table, record=record)
    assert record.filled() == 5


def test_sample_iterate_info():
    info = SampleIterate(Elo()).info()
    assert info.name == 'SampleIterate'
    assert info.parameters[1] == 'batch_size (default=1)'
    assert info.record
    with pytest.raises(InvalidParameterError):
        SampleIterate(Elo(), n_batches=0)
    with pytest.raises(InvalidParameterError):
        SampleIterate(Elo(), n_batches=2.5)
    with pytest.raises(InvalidParameterError):
        SampleIterate(Elo(), n_batches=True)
    with pytest.raises(InvalidParameterError):
        SampleIterate(Colley())
