"""Classes and functions for working with ratings and competition data"""

from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Sequence, Tuple
import numpy as np
import polars as pl
from ratpack.core.exceptions import InvalidCompetitionsError, PlayerNotFoundError
from ratpack.utils.constants import (
    PLAYER_A,
    PLAYER_B,
    OUTCOME,
    SCORE_A,
    SCORE_B,
    FACTOR_A,
    FACTOR_B,
    REQUIRED_COLUMNS,
    SCORE_COLUMNS,
)


def player_indexes(players: Iterable[Hashable]) -> Dict[Hashable, int]:
    """map each player to a dense 0-based position, in the order given"""
    return {player: idx for idx, player in enumerate(players)}


class RatingsList:
    """
    A snapshot of the current rating of each known player.

    Players keep their insertion order so that indexing built from them is reproducible.
    A player may be listed without a rating, recursive rules seed those with their default.
    The ratings mapping is read-only, rules build a new RatingsList rather than editing one.
    """

    def __init__(self, players: Iterable[Hashable] = (), ratings: Optional[Dict[Hashable, float]] = None):
        ratings = {} if ratings is None else {player: float(val) for player, val in ratings.items()}
        players = list(dict.fromkeys(players))
        known = set(players)
        players.extend(player for player in ratings if player not in known)
        self._players = tuple(players)
        self._player_set = frozenset(players)
        self._ratings = ratings

    @property
    def players(self) -> Tuple[Hashable, ...]:
        return self._players

    @property
    def ratings(self):
        return MappingProxyType(self._ratings)

    @property
    def num_players(self) -> int:
        return len(self._players)

    def __len__(self):
        return len(self._players)

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._players)

    def __contains__(self, player):
        return player in self._player_set

    def __getitem__(self, player) -> float:
        try:
            return self._ratings[player]
        except KeyError:
            raise PlayerNotFoundError(player) from None

    def get(self, player, default=None):
        return self._ratings.get(player, default)

    def __eq__(self, other):
        if not isinstance(other, RatingsList):
            return NotImplemented
        return set(self._players) == set(other._players) and self._ratings == other._ratings

    __hash__ = None

    def __repr__(self):
        return f'RatingsList({self.num_players} players, {len(self._ratings)} rated)'

    def copy(self) -> 'RatingsList':
        return RatingsList(self._players, dict(self._ratings))

    def __deepcopy__(self, memo):
        return self.copy()

    def is_complete(self) -> bool:
        """true when every player has a rating"""
        return all(player in self._ratings for player in self._players)

    def with_defaults(self, default_rating: float, extra_players: Iterable[Hashable] = ()) -> 'RatingsList':
        """
        Returns a complete copy where players without a rating are given default_rating.

        Parameters:
            default_rating (float): the rating for unrated players
            extra_players (iterable, optional): players to add if not already present
        """
        players = list(self._players) + list(extra_players)
        ratings = dict(self._ratings)
        for player in players:
            ratings.setdefault(player, default_rating)
        return RatingsList(players, ratings)

    def to_array(self, players: Optional[Sequence[Hashable]] = None) -> np.ndarray:
        """ratings as a float array in the order of players (self.players by default), nan where unrated"""
        players = self._players if players is None else players
        return np.array([self._ratings.get(player, np.nan) for player in players], dtype=np.float64)

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            {
                'player': list(self._players),
                'rating': [self._ratings.get(player) for player in self._players],
            },
            schema_overrides={'rating': pl.Float64},
        )

    @classmethod
    def from_frame(cls, df: pl.DataFrame, player_col: str = 'player', rating_col: str = 'rating') -> 'RatingsList':
        """build ratings from a table, null ratings leave the player unrated"""
        players = df[player_col].to_list()
        ratings = {
            player: rating
            for player, rating in zip(players, df[rating_col].to_list())
            if rating is not None
        }
        return cls(players, ratings)

    def top(self, num_places: Optional[int] = None) -> List[Tuple[Hashable, float]]:
        """the rated players sorted from highest to lowest rating"""
        ranked = sorted(self._ratings.items(), key=lambda item: -item[1])
        return ranked if num_places is None else ranked[:num_places]

    def print_leaderboard(self, num_places: int = 10):
        ranked = self.top(num_places)
        max_len = min(max([len(str(player)) for player, _ in ranked] + [10]), 25)
        print(f'{"competitor": <{max_len}}\t{"rating"}')
        for player, rating in ranked:
            print(f'{str(player): <{max_len}}\t{rating:.6f}')


class RatingsTable:
    """
    A pre-sized sequence of RatingsList snapshots recording a ratings trajectory.

    Writing past the capacity raises IndexError, iteration rules check the capacity
    first and warn instead of writing.
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f'capacity must be non-negative, got {capacity}')
        self._slots: List[Optional[RatingsList]] = [None] * capacity

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def __len__(self):
        return len(self._slots)

    def __getitem__(self, idx) -> Optional[RatingsList]:
        return self._slots[idx]

    def __setitem__(self, idx: int, ratings: RatingsList):
        if not 0 <= idx < len(self._slots):
            raise IndexError(f'slot {idx} is outside a ratings table of capacity {len(self._slots)}')
        self._slots[idx] = ratings

    def __iter__(self):
        return iter(self._slots)

    def filled(self) -> int:
        """the number of slots holding a snapshot"""
        return sum(slot is not None for slot in self._slots)

    def to_frame(self) -> pl.DataFrame:
        """long format table with one row per (step, player)"""
        steps, players, ratings = [], [], []
        for step, snapshot in enumerate(self._slots):
            if snapshot is None:
                continue
            for player in snapshot.players:
                steps.append(step)
                players.append(player)
                ratings.append(snapshot.get(player))
        return pl.DataFrame(
            {'step': steps, 'player': players, 'rating': ratings},
            schema_overrides={'step': pl.Int64, 'rating': pl.Float64},
        )


def make_competitions(
    player_a: Sequence[Hashable],
    player_b: Sequence[Hashable],
    outcome: Sequence[int],
    score_a: Optional[Sequence[float]] = None,
    score_b: Optional[Sequence[float]] = None,
    factor_a: Optional[Sequence[Optional[float]]] = None,
    factor_b: Optional[Sequence[Optional[float]]] = None,
) -> pl.DataFrame:
    """
    Build a competition table from columns.

    Parameters:
        player_a, player_b: the two players in each competition
        outcome: +1 when A wins, -1 when B wins, 0 for a tie
        score_a, score_b (optional): the scores of each player
        factor_a, factor_b (optional): factors affecting each player, None where unknown
    """
    data = {PLAYER_A: list(player_a), PLAYER_B: list(player_b), OUTCOME: list(outcome)}
    schema = {OUTCOME: pl.Int64}
    for col, vals in ((SCORE_A, score_a), (SCORE_B, score_b), (FACTOR_A, factor_a), (FACTOR_B, factor_b)):
        if vals is not None:
            data[col] = list(vals)
            schema[col] = pl.Float64
    return pl.DataFrame(data, schema_overrides=schema)


def validate_competitions(df: pl.DataFrame, columns: Sequence[str] = REQUIRED_COLUMNS, rule_name: Optional[str] = None):
    """raise InvalidCompetitionsError if any of columns is missing from df"""
    missing = [col for col in columns if col not in df.columns]
    if missing:
        owner = f' for rule {rule_name}' if rule_name else ''
        raise InvalidCompetitionsError(f'competition table is missing columns {missing}{owner}')


def competition_players(df: pl.DataFrame) -> List[Hashable]:
    """the players appearing in a competition table in order of first appearance"""
    players = {}
    for player_a, player_b in zip(df[PLAYER_A].to_list(), df[PLAYER_B].to_list()):
        players.setdefault(player_a, None)
        players.setdefault(player_b, None)
    return list(players)


def indexed_matchups(df: pl.DataFrame, index: Dict[Hashable, int], rule_name: Optional[str] = None) -> np.ndarray:
    """
    Convert the player columns to an (n, 2) array of positions in index.

    Raises PlayerNotFoundError naming the first row with an unknown player.
    """
    matchups = np.empty(shape=(df.height, 2), dtype=np.int64)
    for row, (player_a, player_b) in enumerate(zip(df[PLAYER_A].to_list(), df[PLAYER_B].to_list())):
        for col, player in enumerate((player_a, player_b)):
            if player not in index:
                raise PlayerNotFoundError(player, rule_name=rule_name, row=row)
            matchups[row, col] = index[player]
    return matchups


def optional_column(df: pl.DataFrame, col: str, fill_value: float = 0.0) -> np.ndarray:
    """a float column with nulls (or the whole column if absent) replaced by fill_value"""
    if col not in df.columns:
        return np.full(shape=df.height, fill_value=fill_value, dtype=np.float64)
    return df[col].cast(pl.Float64).fill_null(fill_value).to_numpy()


def split_competitions(df: pl.DataFrame, test_fraction: float = 0.2) -> Tuple[pl.DataFrame, pl.DataFrame]:
    """split in row order, the last test_fraction of rows form the test table"""
    split_idx = int(np.ceil(df.height * (1.0 - test_fraction)))
    return df.slice(0, split_idx), df.slice(split_idx)


def score_differentials(df: pl.DataFrame, rule_name: Optional[str] = None) -> np.ndarray:
    """ScoreA - ScoreB for each row, raising InvalidCompetitionsError on missing scores"""
    validate_competitions(df, REQUIRED_COLUMNS + SCORE_COLUMNS, rule_name=rule_name)
    scores_a = df[SCORE_A].cast(pl.Float64)
    scores_b = df[SCORE_B].cast(pl.Float64)
    if scores_a.null_count() or scores_b.null_count():
        owner = f' for rule {rule_name}' if rule_name else ''
        raise InvalidCompetitionsError(f'competition table has missing scores{owner}')
    return (scores_a - scores_b).to_numpy()
