"""tools for generating rated players and simulating competitions between them"""
from dataclasses import dataclass
from typing import Any, List, Tuple
import numpy as np
import polars as pl
from ratpack.core.exceptions import InvalidParameterError, UndefinedRuleError
from ratpack.utils.data_utils import RatingsList, make_competitions


class SimulateRule:
    """
    Base class for competition formats.

    perf_model maps a rating difference to the probability the first player wins
    through its cdf, e.g. a frozen scipy.stats distribution. Ties are not simulated.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def simulate(self, ratings: RatingsList, perf_model: Any) -> pl.DataFrame:
        raise UndefinedRuleError(f'undefined simulation rule {self.name}')


def _check_rounds(rule):
    if rule.n_rounds < 1:
        raise InvalidParameterError(f'{rule.name}: n_rounds must be at least 1, got {rule.n_rounds}')


def _to_competitions(matches: List[Tuple], outcomes: np.ndarray, with_factors: bool) -> pl.DataFrame:
    """build a competition table from (player_a, player_b, factor_a, factor_b) tuples and +/-1 outcomes"""
    player_a = [match[0] for match in matches]
    player_b = [match[1] for match in matches]
    score_a = (outcomes + 1.0) / 2.0
    return make_competitions(
        player_a,
        player_b,
        outcomes.astype(np.int64).tolist(),
        score_a=score_a.tolist(),
        score_b=(1.0 - score_a).tolist(),
        factor_a=[match[2] for match in matches] if with_factors else None,
        factor_b=[match[3] for match in matches] if with_factors else None,
    )


def _play(matches: List[Tuple], ratings: RatingsList, perf_model, rng) -> np.ndarray:
    """draw +1 (A wins) or -1 (B wins) for every match at once"""
    if not matches:
        return np.zeros(shape=0)
    diffs = np.array([ratings[a] - ratings[b] + f_a - f_b for a, b, f_a, f_b in matches], dtype=np.float64)
    probs = np.asarray(perf_model.cdf(diffs), dtype=np.float64)
    draws = rng.uniform(size=len(matches))
    return np.where(draws < probs, 1.0, -1.0)


@dataclass(frozen=True)
class RoundRobin(SimulateRule):
    """every pair of players meets n_rounds times"""

    n_rounds: int = 1
    seed: int = 0

    def __post_init__(self):
        _check_rounds(self)

    def simulate(self, ratings, perf_model):
        players = ratings.players
        matches = [
            (players[i], players[j], 0.0, 0.0)
            for _ in range(self.n_rounds)
            for i in range(len(players))
            for j in range(i + 1, len(players))
        ]
        rng = np.random.default_rng(seed=self.seed)
        return _to_competitions(matches, _play(matches, ratings, perf_model, rng), with_factors=False)


@dataclass(frozen=True)
class RoundRobinF(SimulateRule):
    """
    Home and away round robin: every ordered pair meets n_rounds times with the
    first player given FactorA = factor (in rating units) and FactorB = 0.
    """

    n_rounds: int = 1
    factor: float = 1.0
    seed: int = 0

    def __post_init__(self):
        _check_rounds(self)

    def simulate(self, ratings, perf_model):
        players = ratings.players
        matches = [
            (home, away, self.factor, 0.0)
            for _ in range(self.n_rounds)
            for home in players
            for away in players
            if home != away
        ]
        rng = np.random.default_rng(seed=self.seed)
        return _to_competitions(matches, _play(matches, ratings, perf_model, rng), with_factors=True)


@dataclass(frozen=True)
class Elimination(SimulateRule):
    """
    Single elimination bracket seeded by rating.

    Each round the best remaining seed meets the worst, the second best the second worst
    and so on. When the field is odd the best seed has a bye.
    """

    seed: int = 0

    def simulate(self, ratings, perf_model):
        rng = np.random.default_rng(seed=self.seed)
        field = sorted(ratings.players, key=lambda player: -ratings[player])
        matches, outcomes = [], []
        while len(field) > 1:
            byes = field[:1] if len(field) % 2 else []
            rest = field[len(byes):]
            half = len(rest) // 2
            round_matches = [(rest[i], rest[-1 - i], 0.0, 0.0) for i in range(half)]
            round_outcomes = _play(round_matches, ratings, perf_model, rng)
            winners = [
                match[0] if outcome > 0 else match[1] for match, outcome in zip(round_matches, round_outcomes)
            ]
            matches.extend(round_matches)
            outcomes.extend(round_outcomes.tolist())
            field = byes + winners
        return _to_competitions(matches, np.array(outcomes, dtype=np.float64), with_factors=False)


simulate_rule_list = {
    'RoundRobin': RoundRobin,
    'RoundRobinF': RoundRobinF,
    'Elimination': Elimination,
}
simulate_rule_names = [f'Sim{name}' for name in simulate_rule_list]


def simulate(r: RatingsList, model: SimulateRule, perf_model) -> pl.DataFrame:
    """
    Simulate a set of competitions for rated players.

    Parameters:
        r (RatingsList): the players and their ratings
        model (SimulateRule): the type of competition to simulate and its parameters
        perf_model: the performance model, mapping strength differences to outcomes through its cdf
    """
    return model.simulate(r, perf_model)


class GenerateRule:
    """base class for ways of generating rated players"""

    @property
    def name(self) -> str:
        return type(self).__name__

    def sample(self, rng, size: int) -> np.ndarray:
        raise UndefinedRuleError(f'undefined generation rule {self.name}')


@dataclass(frozen=True)
class GenerateUniform(GenerateRule):
    low: float = 1000.0
    high: float = 2000.0
    seed: int = 0

    def __post_init__(self):
        if not self.low < self.high:
            raise InvalidParameterError(f'{self.name}: low must be below high, got {self.low} and {self.high}')

    def sample(self, rng, size):
        return rng.uniform(low=self.low, high=self.high, size=size)


@dataclass(frozen=True)
class GenerateNormal(GenerateRule):
    mean: float = 1500.0
    std: float = 200.0
    seed: int = 0

    def __post_init__(self):
        if not self.std >= 0.0:
            raise InvalidParameterError(f'{self.name}: std must be non-negative, got {self.std}')

    def sample(self, rng, size):
        return rng.normal(loc=self.mean, scale=self.std, size=size)


def generate(m: int, model: GenerateRule) -> RatingsList:
    """
    Generate m rated players named P1, ..., Pm.

    Parameters:
        m (int): the number of players
        model (GenerateRule): the distribution of ratings, seeded by model.seed
    """
    if m < 0:
        raise InvalidParameterError(f'the number of players must be non-negative, got {m}')
    rng = np.random.default_rng(seed=getattr(model, 'seed', 0))
    values = model.sample(rng, m)
    players = [f'P{idx}' for idx in range(1, m + 1)]
    return RatingsList(players, dict(zip(players, values.tolist())))
