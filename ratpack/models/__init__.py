"""
Models Module
=============

Update rules that turn a ratings list and a table of competitions into new ratings.

Included Rules:
- Elo: recursive probabilistic update with a configurable performance model.
- EloF: Elo that also uses per-player factors such as home advantage.
- Massey: least squares fit of point differentials.
- Colley: Colley's matrix method on wins and losses.
- MasseyColley: Colley's matrix with Massey's point differentials.
- KeenerScores: Perron vector of smoothed score shares.
- Revert: pulls ratings back toward a default rating.
- Iterate: replays competitions in batches through a recursive rule.
- SampleIterate: like Iterate with batches sampled at random.

Every rule provides update_ratings and info, outcome based rules also provide predict_outcome.
"""
from ratpack.models.elo import Elo, EloF
from ratpack.models.massey import Massey
from ratpack.models.colley import Colley, MasseyColley
from ratpack.models.keener import KeenerScores
from ratpack.models.revert import Revert
from ratpack.models.iterate import Iterate, SampleIterate

update_rule_list = {
    'Colley': Colley,
    'Massey': Massey,
    'MasseyColley': MasseyColley,
    'KeenerScores': KeenerScores,
    'Revert': Revert,
    'EloF': EloF,
    'Elo': Elo,
    'Iterate': Iterate,
    'SampleIterate': SampleIterate,
}
update_rule_names = [f'Update{name}' for name in update_rule_list]

__all__ = list(update_rule_list) + ['update_rule_list', 'update_rule_names']
