"""constants computed once here to avoid recomputation"""
import math

# logistic scale giving the standard chess Elo curve, 400 points is a factor of 10 in odds
DEFAULT_THETA = 400.0 / math.log(10.0)

DEFAULT_R0 = 1500.0
DEFAULT_K = 32.0

# competition table columns
PLAYER_A = 'PlayerA'
PLAYER_B = 'PlayerB'
OUTCOME = 'Outcome'
SCORE_A = 'ScoreA'
SCORE_B = 'ScoreB'
FACTOR_A = 'FactorA'
FACTOR_B = 'FactorB'

REQUIRED_COLUMNS = (PLAYER_A, PLAYER_B, OUTCOME)
SCORE_COLUMNS = (SCORE_A, SCORE_B)

# smallest probability passed to log in scoring rules
LOG_EPS = 1e-15
