"""parameter grids for tuning update rules with grid_search, only rules that predict outcomes can be tuned"""
import numpy as np

elo_params = {
    'r0': [1500.0],
    'k': np.linspace(4.0, 64.0, num=16),
    'theta': [400.0 / np.log(10.0)],
}

elo_f_params = {
    'r0': [1500.0],
    'k': np.linspace(4.0, 64.0, num=16),
}

iterate_batch_sizes = [1, 10, 100]

rule_params = {
    'Elo': elo_params,
    'EloF': elo_f_params,
}
