from .metrics import angular_errors, orientation_rmse, jitter, summarize
from .rollout import smooth_stream, dt_generalization_test
