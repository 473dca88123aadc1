from quat_smoothing.filters.quaternion_smoothing import QuaternionAverager
from quat_smoothing.utils.linalg import EigendecompositionError

__version__ = "0.1.0"
