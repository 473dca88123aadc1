from .geometry import quaternion_normalize, quaternion_outer, quaternion_angular_distance
from .linalg import symmetric_eigh, dominant_eigenvector, EigendecompositionError
from .config import load_config
