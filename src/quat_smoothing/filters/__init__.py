from .quaternion_smoothing import QuaternionAverager
