"""
Eased Parameter Infrastructure

SmoothedParameter wraps a numeric value that chases a target with
fixed-factor exponential easing, once per rendered frame:

    current += (target - current) * factor

The factor is per frame rather than per second, so the easing is
fully determined by the sequence of frames and targets it sees.
Used to keep pointer-driven view angles from jittering.
"""


class SmoothedParameter:
    """Per-frame exponential easing toward a target value.

    Factor controls the "feel":
    - 0.05: slow, floaty follow (attractor camera)
    - 0.2: responsive but smooth
    - 1.0: no smoothing (snaps to target every frame)
    """

    def __init__(self, initial_value, factor=0.05):
        """Initialize smoothed parameter.

        Args:
            initial_value: Starting value (both current and target)
            factor: Fraction of the remaining distance covered per frame (0-1]
        """
        self.target = initial_value
        self.current = initial_value
        self.factor = factor

    def set_target(self, new_target):
        self.target = new_target

    def update(self, factor=None):
        """Advance the easing by one frame and return the new value.

        Args:
            factor: Optional per-call override of the easing factor
        """
        f = self.factor if factor is None else factor
        self.current += (self.target - self.current) * f
        return self.current

    def get_value(self):
        return self.current

    def snap(self, value):
        """Immediately set both target and current (for reset).

        Args:
            value: Value to snap to (no smoothing)
        """
        self.target = value
        self.current = value
