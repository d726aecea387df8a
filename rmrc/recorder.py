"""Data recording for trajectory tracking analysis"""

import numpy as np


class DataRecorder:
    """Records control ticks: times, joint positions, commanded velocities and tracking errors."""

    def __init__(self):
        self.history = {}

    def log_tick(self, name, time, q, qdot, error_val=0.0):
        """Records the state and command of one control tick."""

        if name is None:
            return

        # Initialize list for this motion if it doesn't exist
        if name not in self.history:
            self.history[name] = {
                'times': [],
                'joint_positions': [],
                'joint_velocities': [],
                'errors': []
            }

        # Save data
        self.history[name]['times'].append(float(time))
        self.history[name]['joint_positions'].append(np.array(q, dtype=float).copy())
        self.history[name]['joint_velocities'].append(np.array(qdot, dtype=float).copy())
        self.history[name]['errors'].append(float(error_val))

    def get_data(self):
        """Returns the entire recorded history."""

        return self.history
