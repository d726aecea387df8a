import logging

import numpy as np
import roboticstoolbox as rtb
from spatialmath import SE3

from rmrc import DataRecorder, KinematicController, ToolboxRobot, pose_error

logger = logging.getLogger("rmrc.demo")


def run_motion(name, robot, control, duration, recorder, dt=0.01, error_fn=None):
    """Integrate the commanded joint velocity at a fixed control rate."""

    t = 0.0
    while t <= duration:
        qdot = control(t)
        q = robot.joint_positions() + qdot * dt
        robot.update_state(q, qdot)

        error_val = error_fn(t) if error_fn is not None else 0.0
        recorder.log_tick(name, t, q, qdot, error_val=error_val)
        t += dt

    return robot.joint_positions()


def main():
    """Main execution function."""

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    # Configuration
    CONTROL_RATE = 100                                      # Hz
    VELOCITY_LIMIT = 2.0                                    # rad/s
    GAIN = 5.0

    # Initialize robot
    logger.info("Initializing robot model...")
    panda = rtb.models.DH.Panda()
    robot = ToolboxRobot(panda, velocity_limits=VELOCITY_LIMIT)
    robot.update_state(np.array([0, -np.pi/4, 0, -3*np.pi/4, 0, np.pi/2, np.pi/4]))

    controller = KinematicController(robot, gain=GAIN)
    recorder = DataRecorder()
    dt = 1.0 / CONTROL_RATE

    # Joint space motion
    q_target = np.array([0.3, -0.5, 0.2, -2.0, 0.1, 1.8, 0.6])
    controller.set_joint_target(q_target)
    duration = controller.joint_trajectory.end_time
    logger.info("Joint space motion over %.3f s", duration)

    run_motion("joint_space", robot, controller.joint_control, duration + 0.5, recorder, dt=dt,
               error_fn=lambda t: np.linalg.norm(q_target - robot.joint_positions()))
    logger.info("Final joint error: %.5f rad", recorder.get_data()["joint_space"]["errors"][-1])

    # Cartesian motion
    start = robot.endpoint_pose()
    target = SE3(0.0, 0.0, -0.15) * start * SE3.Rz(0.3)
    controller.set_target_pose(target, 2.0)
    duration = controller.cartesian_trajectory.end_time
    logger.info("Cartesian motion over %.3f s", duration)

    run_motion("cartesian", robot, controller.cartesian_control, duration + 0.5, recorder, dt=dt,
               error_fn=lambda t: np.linalg.norm(pose_error(target, robot.endpoint_pose())))
    logger.info("Final pose error: %.5f", recorder.get_data()["cartesian"]["errors"][-1])
    logger.info("Manipulability at the end of the motion: %.4f", controller.manipulability())


if __name__ == "__main__":
    main()
