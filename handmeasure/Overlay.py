from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from handmeasure.HandData import Hand
from handmeasure.HandShapeRecognizer import RecognitionResult
from handmeasure.Joints import FingerName
from handmeasure.Transforms import degrees_from_radians

# BGR
FINGER_COLORS: Dict[FingerName, Tuple[int, int, int]] = {
    FingerName.THUMB: (255, 0, 0),
    FingerName.INDEX_FINGER: (0, 255, 0),
    FingerName.MIDDLE_FINGER: (0, 255, 255),
    FingerName.RING_FINGER: (0, 165, 255),
    FingerName.LITTLE_FINGER: (0, 0, 255),
}


def project_points(points, camera_matrix, rvec=None, tvec=None, dist_coeffs=None):
    """
    Project Nx3 world points to pixels.
    Returns (Nx2 pixel array, N bool mask of points in front of the camera).
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    rvec = np.zeros((3, 1)) if rvec is None else np.asarray(rvec, dtype=np.float64).reshape(3, 1)
    tvec = np.zeros((3, 1)) if tvec is None else np.asarray(tvec, dtype=np.float64).reshape(3, 1)
    dist_coeffs = np.zeros((5, 1)) if dist_coeffs is None else np.asarray(dist_coeffs, dtype=np.float64)
    camera_matrix = np.asarray(camera_matrix, dtype=np.float64)

    if len(points) == 0:
        return np.zeros((0, 2)), np.zeros((0,), dtype=bool)

    rot, _ = cv2.Rodrigues(rvec)
    depth = (points @ rot.T + tvec.reshape(1, 3))[:, 2]

    pixels, _ = cv2.projectPoints(points.reshape(-1, 1, 3), rvec, tvec, camera_matrix, dist_coeffs)
    return pixels.reshape(-1, 2), depth > 1e-6


def draw_hand(
    image,
    hand: Hand,
    camera_matrix,
    result: Optional[RecognitionResult] = None,
    rvec=None,
    tvec=None,
    dist_coeffs=None,
    radius: int = 3,
    font_scale: float = 0.4,
    thickness: int = 1,
):
    """
    Draw each finger's joints and bones, and label the tip with state and bend (degrees).
    Untracked joints are drawn hollow. Draws in place and returns the image.
    """
    h, w = image.shape[:2]
    for name, finger in hand.fingers.items():
        color = FINGER_COLORS.get(name, (255, 255, 255))
        positions = np.array([j.position for j in finger.joints])
        pixels, visible = project_points(positions, camera_matrix, rvec, tvec, dist_coeffs)
        pts = [(int(round(x)), int(round(y))) for x, y in pixels]

        for i in range(len(pts) - 1):
            if visible[i] and visible[i + 1]:
                cv2.line(image, pts[i], pts[i + 1], color, thickness, cv2.LINE_AA)

        for joint, pt, vis in zip(finger.joints, pts, visible):
            if not vis:
                continue
            cv2.circle(image, pt, radius, color, -1 if joint.is_tracked else 1, cv2.LINE_AA)

        if not visible[0]:
            continue
        bend_deg = degrees_from_radians(finger.bend)
        if result is not None:
            text = f"{result.state_of(name).value} {bend_deg:.0f}"
        else:
            text = f"{bend_deg:.0f}"
        x = min(max(pts[0][0] + radius + 2, 0), w - 1)
        y = min(max(pts[0][1], 0), h - 1)
        cv2.putText(image, text, (x, y), cv2.FONT_HERSHEY_SIMPLEX, font_scale, color, thickness, cv2.LINE_AA)
    return image
