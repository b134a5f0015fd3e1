"""Red tint frame filter."""

import numpy as np


def apply_tint(frame: np.ndarray) -> np.ndarray:
    """
    Tint a BGR frame red, in place.

    Blue and green are halved (truncated, as an 8-bit cast does); red is
    scaled by 1.5 and saturates at 255. Returns the same array.
    """
    if not isinstance(frame, np.ndarray) or frame.dtype != np.uint8:
        raise ValueError("frame must be a uint8 numpy array")
    if frame.ndim != 3 or frame.shape[2] != 3:
        raise ValueError(f"frame must have shape (H, W, 3), got {frame.shape}")

    frame[..., :2] >>= 1
    red = frame[..., 2].astype(np.float32) * 1.5
    np.minimum(red, 255.0, out=red)
    frame[..., 2] = red.astype(np.uint8)
    return frame
