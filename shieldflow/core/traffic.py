"""
Synthetic bandwidth samples for the traffic chart
"""

import random
from collections import deque
from typing import Deque, List, Optional, Tuple

from .constants import TRAFFIC_WINDOW, DOWNLOAD_RANGE, UPLOAD_RANGE
from .types import TrafficSample


class TrafficGenerator:
    """Sliding window of fabricated traffic samples"""

    def __init__(self, window: int = TRAFFIC_WINDOW,
                 rng: Optional[random.Random] = None,
                 download_range: Tuple[float, float] = DOWNLOAD_RANGE,
                 upload_range: Tuple[float, float] = UPLOAD_RANGE):
        if window <= 0:
            raise ValueError("window must be positive")
        self.window = window
        self.rng = rng or random.Random()
        self.download_range = download_range
        self.upload_range = upload_range
        self._samples: Deque[TrafficSample] = deque(maxlen=window)
        self.reset()

    @property
    def samples(self) -> List[TrafficSample]:
        """Samples, oldest first"""
        return list(self._samples)

    def reset(self, timestamp: float = 0.0):
        """Refill the window with zero samples"""
        self._samples.clear()
        self._samples.extend(
            TrafficSample(timestamp=timestamp) for _ in range(self.window)
        )

    def sample(self, timestamp: float) -> TrafficSample:
        """Append one random sample, evicting the oldest"""
        point = TrafficSample(
            timestamp=timestamp,
            download_mbps=self._uniform(self.download_range),
            upload_mbps=self._uniform(self.upload_range),
        )
        self._samples.append(point)
        return point

    def latest(self) -> TrafficSample:
        return self._samples[-1]

    def is_idle(self) -> bool:
        return all(
            s.download_mbps == 0 and s.upload_mbps == 0
            for s in self._samples
        )

    def _uniform(self, bounds: Tuple[float, float]) -> float:
        low, high = bounds
        # random() is in [0, 1), keeping the upper bound exclusive
        return low + self.rng.random() * (high - low)
