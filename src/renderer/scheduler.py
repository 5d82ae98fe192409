# renderer/scheduler.py
"""
Tiled, fork-join rendering across a fixed number of workers.

The image rows are split into contiguous ranges, one per worker. Each worker
renders its range into a private buffer with its own random generator; the
coordinating thread joins every worker and stitches the buffers together in
row order. Only the coordinating thread ever touches the output image.
"""
import logging
import random
import sys
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from renderer.image import save_image

logger = logging.getLogger(__name__)

BACKENDS = ("process", "thread")

# ProcessPoolExecutor refuses more workers than this on Windows.
WINDOWS_MAX_PROCESS_WORKERS = 61


def partition_rows(image_height: int, worker_count: int) -> List[Tuple[int, int]]:
    """
    Split [0, image_height) into worker_count contiguous row ranges.

    Every range gets image_height // worker_count rows and the last one also
    takes the remainder, so the ranges always cover the image exactly.
    Surplus workers receive empty ranges.
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be at least 1, got {worker_count}")
    rows_per_worker = image_height // worker_count
    ranges = []
    for i in range(worker_count):
        start_row = i * rows_per_worker
        end_row = image_height if i == worker_count - 1 else (i + 1) * rows_per_worker
        ranges.append((start_row, end_row))
    return ranges


def worker_seeds(worker_count: int, seed: Optional[int] = None) -> List[int]:
    """
    Independent seeds for each worker's generator. Reproducible when seed is
    given, fresh OS entropy otherwise.
    """
    children = np.random.SeedSequence(seed).spawn(worker_count)
    return [int(child.generate_state(1, dtype=np.uint64)[0]) for child in children]


def pool_size(busy_count: int, backend: str) -> int:
    """
    Number of pool workers for busy_count row ranges. On Windows a process
    pool is capped, and surplus ranges queue behind the running ones.
    """
    if backend == "process" and sys.platform == "win32":
        return min(busy_count, WINDOWS_MAX_PROCESS_WORKERS)
    return busy_count


def render_rows(camera, world, start_row: int, end_row: int, seed: int) -> np.ndarray:
    """Worker entry point: render one row range with a private generator."""
    rng = random.Random(seed)
    return camera.render_chunk(world, start_row, end_row, rng)


class TiledRenderer:
    """
    Renders a scene through a camera by dividing rows among worker_count
    workers.

    backend "process" runs workers in separate processes (camera and scene
    are pickled to them); "thread" runs them in threads of this process.
    """
    def __init__(self, camera, worker_count: int = 1, backend: str = "process",
                 seed: Optional[int] = None):
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")
        if backend not in BACKENDS:
            raise ValueError(f"Unknown backend {backend!r}; expected one of {BACKENDS}")
        self.camera = camera
        self.worker_count = worker_count
        self.backend = backend
        self.seed = seed

    def render_buffers(self, world) -> List[np.ndarray]:
        """
        Initialize the camera, run every worker to completion and return
        their unscaled buffers in row order.
        """
        state = self.camera.initialize()
        ranges = partition_rows(state.image_height, self.worker_count)
        seeds = worker_seeds(self.worker_count, self.seed)
        busy = [k for k, (start, end) in enumerate(ranges) if end > start]

        logger.info("Rendering %dx%d, %d spp, depth %d on %d %s worker(s)",
                    state.image_width, state.image_height, state.samples_per_pixel,
                    state.max_depth, self.worker_count, self.backend)

        buffers = [np.zeros((0, state.image_width, 3), dtype=np.float64) for _ in ranges]
        if len(busy) == 1:
            k = busy[0]
            buffers[k] = render_rows(self.camera, world, ranges[k][0], ranges[k][1], seeds[k])
            return buffers

        executor_cls = ProcessPoolExecutor if self.backend == "process" else ThreadPoolExecutor
        with executor_cls(max_workers=pool_size(len(busy), self.backend)) as executor:
            futures = {
                k: executor.submit(render_rows, self.camera, world,
                                   ranges[k][0], ranges[k][1], seeds[k])
                for k in busy
            }
            # Join in worker order; a failed worker re-raises here.
            for n, k in enumerate(busy, start=1):
                buffers[k] = futures[k].result()
                logger.info("Tile %d/%d done (rows %d-%d)", n, len(busy),
                            ranges[k][0], ranges[k][1] - 1)
        return buffers

    def render(self, world) -> np.ndarray:
        """
        Render the full image. Returns the averaged linear colors, shape
        (image_height, image_width, 3); its row-major flattening is the
        pixel sequence in raster order.
        """
        t0 = time.perf_counter()
        buffers = self.render_buffers(world)
        image = np.concatenate(buffers, axis=0) * self.camera.state.pixel_samples_scale
        logger.info("Render finished in %.2f s", time.perf_counter() - t0)
        return image

    def render_to_file(self, world, path: Union[str, Path], binary: bool = False) -> Path:
        image = self.render(world)
        return save_image(path, image, binary=binary)
