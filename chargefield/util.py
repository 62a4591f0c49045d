import os
from threading import Thread
from typing import Callable, List

import numpy as np

from . import logging


def get_number_of_threads() -> int:
    """Number of threads used by `split_collect`. Can be set using the environment
    variable CHARGEFIELD_THREADS, otherwise half the number of available CPU's is used."""
    threads = os.environ.get('CHARGEFIELD_THREADS')

    if threads is not None:
        return max(int(threads), 1)

    cpu_count = len(os.sched_getaffinity(0)) if hasattr(os, 'sched_getaffinity') else os.cpu_count()

    if cpu_count is None or cpu_count <= 1:
        return 1

    # Assume two hardware threads per physical core
    return cpu_count // 2

def split_collect(f: Callable[[np.ndarray], list], array: np.ndarray) -> List[list]:
    """Split `array` along its first axis in one chunk per thread, apply `f` to every
    chunk on its own thread and return the results in order."""
    threads = min(get_number_of_threads(), len(array))

    if threads <= 1:
        logging.log_debug(f'Running function \'{getattr(f, "__name__", f)}\' on a single thread')
        return [f(array)]

    args = np.array_split(array, threads)
    results: List[list] = [[] for _ in args]

    def set_result(index):
        results[index] = f(args[index])

    workers = [Thread(target=set_result, args=(i,)) for i in range(len(args))]

    for t in workers:
        t.start()
    for t in workers:
        t.join()

    return results
