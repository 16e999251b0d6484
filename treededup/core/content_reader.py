#!/usr/bin/env python3
"""
Content Reader - Batched, concurrency-capped file hashing

Files are registered first and read later. register() only queues the
node and hands back a pending result; run() then sees the whole workload
up front (file count, total bytes), hashes everything on a bounded thread
pool and resolves every pending result to a content id.

A failed read only fails the handle of that file. Callers decide what a
failure means; the addressing engine treats it as fatal.
"""

import hashlib
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import List, Optional, Tuple

from .context import CidContext
from .errors import ConfigError, ContentReadError
from .paths import Node, NodeType
from .progress import ProgressTracker
from .stats import RunStats

# Optional imports
try:
    import xxhash
    XXHASH_AVAILABLE = True
except ImportError:
    XXHASH_AVAILABLE = False

logger = logging.getLogger(__name__)

HASH_ALGORITHMS = ("md5", "sha1", "sha256", "xxhash")


class HashComputer:
    """Compute full-content file hashes with retries"""

    def __init__(self, algorithm: str = "sha256", chunk_size: int = 1024 * 1024,
                 retry_attempts: int = 3, retry_backoff: float = 0.2):
        if algorithm not in HASH_ALGORITHMS:
            raise ConfigError(f"Unknown hash algorithm: {algorithm}")
        if algorithm == "xxhash" and not XXHASH_AVAILABLE:
            raise ConfigError("xxhash algorithm requested but the xxhash package is not installed")
        self.algorithm = algorithm
        self.chunk_size = chunk_size
        self.retry_attempts = max(1, retry_attempts)
        self.retry_backoff = retry_backoff

    def _get_hasher(self):
        """Get hasher for algorithm"""
        if self.algorithm == "xxhash":
            return xxhash.xxh128()
        return hashlib.new(self.algorithm)

    def compute_full_hash(self, path: str) -> Tuple[str, int]:
        """Hash the whole file, returning (hexdigest, bytes read)"""
        for attempt in range(self.retry_attempts):
            try:
                hasher = self._get_hasher()
                bytes_read = 0

                with open(path, "rb") as f:
                    while chunk := f.read(self.chunk_size):
                        hasher.update(chunk)
                        bytes_read += len(chunk)

                return hasher.hexdigest(), bytes_read

            except OSError as e:
                if attempt < self.retry_attempts - 1:
                    logger.debug(f"Retrying {path} after error: {e}")
                    time.sleep(self.retry_backoff * (2 ** attempt))
                    continue
                raise ContentReadError(path, f"Hash error for {path}: {e}") from e


class ContentReader:
    """Collects file reads and executes them in one batch"""

    def __init__(self, context: CidContext, hasher: Optional[HashComputer] = None,
                 workers: int = 8, progress_interval: float = 2.0,
                 stats: Optional[RunStats] = None, quiet: bool = False):
        if workers < 1:
            raise ConfigError("Workers must be >= 1")
        self.context = context
        self.hasher = hasher or HashComputer()
        self.workers = workers
        self.progress_interval = progress_interval
        self.stats = stats if stats is not None else RunStats()
        self.quiet = quiet
        self.pending: List[Tuple[Node, Future]] = []
        self.total_bytes = 0
        self._ran = False

    def register(self, node: Node) -> Future:
        """Queue a read of the node's full content; never blocks"""
        if self._ran:
            raise RuntimeError("ContentReader.run() has already been called")
        if node.type is not NodeType.FILE:
            raise ValueError(f"Only regular files can be read: {node.path}")

        future: Future = Future()
        self.pending.append((node, future))
        self.total_bytes += node.size
        return future

    def run(self) -> None:
        """Read every registered file; returns once every handle is settled"""
        if self._ran:
            raise RuntimeError("ContentReader.run() has already been called")
        self._ran = True

        progress = ProgressTracker(self.total_bytes, self.progress_interval, self.quiet)
        if not self.quiet:
            logger.info(f"Reading {len(self.pending):,} files with {self.workers} workers")

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(self.hasher.compute_full_hash, node.path.get()): (node, handle)
                for node, handle in self.pending
            }

            for future in as_completed(futures):
                node, handle = futures[future]
                try:
                    digest, bytes_read = future.result()
                except ContentReadError as e:
                    self.stats.read_failures += 1
                    self.stats.add_error(str(e))
                    logger.error(str(e))
                    handle.set_exception(e)
                    progress.advance(node.size)
                    continue

                # Interning happens here, on the calling thread only
                cid = self.context.intern_file(f"{bytes_read}:{digest}")
                self.stats.files_read += 1
                self.stats.bytes_read += bytes_read
                handle.set_result(cid)
                progress.advance(node.size)

        progress.update(force=True)
        self.pending = []
