#!/usr/bin/env python3
"""
TreeDedup - Find and reclaim duplicate files and directory trees

Pipeline:
- Scan every root into an in-memory snapshot (symlinks are not followed)
- Give every node a content id; regular files are hashed in one batched,
  concurrency-capped read phase with progress and ETA
- Report duplicates at the coarsest level (whole directories where possible)
- Interactively keep one copy or delete, working only from the snapshot
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .. import __version__
from ..core.addressing import ContentAddresser
from ..core.content_reader import HASH_ALGORITHMS, XXHASH_AVAILABLE, ContentReader, HashComputer
from ..core.context import CidContext
from ..core.errors import ConfigError, TreeDedupError
from ..core.grouping import DuplicateGroup, find_duplicates, summarize
from ..core.scanner import scan
from ..core.stats import RunStats
from ..utils.formatting import format_bytes, format_duration, format_number, parse_size
from ..utils.ignore_rules import DEFAULT_IGNORE_PATTERNS, IgnoreRules
from ..utils.interactive_cleaner import InteractiveCleaner

# ---------------------------
# Logging Configuration
# ---------------------------
logging.basicConfig(
    level=logging.INFO,
    format='[%(asctime)s] %(levelname)s: %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

# ---------------------------
# Configuration
# ---------------------------

@dataclass
class Config:
    """Run configuration with smart defaults"""
    # Paths
    scan_paths: List[str] = field(default_factory=lambda: ["."])

    # Performance
    workers: int = field(default_factory=lambda: max(4, os.cpu_count() or 4))
    chunk_size: int = 1024 * 1024  # 1 MB
    progress_interval: float = 2.0

    # Algorithm
    hash_algorithm: str = "sha256"  # md5, sha1, sha256, xxhash

    # Ignore rules
    ignore_patterns: Set[str] = field(default_factory=set)
    use_default_ignores: bool = True

    # Resolution
    interactive: bool = True
    dry_run: bool = False
    top: int = 10

    # Advanced
    retry_attempts: int = 3
    retry_backoff: float = 0.2
    quiet: bool = False
    verbose: bool = False

    def validate(self) -> None:
        """Validate configuration"""
        if not self.scan_paths:
            raise ConfigError("At least one path is required")
        if self.workers < 1:
            raise ConfigError("Workers must be >= 1")
        if self.chunk_size < 1024:
            raise ConfigError("Chunk size must be >= 1KB")
        if self.retry_attempts < 1:
            raise ConfigError("Retry attempts must be >= 1")
        if self.hash_algorithm not in HASH_ALGORITHMS:
            raise ConfigError(f"Unknown hash algorithm: {self.hash_algorithm}")
        if self.hash_algorithm == "xxhash" and not XXHASH_AVAILABLE:
            raise ConfigError("xxhash not available; install treededup[fast] or pick another algorithm")


# ---------------------------
# Pipeline
# ---------------------------

def build_groups(config: Config, stats: Optional[RunStats] = None) -> List[DuplicateGroup]:
    """Scan, address and group; the non-interactive part of a run"""
    config.validate()
    stats = stats if stats is not None else RunStats()

    stats.start_phase("scan")
    roots = scan(config.scan_paths, stats)
    stats.end_phase("scan")

    context = CidContext()
    reader = ContentReader(
        context,
        HashComputer(config.hash_algorithm, config.chunk_size,
                     config.retry_attempts, config.retry_backoff),
        workers=config.workers,
        progress_interval=config.progress_interval,
        stats=stats,
        quiet=config.quiet,
    )
    ignore_rules = IgnoreRules(config.ignore_patterns, use_defaults=config.use_default_ignores)

    stats.start_phase("read")
    roots = ContentAddresser(context, reader, ignore_rules).address(roots)
    stats.end_phase("read")

    groups = find_duplicates(roots)
    stats.duplicate_sets, stats.wasted_space = summarize(groups)
    return groups


def print_report(groups: List[DuplicateGroup], stats: RunStats, top: int) -> None:
    """Non-interactive summary of the largest duplicate groups"""
    count, wasted = summarize(groups)
    print(f"\nFound {format_number(count)} duplicate sets, {format_bytes(wasted)} duplicated")
    print(f"Scanned {format_number(stats.nodes_discovered)} entries, {format_bytes(stats.bytes_discovered)}")
    print(f"Scan: {format_duration(stats.phase_duration('scan'))} | "
          f"Read: {format_duration(stats.phase_duration('read'))} "
          f"({format_bytes(stats.bytes_read)} in {stats.files_read:,} files)")

    for i, group in enumerate(groups[:top]):
        print(f"\n{i + 1}. {group.type.value} {group.cid}: {group.count} copies, "
              f"{format_bytes(group.wasted_space)} duplicated")
        for j, path in enumerate(group.paths):
            print(f"   [{j + 1}] {path}")

    if len(groups) > top:
        print(f"\n... and {len(groups) - top} more")


# ---------------------------
# CLI Interface
# ---------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treededup",
        description="TreeDedup - Find duplicate files and directory trees and reclaim the space",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument("paths", nargs="+", help="Paths to scan (can specify multiple)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Performance
    parser.add_argument("--workers", type=int, help="Concurrent file reads (default: auto)")
    parser.add_argument("--chunk-size", type=parse_size, default="1MB", help="Read chunk size")
    parser.add_argument("--progress-interval", type=float, default=2.0,
                        help="Seconds between progress lines")

    # Algorithm
    parser.add_argument(
        "--algorithm",
        choices=list(HASH_ALGORITHMS),
        default="sha256",
        help="Hash algorithm for file content"
    )

    # Ignore rules
    parser.add_argument("--ignore", nargs="+", default=[],
                        help="Name patterns left out of directory comparison")
    parser.add_argument("--no-default-ignores", action="store_true",
                        help=f"Do not ignore {', '.join(sorted(DEFAULT_IGNORE_PATTERNS))}")

    # Resolution
    parser.add_argument("--no-delete", action="store_true", help="Report only, no interactive deletion")
    parser.add_argument("--dry-run", action="store_true", help="Show deletions without performing them")
    parser.add_argument("--top", type=int, default=10, help="Groups shown with --no-delete")

    # Options
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet mode")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Advanced
    parser.add_argument("--retry-attempts", type=int, default=3, help="Read attempts per file")
    parser.add_argument("--retry-backoff", type=float, default=0.2, help="Retry backoff")
    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        scan_paths=args.paths,
        workers=args.workers if args.workers is not None else Config().workers,
        chunk_size=args.chunk_size,
        progress_interval=args.progress_interval,
        hash_algorithm=args.algorithm,
        ignore_patterns=set(args.ignore),
        use_default_ignores=not args.no_default_ignores,
        interactive=not args.no_delete,
        dry_run=args.dry_run,
        top=args.top,
        retry_attempts=args.retry_attempts,
        retry_backoff=args.retry_backoff,
        quiet=args.quiet,
        verbose=args.verbose,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    # Set logging level
    root_logger = logging.getLogger("treededup")
    if config.quiet:
        root_logger.setLevel(logging.WARNING)
    elif config.verbose:
        root_logger.setLevel(logging.DEBUG)

    stats = RunStats()
    try:
        groups = build_groups(config, stats)

        if config.interactive:
            InteractiveCleaner(groups, dry_run=config.dry_run).run()
        else:
            print_report(groups, stats, config.top)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except TreeDedupError as e:
        logger.error(f"Fatal: {e}")
        return 1

    logger.debug(f"Finished in {format_duration(stats.get_duration())}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
