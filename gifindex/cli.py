from __future__ import annotations

import argparse
import sys

from .config import ConfigError, load_config
from .discovery import DiscoveryError
from .importer import CopyError
from .logging_utils import setup_logging
from .naming import IdentifierError
from .optimizer import OptimizerError
from .pipeline import PipelineError, run_pipeline


FATAL_ERRORS = (ConfigError, PipelineError, DiscoveryError, CopyError, IdentifierError, OptimizerError)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gifindex",
        description="Import messaging GIF attachments into an archive and build its gallery",
    )
    p.add_argument("--dir", default=None, help="Target archive directory (default: current directory)")
    return p


def cmd_run(args: argparse.Namespace) -> int:
    try:
        cfg = load_config(archive_dir=args.dir)
    except ConfigError as e:
        logger = setup_logging()
        logger.error(str(e))
        return 2

    logger = setup_logging(log_file=cfg.log_file, verbose=cfg.verbose)
    logger.info(f"Archive: {cfg.archive_dir}")
    try:
        result = run_pipeline(cfg=cfg, logger=logger)
    except FATAL_ERRORS as e:
        # messages already carry guidance
        logger.error(str(e))
        return 2
    except Exception as e:
        error_type = type(e).__name__
        logger.error(f"Unexpected error ({error_type}): {e}")
        return 2

    logger.info(
        f"Done: {len(result.imported)} imported, {len(result.optimized)} optimized, "
        f"{len(result.pages)} pages"
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    rc = cmd_run(args)
    raise SystemExit(rc)
