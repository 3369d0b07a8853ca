#!/usr/bin/env python3
import argparse
import logging

from jobshop.benchmark import run_benchmark
from jobshop.config import build_run_config, load_config


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="JSSP greedy / descent / tabu solvers")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to the YAML/JSON configuration file",
    )
    parser.add_argument("--out", default=None, help="Output directory (overrides charts.dir)")
    args = parser.parse_args(argv)

    cfg = build_run_config(load_config(args.config))
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    records = run_benchmark(cfg, out_dir=args.out)
    best = min(records, key=lambda r: r.cmax, default=None)
    if best is not None:
        logging.getLogger("jobshop").info(
            "Overall best solver=%s instance=%s cmax=%d", best.solver, best.instance, best.cmax
        )


if __name__ == "__main__":
    main()
