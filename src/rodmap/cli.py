"""rodmap CLI entry point.

Usage: rodmap stress [--variant hash|btree] [--substrate blocking|cooperative]
"""
import argparse
import logging
import sys


def _add_stress_parser(subparsers: argparse._SubParsersAction) -> None:
    from rodmap.stress import SUBSTRATES, VARIANTS

    p = subparsers.add_parser(
        "stress",
        help="Hammer a map variant with concurrent get/insert/release.",
    )
    p.add_argument(
        "--variant", choices=VARIANTS + ("all",), default="all",
        help="Key index to use (default: all)",
    )
    p.add_argument(
        "--substrate", choices=SUBSTRATES + ("all",), default="all",
        help="Locking substrate (default: all)",
    )
    p.add_argument(
        "--workers", type=int, default=8,
        help="Concurrent threads or tasks (default: 8)",
    )
    p.add_argument(
        "--keys", type=int, default=32,
        help="Size of the shared key pool (default: 32)",
    )
    p.add_argument(
        "--rounds", type=int, default=2_000,
        help="get-or-insert rounds per worker (default: 2000)",
    )
    p.add_argument(
        "--seed", type=int, default=42,
        help="RNG seed for reproducible runs (default: 42)",
    )


def _run_stress(args: argparse.Namespace) -> int:
    from rodmap.stress import SUBSTRATES, VARIANTS, format_report, run_stress

    variants = VARIANTS if args.variant == "all" else (args.variant,)
    substrates = SUBSTRATES if args.substrate == "all" else (args.substrate,)

    failed = 0
    for substrate in substrates:
        for variant in variants:
            result = run_stress(
                variant=variant,
                substrate=substrate,
                workers=args.workers,
                num_keys=args.keys,
                rounds=args.rounds,
                seed=args.seed,
            )
            print(format_report(result))
            print()
            if not result.clean:
                failed += 1
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rodmap",
        description="Remove-on-drop concurrent maps: stress and inspect.",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"),
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_stress_parser(subparsers)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "stress":
        return _run_stress(args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
