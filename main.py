import argparse
import sys

from heart_failure.errors import PipelineError
from heart_failure.pipeline import PipelineRunner
from heart_failure.synthetic import make_synthetic_records
from heart_failure.utils.logger import get_logger, set_level


def main() -> int:
    """Run the full heart failure modeling pipeline."""
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument("--config", default="config/default.yaml", help="YAML config path")
    parser.add_argument(
        "--synthetic",
        type=int,
        metavar="N",
        help="run on N generated records instead of the configured input file",
    )
    parser.add_argument("--debug", action="store_true", help="log per-fold scores")
    args = parser.parse_args()

    if args.debug:
        set_level("DEBUG")

    try:
        runner = PipelineRunner(args.config)
        df = make_synthetic_records(args.synthetic) if args.synthetic else None
        runner.run(df)
    except PipelineError as exc:
        get_logger("main").error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
