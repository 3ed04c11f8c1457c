import logging
import os
import sys
from typing import List, Optional

from csv_io import write_accounts
from errors import MalformedInputError, OutputError
from payments_engine import PaymentsEngine

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_NOT_FOUND = 2
EXIT_PERMISSION_DENIED = 3
EXIT_MALFORMED_INPUT = 4
EXIT_OUTPUT_FAILED = 5
EXIT_READ_FAILED = 6

logger = logging.getLogger(__name__)


def get_log_level() -> int:
    """Read PAYMENTS_LOG_LEVEL, falling back to WARNING for unknown names."""
    level = logging.getLevelName(os.getenv("PAYMENTS_LOG_LEVEL", "WARNING").upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return EXIT_USAGE

    configure_logging()
    filepath = args[0]

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except FileNotFoundError:
        print(f"Error: input file '{filepath}' does not exist", file=sys.stderr)
        return EXIT_NOT_FOUND
    except PermissionError:
        print(f"Error: input file '{filepath}' is not readable", file=sys.stderr)
        return EXIT_PERMISSION_DENIED
    except MalformedInputError as e:
        print(f"Error: input file '{filepath}' has an invalid format: {e}", file=sys.stderr)
        return EXIT_MALFORMED_INPUT
    except OSError as e:
        print(f"Error: input file '{filepath}' could not be read: {e}", file=sys.stderr)
        return EXIT_READ_FAILED

    try:
        write_accounts(accounts, sys.stdout)
        sys.stdout.flush()
    except (OutputError, OSError) as e:
        print(f"Error: unable to write account snapshot: {e}", file=sys.stderr)
        return EXIT_OUTPUT_FAILED

    logger.debug(f"Wrote {len(accounts)} accounts")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
