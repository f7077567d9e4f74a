"""Runs a .rl file with the rascal interpreter, or starts the interactive shell if no file is given. Also uses the error
handling context manager. Called from the rascal executable script.
"""

import argparse
import logging

from rascal.lang.error import ErrorHandler
from rascal.lang.session import Session
from rascal.lang.shell import Shell
from rascal.lang.values import UNIT, render

VERSION = "0.1.0"


def main(argv=None):
    """Runs rascal interpreter. Called from rascal executable script."""
    parser = argparse.ArgumentParser(prog="rascal")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to interactive mode)", nargs="?")
    parser.add_argument("--verbose", help="log interpreter stages", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    with ErrorHandler() as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            sess.run()

            for value in sess.results:
                if value is not UNIT:
                    print(render(value))

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
