#!/usr/bin/env python3
"""
Wrapper script to run the reattach-operator with Kopf.

Launches Kopf's CLI with all standard arguments after importing the
operator module, which registers the handlers via decorators.

Usage:
    python run_operator.py [any kopf run arguments]

Examples:
    python run_operator.py --verbose --all-namespaces
    python run_operator.py -n my-namespace --log-format=json
"""

import sys


def main() -> int:
    import kopf.cli

    import reattach.app  # noqa: F401

    # Behave as if the user called: kopf run <args>
    sys.argv.insert(1, 'run')
    return kopf.cli.main(prog_name="kopf")


if __name__ == '__main__':
    sys.exit(main())
