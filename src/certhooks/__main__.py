"""Allow ``python -m certhooks``."""

from certhooks.cli.main import main

main()
