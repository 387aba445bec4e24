"""Allow running vtl as ``python -m vtl``."""

from vtl.cli.app import main

main()
