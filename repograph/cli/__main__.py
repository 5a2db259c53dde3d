"""Allow ``python -m repograph.cli`` execution."""

from repograph.cli.ingest import main

main()
