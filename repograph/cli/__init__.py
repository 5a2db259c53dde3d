"""Command-line tools for repograph.

- ``python -m repograph.cli`` -- ingest files and directories, query the
  index, show index statistics, and delete documents.
"""
