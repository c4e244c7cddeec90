"""Click subcommands of the ``modgraph`` CLI."""
