"""CLI subcommands for modgraph."""
