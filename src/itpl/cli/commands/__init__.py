"""itpl subcommands, one module per command."""
