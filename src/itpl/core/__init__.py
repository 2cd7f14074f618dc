"""Core building blocks for itpl: template syntax, composition, storage and config."""
