"""Core domain: models, validation, the metrics context and its encoder."""
