"""Foundation layer: stage protocol, errors, configuration."""
