"""Runtime support: pipeline runner and observability."""
