"""catana — idempotent red-team workstation provisioning."""

__version__ = "0.1.0"
