"""Settings panel for a Vaultwarden plugin: env-file editing and TLS slot management."""

__version__ = "1.0.0"
