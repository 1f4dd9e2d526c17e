"""Relay core: configuration, language policy, error taxonomy and the relay itself."""
