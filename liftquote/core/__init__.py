"""Shared configuration: paths, secrets, startup checks and the quotes log."""
