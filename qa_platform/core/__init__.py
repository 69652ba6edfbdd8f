"""Core layer: configuration, exceptions, logging and interfaces."""
