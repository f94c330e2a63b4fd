"""Core application modules: exceptions, logging and middleware."""
