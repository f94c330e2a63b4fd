"""System configuration service layer."""
