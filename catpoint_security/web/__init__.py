"""Flask control panel for the security system."""
