"""Infrastructure: settings, logging and the slot catalog."""
