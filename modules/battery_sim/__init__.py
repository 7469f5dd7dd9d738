"""Random node power status for exercising downstream consumers without hardware."""
