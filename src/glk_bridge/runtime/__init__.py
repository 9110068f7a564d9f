"""Runtime services shared across the bridge."""
