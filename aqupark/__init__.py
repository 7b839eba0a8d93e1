"""AquPark shop backend."""
