"""Object stores the gateway can serve."""
