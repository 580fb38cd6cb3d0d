"""Event bus transports for cache signals."""
