"""Pure domain helpers: clock, period arithmetic, quantity parsing."""
