"""Create and update validation rules."""
