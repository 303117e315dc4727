"""Track loading and video output."""
