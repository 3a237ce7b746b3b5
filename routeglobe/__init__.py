"""Route Globe Monitor: live route events on a 3D globe."""
