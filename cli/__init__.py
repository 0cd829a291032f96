"""Command line tools built on the camera binding."""
