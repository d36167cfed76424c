"""Contains the screen buffer which images are rendered into."""
