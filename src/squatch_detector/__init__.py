"""Squatch Detector MCP Server.

Upload a blurry photo, get a scientific-sounding verdict on whether it shows
a Sasquatch. A vision model describes the image; a fixed set of hand-tuned
rules turns that description into a 0-100 Squatch score.
"""

__version__ = "0.1.0"
