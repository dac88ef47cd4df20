"""TTY Waifu: a terminal slideshow of images rendered as ASCII art."""

__version__ = "0.1.0"
