"""Graphics laboratory helpers: timesteps and logging, framebuffer records, unique names and expression-tree pictures."""

__version__ = "0.1.0"