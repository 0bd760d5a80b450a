"""dispatchrun - dispatch a GitHub Actions workflow and find its run id."""

__version__ = "0.1.0"
