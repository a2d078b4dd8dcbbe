"""standprompt: form-priority prompt composition for display stand generation."""

__version__ = "0.1.0"
