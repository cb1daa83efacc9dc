"""yamlassist: YAML linting and completion for hybrid markdown documents."""

__version__ = "0.3.0"
