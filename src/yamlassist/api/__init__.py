"""REST API an editor calls for YAML lint and completions."""
