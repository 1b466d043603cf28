"""Rich renderers for CLI text output."""
