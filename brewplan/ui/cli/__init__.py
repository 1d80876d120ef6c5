"""click command groups registered by ``brewplan.main``."""
