class ConfigurationError(RuntimeError):
    """Raised when a collaborator the request depends on was never set up."""


class RecordClassificationError(ValueError):
    """Raised when stored record text does not start with a level-0 record line."""
