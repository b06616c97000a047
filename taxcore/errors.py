"""Exception types.

Absent input data never raises; these cover configuration and
contract problems only.
"""


class TaxCoreError(Exception):
    """Base class for all taxcore errors."""


class ConfigurationError(TaxCoreError):
    """A parameter file is missing or malformed."""


class InvalidBracketTable(ConfigurationError):
    """A bracket table violates ordering or rate invariants."""


class FieldContractError(TaxCoreError):
    """A form's field list does not match its PDF template."""


class LineCycleError(TaxCoreError):
    """A line depends on its own evaluation."""

    def __init__(self, path):
        self.path = list(path)
        chain = " -> ".join(f"{tag}.{name}" for tag, name in self.path)
        super().__init__(f"Line cycle detected: {chain}")
