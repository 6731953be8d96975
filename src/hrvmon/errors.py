"""Exceptions raised by the metric calculator layer."""


class HrvmonError(Exception):
    """Base class for hrvmon errors."""


class MissingCapabilityError(HrvmonError):
    """A calculator was built without a usable event stream or strategy."""


class CalculatorDestroyedError(HrvmonError):
    """A subscription was attempted on a calculator that has been torn down."""
