class PayZoneError(Exception):
    """Exception raised for errors in the pay-zone configuration."""
    pass
