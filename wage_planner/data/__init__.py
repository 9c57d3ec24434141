from .readers import DataReadError, read_roster, read_roster_frame, standardize_columns

__all__ = ["DataReadError", "read_roster", "read_roster_frame", "standardize_columns"]
