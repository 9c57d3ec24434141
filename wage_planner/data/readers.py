# wage_planner/data/readers.py
"""
Functions for reading roster files (CSV or Parquet) into a Roster.
"""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from wage_planner.state.roster import Roster
from wage_planner.utils.columns import (
    EMP_ID,
    REQUIRED_ROSTER_COLUMNS,
    ROSTER_COLUMN_ALIASES,
)

logger = logging.getLogger(__name__)


class DataReadError(Exception):
    """Custom exception for errors during data reading."""
    pass


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename common spellings (case-insensitive) onto the standardized roster columns."""
    renames = {}
    for col in df.columns:
        target = ROSTER_COLUMN_ALIASES.get(str(col).strip().lower())
        if target is None or target == col:
            continue
        if target in df.columns or target in renames.values():
            logger.warning(f"Both '{col}' and '{target}' columns exist. Using '{target}'.")
            continue
        renames[col] = target
    if renames:
        logger.info(f"Renaming roster columns: {renames}")
        df = df.rename(columns=renames)
    return df


def read_roster_frame(file_path: Union[str, Path]) -> pd.DataFrame:
    """
    Reads roster data from a CSV or Parquet file and standardizes its columns.

    Raises:
        DataReadError: If the file cannot be found, read, or lacks required columns.
    """
    file_path = Path(file_path)
    logger.info(f"Attempting to read roster data from: {file_path}")

    if not file_path.exists():
        logger.error(f"Roster file not found: {file_path}")
        raise DataReadError(f"Roster file not found: {file_path}")

    file_suffix = file_path.suffix.lower()
    try:
        if file_suffix == ".parquet":
            df = pd.read_parquet(file_path)
        elif file_suffix == ".csv":
            # text throughout; ids like "001" and zones like "Lv.3" survive, salaries are coerced later
            df = pd.read_csv(file_path, dtype=str)
        else:
            logger.error(f"Unsupported roster file format: {file_path}. Please use .csv or .parquet.")
            raise DataReadError(f"Unsupported roster file format: {file_path.suffix}")
    except DataReadError:
        raise
    except Exception as e:
        logger.exception(f"An unexpected error occurred while reading roster data from {file_path}")
        raise DataReadError(f"Unexpected error reading data from {file_path}") from e

    logger.info(f"Loaded {len(df)} records from roster file: {file_path}")
    df = standardize_columns(df)

    missing_cols = [col for col in REQUIRED_ROSTER_COLUMNS if col not in df.columns]
    if missing_cols:
        logger.error(f"Roster file {file_path} is missing required columns: {missing_cols}")
        raise DataReadError(f"Missing required roster columns in {file_path}: {missing_cols}")

    if df[EMP_ID].duplicated().any():
        logger.warning("Duplicate values found in the 'employee_id' column. Ensure IDs are unique.")
    return df


def read_roster(file_path: Union[str, Path]) -> Roster:
    """Read a roster file and build the immutable Roster snapshot from it."""
    return Roster.from_frame(read_roster_frame(file_path))
