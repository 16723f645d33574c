"""Pure transformations over stop and arrival data."""
